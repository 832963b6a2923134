from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional
from datetime import datetime


class UserRegister(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    confirm_password: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None

    @model_validator(mode="after")
    def validate_passwords(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str
    role: str


class UserProfile(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: EmailStr
    role: str
    address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    member_since: datetime
    successful_order_count: int
    has_loyalty_discount: bool
