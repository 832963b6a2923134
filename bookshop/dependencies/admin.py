from fastapi import Depends, HTTPException
from bookshop.models.user import User, UserRole
from bookshop.utils.token import get_current_user


def require_roles(*roles: UserRole):
    def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return current_user

    return checker


def require_admin(current_user: User = Depends(get_current_user)):
    if current_user.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user


require_staff = require_roles(UserRole.staff, UserRole.admin)
