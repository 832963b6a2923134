import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bookshop.config import settings
from bookshop.database import create_db_and_tables
from bookshop.exceptions import BookshopError
from bookshop.logging_config import setup_logging
from bookshop.routes import (
    announcements,
    auth,
    bookmarks,
    books,
    cart,
    health,
    orders,
    reviews,
    users,
)

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local; elsewhere alembic owns the schema
    if settings.ENV == "local":
        create_db_and_tables()
    yield


app = FastAPI(title=f"{settings.STORE_NAME} API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BookshopError)
async def bookshop_error_handler(request: Request, exc: BookshopError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(books.router, prefix="/api/books", tags=["Books"])
app.include_router(bookmarks.router, prefix="/api/bookmarks", tags=["Bookmarks"])
app.include_router(cart.router, prefix="/api/cart", tags=["Cart"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(reviews.router, prefix="/api/reviews", tags=["Reviews"])
app.include_router(announcements.router, prefix="/api/announcements", tags=["Announcements"])
app.include_router(health.router, prefix="/api", tags=["Health"])


@app.get("/")
def root():
    return {
        "name": f"{settings.STORE_NAME} API",
        "docs": "/docs",
        "health": "/api/health",
    }
