from sqlalchemy import func
from sqlmodel import select

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def normalize_page(page: int | None, limit: int | None) -> tuple[int, int]:
    if page is None or page < 1:
        page = 1

    if limit is None or limit < 1:
        limit = DEFAULT_PAGE_SIZE

    return page, min(limit, MAX_PAGE_SIZE)


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit


def paginate(
    *,
    session,
    query,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
):
    page, limit = normalize_page(page, limit)
    offset = (page - 1) * limit

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    results = session.exec(
        query.offset(offset).limit(limit)
    ).all()

    return {
        "total_items": total,
        "total_pages": total_pages(total, limit),
        "current_page": page,
        "limit": limit,
        "results": results,
    }
