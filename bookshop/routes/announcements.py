from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, or_, select

from bookshop.database import get_session
from bookshop.dependencies.admin import require_admin
from bookshop.models.announcement import Announcement
from bookshop.models.user import User
from bookshop.schemas.announcement_schemas import AnnouncementCreate, AnnouncementRead
from bookshop.utils.clock import utcnow

router = APIRouter()


def _get_announcement(session: Session, announcement_id: int) -> Announcement:
    announcement = session.get(Announcement, announcement_id)
    if not announcement:
        raise HTTPException(404, "Announcement not found")
    return announcement


def _apply(announcement: Announcement, data: AnnouncementCreate):
    announcement.title = data.title
    announcement.content = data.content
    announcement.start_date = data.start_date
    announcement.end_date = data.end_date
    if data.bg_color:
        announcement.bg_color = data.bg_color
    if data.text_color:
        announcement.text_color = data.text_color


# ---------- PUBLIC ----------

@router.get("", response_model=List[AnnouncementRead])
def active_announcements(session: Session = Depends(get_session)):
    now = utcnow()
    return session.exec(
        select(Announcement)
        .where(
            Announcement.is_active == True,  # noqa: E712
            Announcement.start_date <= now,
            or_(Announcement.end_date == None, Announcement.end_date >= now),  # noqa: E711
        )
        .order_by(Announcement.created_at.desc(), Announcement.id.desc())
    ).all()


# ---------- ADMIN ----------

@router.get("/admin", response_model=List[AnnouncementRead])
def all_announcements(
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    return session.exec(
        select(Announcement).order_by(Announcement.created_at.desc(), Announcement.id.desc())
    ).all()


@router.post("", response_model=AnnouncementRead, status_code=status.HTTP_201_CREATED)
def create_announcement(
    data: AnnouncementCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    announcement = Announcement(
        title=data.title,
        content=data.content,
        start_date=data.start_date,
        created_by_id=admin.id,
    )
    _apply(announcement, data)

    session.add(announcement)
    session.commit()
    session.refresh(announcement)
    return announcement


@router.get("/{announcement_id}", response_model=AnnouncementRead)
def get_announcement(
    announcement_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    return _get_announcement(session, announcement_id)


@router.put("/{announcement_id}", response_model=AnnouncementRead)
def update_announcement(
    announcement_id: int,
    data: AnnouncementCreate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    announcement = _get_announcement(session, announcement_id)
    _apply(announcement, data)

    session.add(announcement)
    session.commit()
    session.refresh(announcement)
    return announcement


@router.put("/{announcement_id}/toggle", response_model=AnnouncementRead)
def toggle_announcement(
    announcement_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    announcement = _get_announcement(session, announcement_id)
    announcement.is_active = not announcement.is_active

    session.add(announcement)
    session.commit()
    session.refresh(announcement)
    return announcement


@router.delete("/{announcement_id}")
def delete_announcement(
    announcement_id: int,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin)
):
    announcement = _get_announcement(session, announcement_id)
    session.delete(announcement)
    session.commit()
    return {"message": "Announcement deleted"}
