"""
Video persistence. Visibility is decided by the caller: authenticated sessions see
everything, anonymous requests only public rows.
"""
from sqlalchemy import desc
from sqlalchemy.orm import Session

from videoshare.models.video import Video
from videoshare.schemas.video import VideoCreate


def visibility_filter(authenticated: bool) -> dict:
    """Filter for list_videos: {} when signed in, {"private": False} otherwise."""
    if authenticated:
        return {}
    return {"private": False}


def list_videos(db: Session, visibility: dict) -> list[Video]:
    """Videos matching `visibility`, newest first. Rows are detached from the session."""
    q = db.query(Video)
    if visibility:
        q = q.filter_by(**visibility)
    items = q.order_by(desc(Video.created_at)).all()
    db.expunge_all()
    return items


def create_video(db: Session, data: VideoCreate) -> Video:
    """Insert a video; `private` defaults to False when not given."""
    video = Video(
        title=data.title,
        description=data.description,
        video_url=data.video_url,
        thumbnail_url=data.thumbnail_url,
        private=data.private if data.private is not None else False,
    )
    db.add(video)
    db.commit()
    db.refresh(video)
    return video
