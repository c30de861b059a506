"""
Video feed. Anyone may list (private entries only with a session); creating requires a session.
Media itself is hosted elsewhere; records only hold the URLs.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.orm import Session

from videoshare.auth import get_optional_session, require_session
from videoshare.database import get_db
from videoshare.errors import UnexpectedError, ValidationError
from videoshare.repositories.video_repository import create_video, list_videos, visibility_filter
from videoshare.schemas.user import SessionData
from videoshare.schemas.video import VideoCreate, VideoListResponse, VideoResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/videos", tags=["videos"])

MISSING_FIELDS = "Missing required fields"


@router.get("", response_model=VideoListResponse)
def get_videos(
    session: SessionData | None = Depends(get_optional_session),
    db: Session = Depends(get_db),
):
    """All videos for signed-in users, public ones otherwise. Newest first."""
    try:
        items = list_videos(db, visibility_filter(session is not None))
    except Exception as e:
        logger.exception("Error fetching videos")
        raise UnexpectedError("Failed to fetch videos") from e
    return VideoListResponse(videos=[VideoResponse.model_validate(v) for v in items])


async def _video_create_body(request: Request) -> VideoCreate:
    try:
        body = await request.json()
    except ValueError as e:
        raise ValidationError(MISSING_FIELDS) from e
    if not isinstance(body, dict):
        raise ValidationError(MISSING_FIELDS)
    try:
        return VideoCreate.model_validate(body)
    except SchemaValidationError as e:
        raise ValidationError(MISSING_FIELDS) from e


@router.post("", response_model=VideoResponse)
async def post_video(
    request: Request,
    session: SessionData = Depends(require_session),
    db: Session = Depends(get_db),
):
    """Create a video entry. 401 without session, 400 if title/description/videoUrl/thumbnailUrl missing."""
    data = await _video_create_body(request)
    try:
        video = await run_in_threadpool(create_video, db, data)
    except Exception as e:
        db.rollback()
        logger.exception("Error creating video")
        raise UnexpectedError("Failed to create video") from e
    logger.info("Video %s created by user %s", video.id, session.user.id)
    return VideoResponse.model_validate(video)
