from datetime import datetime
from pydantic import BaseModel, Field


class VideoCreate(BaseModel):
    """POST /api/videos body. Unknown fields are ignored."""
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    video_url: str = Field(alias="videoUrl", min_length=1)
    thumbnail_url: str = Field(alias="thumbnailUrl", min_length=1)
    private: bool | None = None

    class Config:
        populate_by_name = True


class VideoResponse(BaseModel):
    id: str
    title: str
    description: str
    video_url: str = Field(alias="videoUrl")
    thumbnail_url: str = Field(alias="thumbnailUrl")
    private: bool
    created_at: datetime = Field(alias="createdAt")

    class Config:
        from_attributes = True
        populate_by_name = True


class VideoListResponse(BaseModel):
    videos: list[VideoResponse]
