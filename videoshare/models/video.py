"""Video entry pointing at externally hosted media (video file + thumbnail image)."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Text, Boolean, DateTime
from videoshare.database import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    video_url = Column(String(2048), nullable=False)
    thumbnail_url = Column(String(2048), nullable=False)
    private = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
