from videoshare.models.user import User
from videoshare.models.video import Video

__all__ = ["User", "Video"]
