"""
Sparkz Backend: ORM Models
===========================

Importing this package registers every table with `Base.metadata`.
"""

from app.models.user import User
from app.models.stream import Stream
from app.models.follow import Follow
from app.models.chat import ChatMessage
from app.models.schedule import Schedule

__all__ = ["User", "Stream", "Follow", "ChatMessage", "Schedule"]
