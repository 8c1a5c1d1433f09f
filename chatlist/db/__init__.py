from .base import Base
from .models import Message, UserProfile

__all__ = [
    "Base",
    "Message",
    "UserProfile",
]
