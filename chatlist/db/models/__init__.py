from .chat import Message
from .profiles import UserProfile

__all__ = [
    "Message",
    "UserProfile",
]
