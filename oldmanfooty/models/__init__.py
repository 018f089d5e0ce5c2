"""Models package initialization."""

from .base import Base
from .club import Club
from .user import User
from .carnival import Carnival
from .sync_log import SyncLog

__all__ = ['Base', 'Club', 'User', 'Carnival', 'SyncLog']
