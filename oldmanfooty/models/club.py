"""Club model definition."""

from typing import Any, Dict

from sqlalchemy import Boolean, Column, DateTime, Integer, String

from .base import Base
from ..utils.timezone import now_sydney


class Club(Base):
    """
    A masters rugby league club.

    Fields:
        id: Unique identifier
        club_name: Display name of the club
        state: Australian state code the club is based in (optional)
        is_active: Inactive clubs cannot claim carnivals
        created_at: When the club was registered
    """
    __tablename__ = 'clubs'

    id = Column(Integer, primary_key=True, autoincrement=True)
    club_name = Column(String(200), nullable=False)
    state = Column(String(3))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_sydney)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'club_name': self.club_name,
            'state': self.state,
            'is_active': self.is_active,
        }

    def __repr__(self) -> str:
        return f"<Club {self.club_name}>"
