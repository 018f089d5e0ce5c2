"""User model definition."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from .base import Base
from ..utils.timezone import now_sydney


class User(Base):
    """
    A club delegate or administrator.

    Fields:
        id: Unique identifier
        email: Login and contact email
        first_name, last_name: Name used when the user becomes a carnival contact
        phone_number: Contact phone (optional)
        club_id: Club the user is a delegate of (optional)
        is_admin: Administrators may release, merge and claim on behalf of clubs
        is_primary_delegate: Main contact for the club
        is_active: Deactivated users keep their records but cannot act
    """
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False, default='')
    last_name = Column(String(100), nullable=False, default='')
    phone_number = Column(String(50))
    club_id = Column(Integer, ForeignKey('clubs.id'))
    is_admin = Column(Boolean, nullable=False, default=False)
    is_primary_delegate = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=now_sydney)

    club = relationship('Club')

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"<User {self.email}>"
