"""Carnival model definition."""

from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text,
    case, func,
)
from sqlalchemy.orm import Session, validates

from .base import Base
from ..utils.timezone import now_sydney, today_sydney

CONTACT_UNAVAILABLE = 'Contact details not available'


class Carnival(Base):
    """
    A masters rugby league carnival.

    A carnival is either entered by a club delegate or imported from
    MySideline. Imported carnivals start unclaimed (no owning user or club)
    and can later be claimed, or merged with a delegate's own submission.

    Identity fields:
        title: Display title, trimmed on assignment
        external_title: Title as published by MySideline, used as a matching alias
        date: Calendar date of the carnival
        external_id: MySideline identifier

    Ownership fields:
        created_by_user_id: Owning user, null while unclaimed
        club_id: Owning club, null while unclaimed
        claimed_at: When a user took over the record
        is_manually_entered: True once any user has supplied data; never reset

    Lifecycle fields:
        is_active: Visible in listings
        is_disabled: Hidden entirely (archived after an admin merge)
        last_external_sync: Last time the MySideline sync touched the record
    """
    __tablename__ = 'carnivals'

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identity
    title = Column(String(255), nullable=False)
    external_title = Column(String(255))
    date = Column(Date, index=True)
    external_id = Column(String(64), index=True)
    external_address = Column(Text)
    external_date = Column(Date)

    # Ownership
    created_by_user_id = Column(Integer, ForeignKey('users.id'), index=True)
    club_id = Column(Integer, ForeignKey('clubs.id'))
    claimed_at = Column(DateTime(timezone=True))
    is_manually_entered = Column(Boolean, nullable=False, default=True, index=True)

    # Lifecycle
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_disabled = Column(Boolean, nullable=False, default=False)
    disabled_at = Column(DateTime(timezone=True))
    disabled_by_user_id = Column(Integer, ForeignKey('users.id'))
    last_external_sync = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=now_sydney, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_sydney, onupdate=now_sydney, nullable=False)

    # Schedule and location
    end_date = Column(Date)
    state = Column(String(3), index=True)
    venue_name = Column(String(200))
    location_address = Column(Text)
    location_address_line1 = Column(String(200))
    location_address_line2 = Column(String(200))
    location_suburb = Column(String(100))
    location_postcode = Column(String(10))
    location_country = Column(String(50), default='Australia')
    location_latitude = Column(Numeric(10, 8, asdecimal=False))
    location_longitude = Column(Numeric(11, 8, asdecimal=False))
    google_maps_url = Column(Text)

    # Contact
    organiser_contact_name = Column(String(255))
    organiser_contact_email = Column(String(255))
    organiser_contact_phone = Column(String(50))
    original_external_contact_email = Column(String(255))

    # Details
    schedule_details = Column(Text)
    registration_link = Column(Text)
    fees_description = Column(Text)
    call_for_volunteers = Column(Text)
    admin_notes = Column(Text)

    # Uploaded files
    club_logo_url = Column(Text)
    promotional_image_url = Column(Text)
    draw_file_url = Column(Text)
    draw_file_name = Column(String(255))
    draw_title = Column(String(255))
    draw_description = Column(Text)

    # Social links
    social_media_facebook = Column(Text)
    social_media_instagram = Column(Text)
    social_media_twitter = Column(Text)
    social_media_website = Column(Text)

    # Registration
    max_teams = Column(Integer)
    current_registrations = Column(Integer, nullable=False, default=0)
    is_registration_open = Column(Boolean, nullable=False, default=True)
    registration_deadline = Column(DateTime(timezone=True))

    @validates(
        'title', 'external_title', 'venue_name', 'location_address',
        'location_address_line1', 'location_address_line2', 'location_suburb',
        'location_postcode', 'location_country', 'organiser_contact_name',
        'organiser_contact_phone',
    )
    def _strip_text(self, key, value):
        return value.strip() if isinstance(value, str) else value

    @validates('organiser_contact_email', 'original_external_contact_email')
    def _normalise_email(self, key, value):
        return value.strip().lower() if isinstance(value, str) else value

    @validates(
        'registration_link', 'social_media_facebook', 'social_media_instagram',
        'social_media_twitter', 'social_media_website',
    )
    def _blank_link_to_none(self, key, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @validates('date', 'end_date', 'external_date')
    def _coerce_date(self, key, value):
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str):
            return date.fromisoformat(value.strip()[:10]) if value.strip() else None
        if value is not None and not isinstance(value, date):
            raise ValueError(f"{key} must be a date, got {value!r}")
        return value

    @validates('is_manually_entered')
    def _keep_manually_entered(self, key, value):
        if self.is_manually_entered and not value:
            raise ValueError("is_manually_entered cannot be reset once a user has supplied data")
        return bool(value)

    @property
    def is_external(self) -> bool:
        """True when the record came from MySideline."""
        return bool(self.external_id) or self.last_external_sync is not None

    @property
    def is_claimed(self) -> bool:
        return self.claimed_at is not None

    @property
    def status(self) -> Optional[str]:
        """'completed', 'today', 'upcoming' (within a week) or 'future'."""
        if not self.date:
            return None
        today = today_sydney()
        if self.date < today:
            return 'completed'
        if self.date == today:
            return 'today'
        if (self.date - today).days <= 7:
            return 'upcoming'
        return 'future'

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = {column.name: getattr(self, column.name) for column in self.__table__.columns}
        data['status'] = self.status
        data['is_external'] = self.is_external
        return data

    def public_display_data(self) -> Dict[str, Any]:
        """Data for public pages. Inactive carnivals hide contact details and links."""
        data = self.to_dict()
        if self.is_active:
            return data

        data.update({
            'organiser_contact_email': obfuscate_email(self.organiser_contact_email),
            'organiser_contact_phone': obfuscate_phone(self.organiser_contact_phone),
            'registration_link': None,
            'social_media_facebook': None,
            'social_media_instagram': None,
            'social_media_twitter': None,
            'social_media_website': None,
            'is_registration_disabled': True,
        })
        return data

    @classmethod
    def get_statistics(cls, session: Session) -> Dict[str, int]:
        """Counts of all, active, manually entered and imported carnivals."""
        total, active, manual, imported = session.query(
            func.count(cls.id),
            func.count(case((cls.is_active.is_(True), 1))),
            func.count(case((cls.is_manually_entered.is_(True), 1))),
            func.count(case((cls.is_manually_entered.is_(False), 1))),
        ).one()
        return {
            'total_carnivals': total,
            'active_carnivals': active,
            'manual_carnivals': manual,
            'imported_carnivals': imported,
        }

    def __repr__(self) -> str:
        return f"<Carnival {self.title} @ {self.date}>"


def obfuscate_email(email: Optional[str]) -> str:
    """'organiser@example.com' -> 'or***r@e***.com'."""
    if not email or '@' not in email:
        return CONTACT_UNAVAILABLE

    local_part, domain = email.split('@', 1)
    if not domain:
        return CONTACT_UNAVAILABLE

    obfuscated_local = f"{local_part[:2]}***{local_part[-1]}" if len(local_part) > 3 else '***'
    domain_parts = domain.split('.')
    if len(domain_parts) > 1:
        obfuscated_domain = f"{domain_parts[0][:1]}***.{domain_parts[-1]}"
    else:
        obfuscated_domain = '***'
    return f"{obfuscated_local}@{obfuscated_domain}"


def obfuscate_phone(phone: Optional[str]) -> str:
    """Keep the first two and last two alphanumeric characters."""
    if not phone:
        return CONTACT_UNAVAILABLE
    alnum = ''.join(ch for ch in phone if ch.isalnum())
    if len(alnum) < 6:
        return CONTACT_UNAVAILABLE
    return f"{alnum[:2]}***{alnum[-2:]}"
