"""Application settings evaluated once at process start.

The settings object is built by ``AppConfig.from_environment()`` when the
application or a script starts and is then handed explicitly to whatever
needs it (the FastAPI app, the sync run, the notifier). Nothing else in the
package reads feature flags from ``os.environ``.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .environment import IS_PRODUCTION_ENVIRONMENT

DEFAULT_MYSIDELINE_SEARCH_URL = (
    'https://api.mysideline.xyz/nrl/api/v1/portal-public/registration/search'
)
DEFAULT_MYSIDELINE_EVENT_URL = (
    'https://profile.mysideline.com.au/register/clubsearch/'
    '?source=rugby-league&entityType=team&isEntityIdSearch=true&entity=true&criteria='
)

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def _flag(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in TRUE_VALUES


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, '').strip()
    return int(raw) if raw.isdigit() else default


@dataclass
class SmtpConfig:
    """Outbound mail settings. An empty host means notifications are only logged."""

    host: Optional[str] = None
    port: Optional[int] = None
    username: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None
    use_tls: bool = True
    use_ssl: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.host)


@dataclass
class AppConfig:
    """
    Process-wide configuration.

    Fields:
        coming_soon_mode: Serve a 503 "coming soon" response for public routes
        maintenance_mode: Serve a 503 maintenance response for public routes
        mysideline_sync_enabled: Whether the MySideline sync may run at all
        admin_api_key: Key expected in the Authorization header of admin triggers
        mysideline_search_url: MySideline registration search API
        mysideline_event_url: Prefix of the public registration link for an event
        mysideline_timeout: Request timeout in seconds for MySideline calls
        sync_interval_hours: Minimum hours between automatic syncs
        smtp: Outbound mail settings for claim notifications
    """

    coming_soon_mode: bool = False
    maintenance_mode: bool = False
    mysideline_sync_enabled: bool = False
    admin_api_key: str = ''
    mysideline_search_url: str = DEFAULT_MYSIDELINE_SEARCH_URL
    mysideline_event_url: str = DEFAULT_MYSIDELINE_EVENT_URL
    mysideline_timeout: int = 60
    sync_interval_hours: int = 24
    is_production: bool = False
    smtp: SmtpConfig = field(default_factory=SmtpConfig)

    @classmethod
    def from_environment(cls, env: Optional[Mapping[str, str]] = None) -> 'AppConfig':
        """Build the configuration from environment variables (``os.environ`` by default)."""
        env = os.environ if env is None else env
        smtp_port = env.get('SMTP_PORT', '').strip()
        return cls(
            coming_soon_mode=_flag(env, 'FEATURE_COMING_SOON_MODE'),
            maintenance_mode=_flag(env, 'FEATURE_MAINTENANCE_MODE'),
            mysideline_sync_enabled=_flag(env, 'MYSIDELINE_SYNC_ENABLED'),
            admin_api_key=env.get('ADMIN_API_KEY', ''),
            mysideline_search_url=env.get('MYSIDELINE_URL') or DEFAULT_MYSIDELINE_SEARCH_URL,
            mysideline_event_url=env.get('MYSIDELINE_EVENT_URL') or DEFAULT_MYSIDELINE_EVENT_URL,
            mysideline_timeout=_int(env, 'MYSIDELINE_REQUEST_TIMEOUT', 60),
            sync_interval_hours=_int(env, 'MYSIDELINE_SYNC_INTERVAL_HOURS', 24),
            is_production=IS_PRODUCTION_ENVIRONMENT,
            smtp=SmtpConfig(
                host=env.get('SMTP_HOST') or None,
                port=int(smtp_port) if smtp_port.isdigit() else None,
                username=env.get('SMTP_USERNAME') or None,
                password=env.get('SMTP_PASSWORD') or None,
                sender=env.get('SMTP_SENDER') or None,
                use_tls=_flag(env, 'SMTP_USE_TLS', default=True),
                use_ssl=_flag(env, 'SMTP_USE_SSL'),
            ),
        )

    def verify_admin_auth(self, auth_header: Optional[str]) -> bool:
        """Verify an admin authorization header against the configured key."""
        return bool(self.admin_api_key and auth_header and auth_header == self.admin_api_key)
