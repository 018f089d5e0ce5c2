"""Configuration package."""

from .settings import AppConfig, SmtpConfig

__all__ = ['AppConfig', 'SmtpConfig']
