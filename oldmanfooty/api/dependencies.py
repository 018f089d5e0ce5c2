"""Request-scoped helpers shared by the routers."""

from typing import Optional

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from ..config.settings import AppConfig
from ..db import Database
from ..models.user import User
from ..source_manager import SourceManager


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_source_manager(request: Request) -> SourceManager:
    return request.app.state.source_manager


def load_acting_user(session: Session, user_id: Optional[int]) -> User:
    """
    Load the user named in the X-User-Id header.

    Raises:
        HTTPException: 401 if the header is missing or the user is unknown or inactive
    """
    if not user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")
    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Unknown or inactive user")
    return user


def load_admin_user(session: Session, user_id: Optional[int]) -> User:
    """Like load_acting_user, but 403 unless the user is an administrator."""
    user = load_acting_user(session, user_id)
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Administrator access required")
    return user


def verify_admin_key(config: AppConfig, authorization: Optional[str]) -> None:
    """Check the admin API key sent in the Authorization header."""
    if not config.verify_admin_auth(authorization):
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization"
        )
