"""Routes package initialization."""

from . import (
    admin,
    carnivals,
    health
)

__all__ = [
    'admin',
    'carnivals',
    'health'
]
