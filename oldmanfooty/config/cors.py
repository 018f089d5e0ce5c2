"""CORS settings for the carnival API."""

import os
from typing import Any, Dict, List

PRODUCTION_ORIGINS = [
    "https://oldmanfooty.au",
    "https://www.oldmanfooty.au",
]


def _allowed_origins(is_production: bool) -> List[str]:
    if not is_production:
        return ["*"]
    # Extra front ends (e.g. a staging site) come from CORS_EXTRA_ORIGINS
    extra = [origin.strip() for origin in os.environ.get('CORS_EXTRA_ORIGINS', '').split(',')]
    return PRODUCTION_ORIGINS + [origin for origin in extra if origin]


def cors_config(is_production: bool) -> Dict[str, Any]:
    """Keyword arguments for CORSMiddleware."""
    return {
        "allow_origins": _allowed_origins(is_production),
        "allow_credentials": True,
        "allow_methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": [
            "Authorization",  # admin API key
            "Content-Type",
            "Accept",
            "X-User-Id",      # set by the session layer in front of the API
        ],
        "expose_headers": [],
        "max_age": 3600,
    }
