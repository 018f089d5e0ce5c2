"""Run the carnival API under uvicorn."""

import os

import uvicorn

from oldmanfooty.config.environment import IS_PRODUCTION_ENVIRONMENT

PORT = int(os.environ.get('PORT', '8000'))


if __name__ == "__main__":
    if IS_PRODUCTION_ENVIRONMENT:
        # Workers need an import string, not an app instance
        uvicorn.run(
            "oldmanfooty.api.app:app",
            host="0.0.0.0",
            port=PORT,
            workers=int(os.environ.get('WEB_CONCURRENCY', '4')),
            log_level="info",
            proxy_headers=True,
            forwarded_allow_ips="*"
        )
    else:
        uvicorn.run(
            "oldmanfooty.api.app:app",
            host="127.0.0.1",
            port=PORT,
            reload=True,
            log_level="debug"
        )
