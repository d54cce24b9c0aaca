"""Entry point that serves the API with Uvicorn.

Host and port come from ``API_HOST`` and ``API_PORT`` (defaults
``0.0.0.0`` and ``8000``).  Other settings, such as ``SECRET_KEY``,
``ITS_ENCRYPTION_KEY`` and ``ADMIN_ITS_IDS``, are read by
``miqaat_api.app.core.config``.

Usage:
    python run.py
"""
import uvicorn

from miqaat_api.app.core.config import settings


def main() -> None:
    uvicorn.run(
        "miqaat_api.app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
