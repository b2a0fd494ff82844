"""
Quire API - main entry point.

Runs the API under uvicorn:

    JWT_SECRET=... python -m quire.main

or directly:

    JWT_SECRET=... uvicorn quire.api.app:create_app --factory
"""

from __future__ import annotations

import logging

import uvicorn

from quire.config import get_settings


def main():
    """Main entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "quire.api.app:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
    )


if __name__ == "__main__":
    main()
