from __future__ import annotations

import asyncio
import logging

from compass.core.config import get_settings
from compass.core.logging_config import setup_logging
from compass.db.mongo import ensure_indexes, get_db
from compass.services.auth_service import ensure_admin

logger = logging.getLogger(__name__)


async def seed_admin() -> bool:
    """Create the configured admin account. Returns True when a new one was inserted."""
    settings = get_settings()
    db = get_db()
    await ensure_indexes(db)

    doc, created = await ensure_admin(db, settings.admin_email, settings.admin_password)
    if created:
        logger.info("Admin created: %s", doc["email"])
    else:
        logger.info("Admin already exists: %s", doc["email"])
    return created


def main() -> None:
    setup_logging(get_settings().log_level)
    asyncio.run(seed_admin())


if __name__ == "__main__":
    main()
