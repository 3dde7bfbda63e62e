#!/usr/bin/env python3
import os
import sys
import time

from sqlalchemy import text
from sqlalchemy.exc import OperationalError

# -------------------------------
# 1️⃣ Setup paths
# -------------------------------
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, PROJECT_ROOT)

from config.logging_config import logger  # noqa: E402
from config.settings import DATABASE_URL_SYNC, POSTGRES_HOST, POSTGRES_PORT  # noqa: E402
from db.core.database import Database  # noqa: E402
import db.models.map  # noqa: E402,F401  registers the tables
import db.models.plant  # noqa: E402,F401
import db.models.planting  # noqa: E402,F401

MAX_WAIT_SECONDS = int(os.environ.get("DB_WAIT_SECONDS", "60"))


def wait_for_postgres(database: Database):
    logger.info(f"🔗 Connecting to database at {POSTGRES_HOST}:{POSTGRES_PORT}...")
    deadline = time.monotonic() + MAX_WAIT_SECONDS
    while True:
        try:
            with database.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            break
        except OperationalError:
            if time.monotonic() > deadline:
                raise
            logger.info("⏳ Postgres not ready, waiting 1s...")
            time.sleep(1)
    logger.info("✅ Postgres is ready!")


def main():
    database = Database(url=DATABASE_URL_SYNC, async_url=None)
    try:
        wait_for_postgres(database)
        # -------------------------------
        # 2️⃣ pg_trgm extension, tables and trigram indexes
        # -------------------------------
        database.init_db()
        logger.info("✅ pg_trgm enabled, tables and indexes created (if missing).")
    finally:
        database.dispose()

    logger.info("🎉 Database initialization complete!")


if __name__ == "__main__":
    main()
