import logging
import os
import time
from urllib.parse import urlparse

import psycopg2

logger = logging.getLogger("wait_for_db")


def _connection_params() -> dict:
    """Build psycopg2 params from DATABASE_URL, falling back to the DB_* variables."""
    url = os.getenv("DATABASE_URL", "")
    if url:
        url = url.replace("postgresql+psycopg2://", "postgresql://").replace("postgres://", "postgresql://")
        p = urlparse(url)
        return {
            "host": p.hostname or "localhost",
            "port": p.port or 5432,
            "user": p.username or "",
            "password": p.password or "",
            "dbname": (p.path or "/").lstrip("/"),
        }
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "5432")),
        "user": os.getenv("DB_USER", ""),
        "password": os.getenv("DB_PASSWORD", ""),
        "dbname": os.getenv("DB_NAME", ""),
    }


def wait(timeout_s: int | None = None) -> None:
    params = _connection_params()
    if timeout_s is None:
        timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
    start = time.time()

    logger.info("Waiting for Postgres at %s:%s db=%s user=%s (timeout=%ss)",
                params["host"], params["port"], params["dbname"], params["user"], timeout_s)
    while True:
        try:
            conn = psycopg2.connect(**params)
            conn.close()
            logger.info("Postgres is ready.")
            return
        except psycopg2.OperationalError as e:
            if time.time() - start > timeout_s:
                logger.error("Timed out waiting for DB. Last error: %s", e)
                raise
            time.sleep(1)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[wait_for_db] %(message)s")
    wait()
