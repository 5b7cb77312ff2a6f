from __future__ import annotations

import logging
from urllib.parse import parse_qsl, urlencode, urlparse

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from sprout_api.settings import get_settings

logger = logging.getLogger(__name__)

ASYNCPG_PREFIX = "postgresql+asyncpg://"
POSTGRES_PREFIXES = ("postgres://", "postgresql://", "postgresql+psycopg2://")
LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1"}
# libpq options asyncpg rejects; sslmode is translated to ssl=true.
DROPPED_QUERY_KEYS = {"sslmode", "channel_binding", "ssl"}

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def is_sqlite_url(database_url: str) -> bool:
    return str(database_url or "").startswith("sqlite")


def normalize_database_url(database_url: str) -> str:
    """Point Postgres URLs at asyncpg and strip query options it cannot take."""
    url = str(database_url or "").strip()
    for prefix in POSTGRES_PREFIXES:
        if url.startswith(prefix):
            url = ASYNCPG_PREFIX + url[len(prefix) :]
            break
    if not url.startswith(ASYNCPG_PREFIX):
        return url
    try:
        parsed = urlparse(url)
        pairs = parse_qsl(parsed.query, keep_blank_values=True)
    except ValueError:
        return url
    query = [(key, value) for key, value in pairs if key not in DROPPED_QUERY_KEYS]
    if any(key == "sslmode" for key, _ in pairs):
        query.append(("ssl", "true"))
    return parsed._replace(query=urlencode(query)).geturl()


def _engine_options(db_url: str) -> dict:
    if is_sqlite_url(db_url):
        # File databases are opened per session; nothing is pooled across event loops.
        return {"future": True, "poolclass": NullPool}
    options = {"future": True, "pool_pre_ping": True, "pool_size": 20, "max_overflow": 10}
    try:
        host = urlparse(db_url).hostname or ""
    except ValueError:
        logger.debug("Could not read host from database URL; leaving SSL unset.")
        host = ""
    if host and host not in LOCAL_HOSTS:
        options["connect_args"] = {"ssl": True}
    return options


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db_url = normalize_database_url(get_settings().database_url)
        _engine = create_async_engine(db_url, **_engine_options(db_url))
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
