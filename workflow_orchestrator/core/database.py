"""SQLAlchemy engine construction for the durable queue backend."""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from workflow_orchestrator.core.config import OrchestratorSettings, get_settings


def _resolve_sqlite_path(database_url: str) -> None:
    """Ensure the parent directory for a SQLite database exists."""

    parsed = urlparse(database_url)
    if parsed.scheme != "sqlite":
        return

    if parsed.path in ("", "/", ":memory:", "/:memory:"):
        return

    # sqlite:///./data/queue.db parses to "/./data/queue.db"
    db_path = Path(parsed.path[1:] if parsed.path.startswith("/") else parsed.path)
    db_dir = db_path.expanduser().resolve().parent
    db_dir.mkdir(parents=True, exist_ok=True)


def create_database_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Build an engine suitable for concurrent queue access."""

    if database_url.startswith("sqlite"):
        _resolve_sqlite_path(database_url)
        engine_kwargs: dict[str, object] = {
            "future": True,
            "echo": echo,
            "connect_args": {"check_same_thread": False},
        }
        if database_url.endswith(":memory:") or database_url == "sqlite://":
            engine_kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **engine_kwargs)

    return create_engine(
        database_url,
        future=True,
        echo=echo,
        pool_pre_ping=True,
    )


def get_engine(settings: Optional[OrchestratorSettings] = None) -> Engine:
    """Create an engine from application settings."""

    settings = settings or get_settings()
    return create_database_engine(settings.database_url, echo=settings.sql_echo)
