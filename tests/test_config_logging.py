import logging

from snowops_tickets.core.config import Settings
from snowops_tickets.core.logging import configure_logging, init_tracer, parse_otlp_headers, shutdown_tracer
from snowops_tickets.db.session import to_asyncpg_dsn


def test_database_url_takes_precedence():
    settings = Settings(database_url="postgresql://u:p@db:5432/tickets", db_host="ignored")

    assert settings.postgres_dsn == "postgresql://u:p@db:5432/tickets"


def test_dsn_is_composed_from_parts():
    settings = Settings(
        database_url=None,
        db_host="pg",
        db_port=6432,
        db_user="snow",
        db_password="p@ss word",
        db_name="ops",
        db_sslmode="require",
    )

    assert settings.postgres_dsn == "postgresql://snow:p%40ss+word@pg:6432/ops?ssl=require"


def test_asyncpg_dsn_conversion():
    assert to_asyncpg_dsn("postgresql://u@h/db") == "postgresql+asyncpg://u@h/db"
    assert to_asyncpg_dsn("postgres://u@h/db") == "postgresql+asyncpg://u@h/db"
    assert to_asyncpg_dsn("postgresql+asyncpg://u@h/db") == "postgresql+asyncpg://u@h/db"
    assert to_asyncpg_dsn("sqlite+aiosqlite:///:memory:") == "sqlite+aiosqlite:///:memory:"


def test_parse_otlp_headers():
    assert parse_otlp_headers("authorization=Bearer abc, x-team = ops,broken") == {
        "authorization": "Bearer abc",
        "x-team": "ops",
    }
    assert parse_otlp_headers(None) == {}


def test_configure_logging_uses_service_name():
    logger = configure_logging(Settings(service_name="ticket-service-test", log_level="debug"))

    assert logger.name == "ticket-service-test"
    assert logger.level == logging.DEBUG


def test_tracer_disabled_by_default():
    provider = init_tracer(Settings(otel_enabled=False))

    assert provider is None
    shutdown_tracer(provider)
