from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration read from environment variables."""

    app_name: str = Field(default="SnowOps Ticket Service")
    service_name: str = Field(default="ticket-service")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s %(levelname)s %(name)s %(message)s %(ticket_context)s")

    # Database configuration; DATABASE_URL wins over the individual DB_* parts
    database_url: str | None = Field(default=None)
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432)
    db_user: str = Field(default="postgres")
    db_password: str = Field(default="")
    db_name: str = Field(default="snowops_tickets")
    db_sslmode: str = Field(default="disable")
    db_echo: bool = Field(default=False)

    # Observability configuration
    otel_enabled: bool = Field(default=False)
    otel_service_name: str = Field(default="ticket-service")
    otel_exporter_otlp_endpoint: str | None = Field(default=None)
    otel_exporter_otlp_headers: str | None = Field(default=None)

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def postgres_dsn(self) -> str:
        if self.database_url:
            return self.database_url
        credentials = quote_plus(self.db_user)
        if self.db_password:
            credentials += ":" + quote_plus(self.db_password)
        dsn = f"postgresql://{credentials}@{self.db_host}:{self.db_port}/{self.db_name}"
        if self.db_sslmode and self.db_sslmode != "disable":
            dsn += f"?ssl={self.db_sslmode}"
        return dsn


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()
