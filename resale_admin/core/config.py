from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

from resale_admin.store.credentials import Credentials


class Settings(BaseSettings):
    """Console configuration read from environment variables."""

    app_name: str = Field(default="Resale Admin")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(levelname)s %(name)s %(message)s")
    store_log_level: str | None = Field(default=None)
    http_log_level: str = Field(default="WARNING")

    # Entity store
    api_base_url: str = Field(default="http://127.0.0.1:8000")
    api_prefix: str = Field(default="/api")
    access_token: str | None = Field(default=None)
    read_timeout: float | None = Field(default=10.0)

    # Observability configuration
    otel_enabled: bool = Field(default=False)
    otel_service_name: str = Field(default="resale-admin")
    otel_exporter_otlp_endpoint: str | None = Field(default=None)
    otel_exporter_otlp_headers: str | None = Field(default=None)

    class Config:
        env_file = ".env"
        env_prefix = "RESALE_ADMIN_"
        case_sensitive = False

    def credentials(self) -> Credentials:
        return Credentials(token=self.access_token or None)


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the console settings."""

    return Settings()
