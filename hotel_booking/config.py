from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Service settings
    service_name: str = "hotel-booking-service"
    service_version: str = "1.0.0"
    log_level: str = "INFO"

    # Persistence settings
    store_backend: str = "memory"  # memory, remote
    supabase_url: str = "http://localhost:54321"
    supabase_key: str = ""
    remote_timeout: float = 10.0

    # Session settings
    session_ttl_seconds: float = 3600.0

    # OpenTelemetry settings
    otel_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://jaeger:4318"
    otel_exporter_otlp_metrics_endpoint: str = "http://otel-collector:4318"
    otel_exporter_otlp_metrics_headers: str = ""
    otel_service_name: str = "hotel-booking-service"

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:4000"]


settings = Settings()
