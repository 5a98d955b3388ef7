"""Central environment-driven settings for the payments service.

The process loads this once at startup. Behavior is controlled by environment
variables (see `.env.example`); a missing gateway credential is a valid
simulation-only configuration, not a startup failure.
"""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payments"
    log_level: str = "INFO"
    port: int = 10000
    mercadopago_access_token: str | None = None
    gateway_base_url: str = "https://api.mercadopago.com"
    gateway_timeout_seconds: float = 10.0
    gateway_max_attempts: int = 1
    gateway_fallback_mode: Literal["approve", "reject"] = "approve"
    default_description: str = "Suscripción DENTALUX"
    voucher_base_url: str = "https://www.mercadopago.com/sandbox/payments/ticket"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "https://tu-frontend.netlify.app",
        "https://tu-dominio.com",
    ]
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def gateway_configured(self) -> bool:
        return bool(self.mercadopago_access_token)


settings = CommonSettings()
