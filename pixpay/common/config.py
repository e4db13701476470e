"""Central environment-driven settings for the payments service.

The process loads this once at startup. Gateway environment selection and API
key fallback are resolved here into an explicit `GatewayConfig` that is passed
to the orchestrator and reconciler constructors.
"""

from dataclasses import dataclass

from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class GatewayConfig:
    """Resolved gateway target: key, base URL and environment label."""

    api_key: str
    api_base_url: str
    environment: str = "sandbox"
    timeout_seconds: float = 15.0
    pix_due_days: int = 1


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "pixpay-payments"
    log_level: str = "INFO"
    postgres_dsn: str
    use_asaas_production: bool = False
    asaas_api_key_sandbox: str = ""
    asaas_api_key_production: str = ""
    asaas_api_key: str = ""
    asaas_sandbox_url: str = "https://sandbox.asaas.com/api/v3"
    asaas_production_url: str = "https://api.asaas.com/v3"
    gateway_timeout_seconds: float = 15.0
    pix_due_days: int = 1
    tracing_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    def resolve_api_key(self) -> str:
        """Environment-specific key first, shared `ASAAS_API_KEY` as fallback."""

        if self.use_asaas_production:
            specific = self.asaas_api_key_production
        else:
            specific = self.asaas_api_key_sandbox
        return (specific or self.asaas_api_key).strip()

    def gateway_config(self) -> GatewayConfig:
        return GatewayConfig(
            api_key=self.resolve_api_key(),
            api_base_url=self.asaas_production_url if self.use_asaas_production else self.asaas_sandbox_url,
            environment="production" if self.use_asaas_production else "sandbox",
            timeout_seconds=self.gateway_timeout_seconds,
            pix_due_days=self.pix_due_days,
        )


settings = CommonSettings()
