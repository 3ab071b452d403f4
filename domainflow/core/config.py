
from pydantic import Field
from pydantic_settings import BaseSettings

_DEFAULT_RESERVED_HOSTNAMES = (
    "localhost,netlify.app,netlify.com,supabase.co,supabase.com,"
    "vercel.app,herokuapp.com,cloudflare.com,lovable.app,lovable.dev"
)


class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Domainflow API"
    app_env: str = "development"
    app_port: int = 8000

    # Comma separated; "*" allows any browser origin
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # Database (SQLite for local dev, any async driver in production)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./domainflow_dev.db",
        alias="DATABASE_URL",
    )

    # Hosting provider (Netlify). Missing credentials select the fallback /
    # simulation paths instead of failing.
    provider_token: str | None = Field(default=None, alias="NETLIFY_ACCESS_TOKEN")
    provider_site_id: str | None = Field(default=None, alias="NETLIFY_SITE_ID")
    provider_api_url: str = Field(
        default="https://api.netlify.com/api/v1", alias="NETLIFY_API_URL",
    )
    provider_timeout: float = Field(default=30.0, alias="NETLIFY_TIMEOUT")
    provider_max_attempts: int = Field(default=3, alias="NETLIFY_MAX_ATTEMPTS")

    # Public DNS-over-HTTPS resolver (JSON API)
    dns_resolver_endpoint: str = Field(
        default="https://cloudflare-dns.com/dns-query", alias="DNS_RESOLVER_ENDPOINT",
    )
    dns_timeout: float = Field(default=10.0, alias="DNS_TIMEOUT")
    dns_max_attempts: int = Field(default=3, alias="DNS_MAX_ATTEMPTS")

    retry_backoff_seconds: float = Field(
        default=1.0, alias="RETRY_BACKOFF_SECONDS",
    )  # multiplier for exponential backoff between attempts

    # DNS records shown to domain owners
    verification_prefix: str = Field(default="_verify", alias="VERIFICATION_PREFIX")
    fallback_site_hostname: str = Field(
        default="identitybrandhub.netlify.app", alias="FALLBACK_SITE_HOSTNAME",
    )
    fallback_load_balancer_ip: str = Field(
        default="75.2.60.5", alias="FALLBACK_LOAD_BALANCER_IP",
    )
    reserved_hostnames: str = Field(
        default=_DEFAULT_RESERVED_HOSTNAMES, alias="RESERVED_HOSTNAMES",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "extra": "ignore",
    }

    @property
    def provider_configured(self) -> bool:
        """Provider calls are possible only when both token and site id are set."""
        return bool(self.provider_token and self.provider_site_id)

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def reserved_hostname_list(self) -> list[str]:
        return [h.strip().lower() for h in self.reserved_hostnames.split(",") if h.strip()]


settings = Settings()
