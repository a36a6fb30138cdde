from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: str) -> bool:
    return (_env(name, default) or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    postgres_dsn: str
    jwt_secret: str
    cron_secret: str
    app_base_url: str
    log_level: str
    trial_plan_slug: str
    plan_cache_ttl_seconds: float
    razorpay_key_id: str
    razorpay_key_secret: str
    razorpay_webhook_secret: str
    razorpay_api_base: str
    razorpay_timeout_seconds: float
    stripe_secret_key: str
    stripe_webhook_secret: str
    mail_server: str
    mail_port: int
    mail_username: str
    mail_password: str
    mail_from: str
    mail_starttls: bool
    mail_ssl_tls: bool

    @property
    def billing_url(self) -> str:
        return f"{self.app_base_url.rstrip('/')}/billing"


def get_settings() -> Settings:
    return Settings(
        postgres_dsn=_env("POSTGRES_DSN", ""),
        jwt_secret=_env("JWT_SECRET", ""),
        cron_secret=_env("CRON_SECRET", ""),
        app_base_url=_env("APP_BASE_URL", "http://localhost:3000"),
        log_level=_env("LOG_LEVEL", "INFO").upper(),
        trial_plan_slug=_env("TRIAL_PLAN_SLUG", "agency"),
        plan_cache_ttl_seconds=float(_env("PLAN_CACHE_TTL_SECONDS", "3600")),
        razorpay_key_id=_env("RAZORPAY_KEY_ID", ""),
        razorpay_key_secret=_env("RAZORPAY_KEY_SECRET", ""),
        razorpay_webhook_secret=_env("RAZORPAY_WEBHOOK_SECRET", ""),
        razorpay_api_base=_env("RAZORPAY_API_BASE", "https://api.razorpay.com/v1"),
        razorpay_timeout_seconds=float(_env("RAZORPAY_TIMEOUT_SECONDS", "10")),
        stripe_secret_key=_env("STRIPE_SECRET_KEY", ""),
        stripe_webhook_secret=_env("STRIPE_WEBHOOK_SECRET", ""),
        mail_server=_env("MAIL_SERVER", ""),
        mail_port=int(_env("MAIL_PORT", "587")),
        mail_username=_env("MAIL_USERNAME", ""),
        mail_password=_env("MAIL_PASSWORD", ""),
        mail_from=_env("MAIL_FROM", ""),
        mail_starttls=_bool("MAIL_STARTTLS", "true"),
        mail_ssl_tls=_bool("MAIL_SSL_TLS", "false"),
    )
