import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.strip().lower() in {"1", "true", "yes", "y", "on"}


def _csv(val: str | None, default: list[str]) -> list[str]:
    if not val:
        return default
    return [v.strip() for v in val.split(",") if v.strip()]


def _env() -> str:
    # NODE_ENV is kept for deployments that still export it
    return os.getenv("ENV") or os.getenv("NODE_ENV") or "local"


@dataclass(frozen=True)
class Settings:
    env: str = _env()
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # MongoDB (users + sessions)
    store_backend: str = os.getenv("STORE_BACKEND", "mongodb")
    mongodb_url: str = os.getenv("MONGODB_URL", "mongodb://localhost:27017")
    mongodb_database: str = os.getenv("MONGODB_DATABASE", "pairhub")

    # Sessions
    session_secret: str = os.getenv("SESSION_SECRET", "")
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "pairhub.sid")
    session_ttl_days: int = int(os.getenv("SESSION_TTL_DAYS", "14"))

    # GitHub login
    github_client_id: str | None = os.getenv("GITHUB_CLIENT_ID") or None
    github_client_secret: str | None = os.getenv("GITHUB_CLIENT_SECRET") or None
    github_callback_url: str | None = os.getenv("GITHUB_CALLBACK_URL") or None
    github_scope: list[str] = field(
        default_factory=lambda: _csv(os.getenv("GITHUB_SCOPE"), default=["user:email"])
    )

    # Redis / Celery
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    celery_broker_url: str = os.getenv(
        "CELERY_BROKER_URL",
        os.getenv("REDIS_URL", "redis://localhost:6379/0"),
    )
    celery_result_backend: str = os.getenv(
        "CELERY_RESULT_BACKEND",
        "redis://localhost:6379/1",
    )
    celery_task_always_eager: bool = _bool(os.getenv("CELERY_TASK_ALWAYS_EAGER"))

    # Slack community invites
    slack_token: str | None = os.getenv("SLACK_TOKEN") or None
    slack_team: str | None = os.getenv("SLACK_TEAM") or None

    # Security headers
    security_headers_enabled: bool = _bool(
        os.getenv("SECURITY_HEADERS_ENABLED"),
        default=True,
    )

    # Rate limiting
    rate_limit_enabled: bool = _bool(os.getenv("RATE_LIMIT_ENABLED"), default=True)
    rate_limit_default: str = os.getenv("RATE_LIMIT_DEFAULT", "60/minute")
    rate_limit_login: str = os.getenv("RATE_LIMIT_LOGIN", "10/minute")
    rate_limit_exempt_paths: list[str] = field(
        default_factory=lambda: _csv(
            os.getenv("RATE_LIMIT_EXEMPT_PATHS"),
            default=["/health", "/metrics", "/static"],
        )
    )

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def callback_url(self) -> str:
        if self.github_callback_url:
            return self.github_callback_url
        if not self.is_production:
            return "http://localhost:3000/login/github/callback"
        return "https://pairhub.io/login/github/callback"


settings = Settings()
