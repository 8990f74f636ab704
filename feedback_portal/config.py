"""
Centralized configuration with environment variable overrides.

Business details, identity provider settings, record store credentials and
funnel timings are all configurable here. Nothing is hardcoded in the flow
or store logic.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from feedback_portal.logging_context import install_session_id_filter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _optional(env_var: str) -> Optional[str]:
    """Return a stripped env var, or None when unset or blank."""
    value = os.getenv(env_var, "").strip()
    return value or None


@dataclass(frozen=True)
class BusinessConfig:
    """Business-specific settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "Cleaning Professionals Melbourne")
    public_site_url: str = os.getenv(
        "PUBLIC_SITE_URL", "https://www.cleaningprofessionals.com.au/"
    )


@dataclass(frozen=True)
class IdentityConfig:
    """Google Identity Services settings."""

    client_id: Optional[str] = _optional("GOOGLE_CLIENT_ID")
    script_url: str = os.getenv("GOOGLE_SCRIPT_URL", "https://accounts.google.com/gsi/client")
    timeout_seconds: float = _safe_float("IDENTITY_TIMEOUT_SECONDS", "5.0")


@dataclass(frozen=True)
class StoreConfig:
    """Record store (Supabase REST) connection settings."""

    url: Optional[str] = _optional("SUPABASE_URL")
    key: Optional[str] = _optional("SUPABASE_KEY")
    timeout_seconds: float = _safe_float("STORE_TIMEOUT_SECONDS", "10.0")


@dataclass(frozen=True)
class FunnelConfig:
    """Review funnel thresholds and timings."""

    min_review_length: int = _safe_int("MIN_REVIEW_LENGTH", "50")
    default_rating: int = _safe_int("DEFAULT_REVIEW_RATING", "5")
    next_location_delay_seconds: float = _safe_float("NEXT_LOCATION_DELAY_SECONDS", "1.5")
    redirect_seconds: int = _safe_int("REVIEW_REDIRECT_SECONDS", "10")
    max_sessions: int = _safe_int("MAX_FUNNEL_SESSIONS", "500")


@dataclass(frozen=True)
class FeedbackConfig:
    """Feedback intake timings."""

    redirect_seconds: int = _safe_int("FEEDBACK_REDIRECT_SECONDS", "5")


@dataclass(frozen=True)
class AdminConfig:
    """Admin dashboard settings."""

    recent_limit: int = _safe_int("ADMIN_RECENT_LIMIT", "50")


@dataclass(frozen=True)
class WebConfig:
    """Flask server settings."""

    secret_key: str = os.getenv("FLASK_SECRET_KEY", "dev-secret-change-me")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _safe_int("PORT", "8080")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    funnel: FunnelConfig = field(default_factory=FunnelConfig)
    feedback: FeedbackConfig = field(default_factory=FeedbackConfig)
    admin: AdminConfig = field(default_factory=AdminConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not 3.0 <= config.identity.timeout_seconds <= 10.0:
        raise ValueError(
            "IDENTITY_TIMEOUT_SECONDS must be between 3 and 10, "
            f"got {config.identity.timeout_seconds}"
        )
    if config.store.timeout_seconds <= 0:
        raise ValueError(
            f"STORE_TIMEOUT_SECONDS must be > 0, got {config.store.timeout_seconds}"
        )
    if bool(config.store.url) != bool(config.store.key):
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set together")
    if config.funnel.min_review_length < 0:
        raise ValueError(
            f"MIN_REVIEW_LENGTH must be >= 0, got {config.funnel.min_review_length}"
        )
    if not 1 <= config.funnel.default_rating <= 5:
        raise ValueError(
            f"DEFAULT_REVIEW_RATING must be between 1 and 5, got {config.funnel.default_rating}"
        )
    if not 1.0 <= config.funnel.next_location_delay_seconds <= 2.0:
        raise ValueError(
            "NEXT_LOCATION_DELAY_SECONDS must be between 1 and 2, "
            f"got {config.funnel.next_location_delay_seconds}"
        )
    if not 5 <= config.funnel.redirect_seconds <= 10:
        raise ValueError(
            f"REVIEW_REDIRECT_SECONDS must be between 5 and 10, got {config.funnel.redirect_seconds}"
        )
    if config.funnel.max_sessions < 1:
        raise ValueError(
            f"MAX_FUNNEL_SESSIONS must be >= 1, got {config.funnel.max_sessions}"
        )
    if config.feedback.redirect_seconds < 1:
        raise ValueError(
            f"FEEDBACK_REDIRECT_SECONDS must be >= 1, got {config.feedback.redirect_seconds}"
        )
    if config.admin.recent_limit < 1:
        raise ValueError(
            f"ADMIN_RECENT_LIMIT must be >= 1, got {config.admin.recent_limit}"
        )
    if not config.business.public_site_url.startswith(("http://", "https://")):
        raise ValueError(
            f"PUBLIC_SITE_URL must be an http(s) URL, got {config.business.public_site_url!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_session_id_filter()
    if not config.identity.client_id:
        logger.warning("GOOGLE_CLIENT_ID not configured; review funnel will use the manual path")
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
