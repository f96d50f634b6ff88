"""Environment-based configuration with validation."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from telegram_address_scraper.core.types import ExportMode, ResolutionMode

# Load .env from project root or cwd
_env_path = Path(__file__).resolve().parent / ".env"
if _env_path.exists():
    load_dotenv(_env_path)
else:
    load_dotenv()

TELEGRAM_MESSAGE_LIMIT = 4096


def _env(key: str, default: str = "") -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int = 0) -> int:
    return int(os.getenv(key, str(default)) or default)


def _env_float(key: str, default: float = 0.0) -> float:
    return float(os.getenv(key, str(default)) or default)


def _env_bool(key: str, default: bool = False) -> bool:
    return os.getenv(key, str(default)).lower() in ("1", "true", "yes")


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TelegramConfig:
    """Telegram MTProto app credentials plus the bot login."""

    api_id: int = field(default_factory=lambda: _env_int("TELEGRAM_API_ID"))
    api_hash: str = field(default_factory=lambda: _env("TELEGRAM_API_HASH"))
    bot_token: str = field(default_factory=lambda: _env("BOT_TOKEN"))
    session_name: str = field(
        default_factory=lambda: _env("TELEGRAM_SESSION_NAME", "address_scraper")
    )
    owner_id: int = field(default_factory=lambda: _env_int("OWNER_TELEGRAM_ID"))


@dataclass(frozen=True, slots=True)
class ResolverConfig:
    """ENS resolution and address checksumming."""

    provider_url: str = field(default_factory=lambda: _env("WEB3_PROVIDER_URL"))
    mode_name: str = field(
        default_factory=lambda: _env("RESOLUTION_MODE", "auto").lower()
    )
    timeout_seconds: float = field(
        default_factory=lambda: _env_float("RESOLVER_TIMEOUT", 10.0)
    )
    drain_timeout_seconds: float = field(
        default_factory=lambda: _env_float("RESOLVER_DRAIN_TIMEOUT", 5.0)
    )

    @property
    def mode(self) -> ResolutionMode:
        """Resolve ``auto`` against the presence of a provider URL."""
        if self.mode_name == "auto":
            if self.provider_url:
                return ResolutionMode.FULL
            return ResolutionMode.ADDRESS_ONLY
        return ResolutionMode(self.mode_name)


@dataclass(frozen=True, slots=True)
class ExportConfig:
    """How collected lists are delivered to the operator."""

    mode_name: str = field(
        default_factory=lambda: _env("EXPORT_MODE", "text").lower()
    )
    max_message_length: int = field(
        default_factory=lambda: _env_int(
            "EXPORT_MAX_MESSAGE_LENGTH", TELEGRAM_MESSAGE_LIMIT
        )
    )

    @property
    def mode(self) -> ExportMode:
        return ExportMode(self.mode_name)


@dataclass(frozen=True, slots=True)
class CommandConfig:
    """Command permission rules."""

    # Only channel admins can post, so posts are trusted by default.
    allow_channel_commands: bool = field(
        default_factory=lambda: _env_bool("ALLOW_CHANNEL_COMMANDS", True)
    )


@dataclass(frozen=True, slots=True)
class MetricsConfig:
    """Prometheus metrics settings."""

    enabled: bool = field(
        default_factory=lambda: _env_bool("METRICS_ENABLED", False)
    )
    port: int = field(
        default_factory=lambda: _env_int("METRICS_PORT", 9090)
    )


@dataclass(frozen=True, slots=True)
class HealthConfig:
    """Health check endpoint settings."""

    enabled: bool = field(
        default_factory=lambda: _env_bool("HEALTH_ENABLED", True)
    )
    port: int = field(
        default_factory=lambda: _env_int("HEALTH_PORT", 8080)
    )


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Root application configuration aggregating all sub-configs."""

    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    commands: CommandConfig = field(default_factory=CommandConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    health: HealthConfig = field(default_factory=HealthConfig)
    log_level: str = field(
        default_factory=lambda: _env("LOG_LEVEL", "INFO")
    )
    log_json: bool = field(
        default_factory=lambda: _env_bool("LOG_JSON", False)
    )

    def errors(self) -> list[str]:
        """Return every configuration problem found."""
        errors: list[str] = []
        if not self.telegram.api_id:
            errors.append("TELEGRAM_API_ID is required")
        if not self.telegram.api_hash:
            errors.append("TELEGRAM_API_HASH is required")
        if not self.telegram.bot_token:
            errors.append("BOT_TOKEN is required")
        if not self.telegram.owner_id:
            errors.append("OWNER_TELEGRAM_ID is required")

        try:
            mode = self.resolver.mode
        except ValueError:
            errors.append(
                f"RESOLUTION_MODE must be one of auto, "
                f"{', '.join(m.value for m in ResolutionMode)}"
            )
        else:
            if mode is ResolutionMode.FULL and not self.resolver.provider_url:
                errors.append("WEB3_PROVIDER_URL is required for RESOLUTION_MODE=full")

        try:
            self.export.mode
        except ValueError:
            errors.append(
                f"EXPORT_MODE must be one of "
                f"{', '.join(m.value for m in ExportMode)}"
            )
        if self.export.max_message_length < 256:
            errors.append("EXPORT_MAX_MESSAGE_LENGTH must be at least 256")
        if self.resolver.timeout_seconds <= 0:
            errors.append("RESOLVER_TIMEOUT must be positive")
        return errors

    def validate(self) -> None:
        """Validate required fields; exits on failure."""
        errors = self.errors()
        if errors:
            for e in errors:
                print(f"[CONFIG ERROR] {e}", file=sys.stderr)
            raise SystemExit(1)
