"""
CreatorSync Configuration System
================================

Configuration management with environment variables and Pydantic models.
Environment variables override Field defaults with clear precedence.

Settings are loaded once per process by the entry point and then passed
explicitly into every component; nothing below reads the working directory
or the install location on its own.
"""

from pathlib import Path
from typing import Optional
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode


DEFAULT_BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PathSettings(BaseModel):
    """Filesystem layout for the index repository."""
    root_dir: Path = Field(default=Path("."), description="Index repository root")
    targets_dir: Path = Field(default=Path("subrepos"), description="Directory holding one sub-directory per target (relative to root_dir)")
    failure_manifest: str = Field(default="sync-failures.txt", description="Failure manifest file name (relative to root_dir)")
    creators_manifest: Path = Field(default=Path("creators/manifest.json"), description="Fleet manifest path (relative to root_dir)")

    def resolve_targets_dir(self) -> Path:
        """Targets directory, resolved against the root directory."""
        return self.targets_dir if self.targets_dir.is_absolute() else self.root_dir / self.targets_dir

    def resolve_failure_manifest(self) -> Path:
        return self.root_dir / self.failure_manifest

    def resolve_creators_manifest(self) -> Path:
        if self.creators_manifest.is_absolute():
            return self.creators_manifest
        return self.root_dir / self.creators_manifest


class FleetSettings(BaseModel):
    """Fleet sweep configuration."""
    delay_seconds: float = Field(default=3.0, description="Pause between target invocations (floor 0)")
    retry_rounds: int = Field(default=2, description="Total sweep rounds including the first (floor 1)")
    config_filename: str = Field(default="creator.json", description="Owner configuration file inside each target")
    entry_point: str = Field(default="scripts/sync_posts.py", description="Ingestion entry point inside each target")
    target_timeout: Optional[float] = Field(default=900.0, description="Seconds before a target invocation is abandoned")
    error_snippet_length: int = Field(default=200, ge=20, le=10000, description="Characters of error output kept per failure")

    @field_validator("delay_seconds")
    @classmethod
    def clamp_delay(cls, v):
        """Delay never goes below zero."""
        return max(0.0, float(v))

    @field_validator("retry_rounds")
    @classmethod
    def clamp_rounds(cls, v):
        """At least one round always runs."""
        return max(1, int(v))


class HttpSettings(BaseModel):
    """Outbound HTTP configuration."""
    request_timeout: int = Field(default=30, ge=5, le=300, description="Request timeout in seconds")
    max_retries: int = Field(default=3, ge=0, le=10, description="urllib3 retries for 429/5xx responses")
    backoff_factor: float = Field(default=1.0, ge=0.0, le=30.0, description="urllib3 backoff factor")
    feed_user_agent: str = Field(default="CreatorSync/0.3 (+feed ingestion)", description="User-Agent for feed requests")
    browser_user_agent: str = Field(default=DEFAULT_BROWSER_USER_AGENT, description="User-Agent for archive pages")


class StorageSettings(BaseModel):
    """Per-target store layout."""
    posts_dir: str = Field(default="posts", description="Markdown directory inside a target")
    metadata_dir: str = Field(default="metadata", description="Metadata directory inside a target")
    description_length: int = Field(default=500, ge=50, le=5000, description="Max characters kept in a record description")


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging")
    console_logging: bool = Field(default=True, description="Enable console logging")


class CreatorSyncSettings(BaseSettings):
    """Main application settings."""

    paths: PathSettings = Field(default_factory=PathSettings)
    fleet: FleetSettings = Field(default_factory=FleetSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    app_name: str = Field(default="CreatorSync", description="Application name")
    version: str = Field(default="0.3.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "CREATORSYNC_",
        "extra": "ignore",
    }

    def validate_configuration(self) -> None:
        """Validate complete configuration."""
        errors = []

        if self.fleet.entry_point.startswith("/") or ".." in Path(self.fleet.entry_point).parts:
            errors.append(f"Entry point must be relative to the target: {self.fleet.entry_point}")

        if not self.storage.posts_dir or not self.storage.metadata_dir:
            errors.append("posts_dir and metadata_dir must be non-empty")
        elif self.storage.posts_dir == self.storage.metadata_dir:
            errors.append("posts_dir and metadata_dir must differ")

        if self.logging.file_path:
            try:
                log_path = Path(self.logging.file_path)
                log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Invalid log file path: {e}")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                error_code=ErrorCode.CONFIG_INVALID
            )

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value

    def with_overrides(
        self,
        root_dir: Optional[Path] = None,
        targets_dir: Optional[Path] = None,
        delay_seconds: Optional[float] = None,
        retry_rounds: Optional[int] = None,
    ) -> "CreatorSyncSettings":
        """Return a copy with CLI-level overrides applied.

        Sections are rebuilt rather than copied so field validators (the
        delay and round floors) still run on the overridden values.
        """
        paths = self.paths.model_dump()
        if root_dir is not None:
            paths["root_dir"] = Path(root_dir)
        if targets_dir is not None:
            paths["targets_dir"] = Path(targets_dir)

        fleet = self.fleet.model_dump()
        if delay_seconds is not None:
            fleet["delay_seconds"] = delay_seconds
        if retry_rounds is not None:
            fleet["retry_rounds"] = retry_rounds

        return self.model_copy(
            update={"paths": PathSettings(**paths), "fleet": FleetSettings(**fleet)}
        )


def load_settings(**overrides) -> CreatorSyncSettings:
    """Load settings from environment variables and defaults.

    Environment variables override Pydantic Field defaults; keyword
    arguments override both (used by tests to pin sections).

    Returns:
        Loaded and validated settings

    Raises:
        ConfigurationError: If configuration is invalid
    """
    from dotenv import load_dotenv
    load_dotenv()

    try:
        settings = CreatorSyncSettings(**overrides)
        settings.validate_configuration()
        return settings

    except Exception as e:
        if isinstance(e, ConfigurationError):
            raise
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID
        ) from e
