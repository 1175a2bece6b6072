"""Configuration management."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


@dataclass
class ClaudeConfig:
    """Claude API settings."""
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 1024
    temperature: float = 0.3
    max_retries: int = 5
    initial_retry_delay: float = 2.0
    request_delay: float = 0.5
    timeout: float = 60.0


@dataclass
class SourceConfig:
    """Hacker News source settings."""
    base_url: str = "https://hn.algolia.com/api/v1"
    max_candidates: int = 30
    max_comments: int = 5
    comment_depth: int = 2
    timeout: float = 30.0


@dataclass
class ArticleConfig:
    """Article extraction settings."""
    timeout: float = 10.0
    max_chars: int = 5000
    user_agent: str = "Mozilla/5.0 (compatible; HN-Digest/1.0)"


@dataclass
class DigestConfig:
    """Digest run settings."""
    quota: int = 10
    history_expiry_days: int = 7
    item_delay: float = 1.0


@dataclass
class StorageConfig:
    """Item store settings."""
    backend: str = "sqlite"
    path: Path = Path("data/hn_digest.db")


@dataclass
class DeliveryConfig:
    """Digest delivery settings."""
    method: str = "file"
    output_dir: Path = Path("digests")
    email_from: str = ""
    email_to: str = ""
    feedback_url: str = "http://localhost:3000"


@dataclass
class ServerConfig:
    """Feedback server settings."""
    host: str = "0.0.0.0"
    port: int = 3000


DEFAULT_INTERESTS = [
    "AI",
    "machine learning",
    "developer tools",
    "programming languages",
    "distributed systems",
]


@dataclass
class Settings:
    """Application settings."""
    
    # Secrets (from environment only)
    anthropic_api_key: str = ""
    resend_api_key: str = ""
    cron_secret: Optional[str] = None
    
    # Seed profile, used only while the store has no interests
    interests: list[str] = field(default_factory=lambda: list(DEFAULT_INTERESTS))
    excluded: list[str] = field(default_factory=list)
    
    # Config sections
    claude: ClaudeConfig = field(default_factory=ClaudeConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    article: ArticleConfig = field(default_factory=ArticleConfig)
    digest: DigestConfig = field(default_factory=DigestConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    delivery: DeliveryConfig = field(default_factory=DeliveryConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    
    @property
    def claude_model(self) -> str:
        return self.claude.model
    
    @property
    def claude_max_retries(self) -> int:
        return self.claude.max_retries
    
    @property
    def claude_initial_retry_delay(self) -> float:
        return self.claude.initial_retry_delay
    
    @property
    def claude_request_delay(self) -> float:
        return self.claude.request_delay
    
    @property
    def quota(self) -> int:
        return self.digest.quota
    
    @property
    def history_expiry_days(self) -> int:
        return self.digest.history_expiry_days


_PATH_FIELDS = {"path", "output_dir"}


def load_config(config_path: Path = Path("config.yaml")) -> dict:
    """Load configuration from YAML file."""
    if not config_path.exists():
        return {}
    
    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def _apply_section(section: object, values: dict) -> None:
    for key, value in values.items():
        if not hasattr(section, key):
            raise ValueError(f"Unknown config key: {type(section).__name__}.{key}")
        setattr(section, key, Path(value) if key in _PATH_FIELDS else value)


def get_settings(config_path: Path = Path("config.yaml")) -> Settings:
    """Get application settings from YAML config and environment."""
    config = load_config(config_path)
    
    settings = Settings(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
        resend_api_key=os.getenv("RESEND_API_KEY", ""),
        cron_secret=os.getenv("CRON_SECRET") or None,
    )
    
    if "interests" in config:
        settings.interests = [str(term) for term in config["interests"] or []]
    if "excluded" in config:
        settings.excluded = [str(term) for term in config["excluded"] or []]
    
    for name in ("claude", "source", "article", "digest", "storage", "delivery", "server"):
        if name in config:
            _apply_section(getattr(settings, name), config[name] or {})
    
    # Deployment overrides
    env_overrides = {
        "EMAIL_FROM": (settings.delivery, "email_from", str),
        "EMAIL_TO": (settings.delivery, "email_to", str),
        "FEEDBACK_URL": (settings.delivery, "feedback_url", str),
        "DELIVERY_METHOD": (settings.delivery, "method", str),
        "HN_DIGEST_DB_PATH": (settings.storage, "path", Path),
        "PORT": (settings.server, "port", int),
    }
    for env_name, (section, key, cast) in env_overrides.items():
        value = os.getenv(env_name)
        if value:
            setattr(section, key, cast(value))
    
    return settings
