# uigen/core/config.py
"""
Application configuration - single source of truth for all settings.
"""
import os
import re
from pathlib import Path
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


_SIZE_UNITS = {"b": 1, "kb": 1024, "mb": 1024 ** 2, "gb": 1024 ** 3}


def parse_size(value: str) -> int:
    """Parse a human size such as '10mb' or '512kb' into bytes."""
    match = re.fullmatch(r"\s*(\d+)\s*([kmg]?b)?\s*", value.lower())
    if not match:
        raise ValueError(f"Invalid size: {value!r}")
    number, unit = match.groups()
    return int(number) * _SIZE_UNITS[unit or "b"]


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass
class ServerSettings:
    """HTTP server configuration."""
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3001")))
    environment: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    version: str = field(default_factory=lambda: os.getenv("APP_VERSION", "1.0.0"))
    cors_origins: List[str] = field(default_factory=lambda: _env_list("CORS_ORIGIN", "http://localhost:5173"))
    max_body_size: int = field(default_factory=lambda: parse_size(os.getenv("MAX_FILE_SIZE", "10mb")))
    # Default: 100 requests per minute per IP
    rate_limit: str = field(default_factory=lambda: os.getenv("RATE_LIMIT", "100/minute"))

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


@dataclass
class LLMSettings:
    """AI provider configuration."""
    default_provider: Optional[str] = field(default_factory=lambda: os.getenv("DEFAULT_AI_PROVIDER"))
    anthropic_api_key: Optional[str] = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY"))
    openai_api_key: Optional[str] = field(default_factory=lambda: os.getenv("OPENAI_API_KEY"))
    # Accept both GOOGLE_API_KEY (preferred) and GEMINI_API_KEY
    google_api_key: Optional[str] = field(default_factory=lambda: os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY"))
    anthropic_model: str = field(default_factory=lambda: os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-20241022"))
    openai_model: str = field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-4o-mini"))
    google_model: str = field(default_factory=lambda: os.getenv("GOOGLE_MODEL", "gemini-2.0-flash-001"))
    anthropic_base_url: Optional[str] = field(default_factory=lambda: os.getenv("ANTHROPIC_BASE_URL"))
    openai_base_url: Optional[str] = field(default_factory=lambda: os.getenv("OPENAI_BASE_URL"))
    google_base_url: Optional[str] = field(default_factory=lambda: os.getenv("GOOGLE_BASE_URL"))
    enable_mock: bool = field(default_factory=lambda: _env_bool("ENABLE_MOCK_PROVIDER", "true"))
    mock_latency: float = field(default_factory=lambda: float(os.getenv("MOCK_LATENCY", "0")))
    temperature: float = 0.7
    max_tokens: int = 4096
    request_timeout: float = field(default_factory=lambda: float(os.getenv("AI_REQUEST_TIMEOUT", "60")))
    health_check_on_startup: bool = field(default_factory=lambda: _env_bool("AI_HEALTH_CHECK_ON_STARTUP", "false"))


@dataclass
class DatabaseSettings:
    """SQLite persistence configuration."""
    path: Path = field(default_factory=lambda: Path(os.getenv("DATABASE_PATH", "data/uigen.db")))


@dataclass
class PathSettings:
    """Path configuration."""
    workspaces_dir: Path = field(default_factory=lambda: Path(os.getenv("WORKSPACES_DIR", "workspaces")))


@dataclass
class Settings:
    """Main application settings."""
    server: ServerSettings = field(default_factory=ServerSettings)
    llm: LLMSettings = field(default_factory=LLMSettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    paths: PathSettings = field(default_factory=PathSettings)
    debug: bool = field(default_factory=lambda: _env_bool("UIGEN_DEBUG", "false"))

    def ensure_directories(self):
        """Ensure required directories exist."""
        self.database.path.parent.mkdir(parents=True, exist_ok=True)
        self.paths.workspaces_dir.mkdir(parents=True, exist_ok=True)


# Singleton instance
settings = Settings()
