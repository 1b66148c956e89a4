"""
Runtime configuration for apiscout.

Values come from the environment (already populated from .env files by the
package initializer). Construct once at startup with ScoutConfig.from_env()
and pass the instance down.
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

LOG_FORMAT = '[%(asctime)s] [%(name)s] %(levelname)s: %(message)s'
LOG_DATE_FORMAT = '%H:%M:%S'

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    try:
        return int(value) if value else default
    except ValueError:
        logging.getLogger("ScoutConfig").warning(f"Ignoring non-integer {name}={value!r}, using {default}")
        return default


@dataclass
class ScoutConfig:
    """Configuration for import, detection and the HTTP service"""
    upload_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()) / "apiscout-uploads")
    clone_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()) / "apiscout-git-clones")
    max_upload_bytes: int = 100 * 1024 * 1024  # 100MB
    clone_timeout: int = 300  # seconds
    github_token: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    openapi_on_analyze: bool = True
    route_prefix: str = "/api-importer"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 7007

    @property
    def metadata_file(self) -> Path:
        """Durable mirror of the handle registry"""
        return self.upload_dir / ".metadata.json"

    @classmethod
    def from_env(cls) -> "ScoutConfig":
        defaults = cls()
        return cls(
            upload_dir=Path(os.getenv("APISCOUT_UPLOAD_DIR") or defaults.upload_dir),
            clone_dir=Path(os.getenv("APISCOUT_CLONE_DIR") or defaults.clone_dir),
            max_upload_bytes=_env_int("APISCOUT_MAX_UPLOAD_BYTES", defaults.max_upload_bytes),
            clone_timeout=_env_int("APISCOUT_CLONE_TIMEOUT", defaults.clone_timeout),
            github_token=os.getenv("GITHUB_TOKEN") or None,
            gemini_api_key=os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY") or None,
            gemini_model=os.getenv("APISCOUT_GEMINI_MODEL") or defaults.gemini_model,
            openapi_on_analyze=_env_bool("APISCOUT_OPENAPI_ON_ANALYZE", defaults.openapi_on_analyze),
            route_prefix=os.getenv("APISCOUT_ROUTE_PREFIX", defaults.route_prefix),
            log_level=(os.getenv("APISCOUT_LOG_LEVEL") or defaults.log_level).upper(),
            host=os.getenv("APISCOUT_HOST") or defaults.host,
            port=_env_int("APISCOUT_PORT", defaults.port),
        )

    def ensure_dirs(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.clone_dir.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger"""
    root = logging.getLogger()
    if not any(getattr(h, "_apiscout", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        handler._apiscout = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # Keep per-request client chatter out of the log
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


__all__ = ['ScoutConfig', 'configure_logging', 'LOG_FORMAT']
