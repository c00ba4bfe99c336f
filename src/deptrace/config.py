"""Configuration management for deptrace using platformdirs."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from platformdirs import user_config_dir, user_state_dir
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import COMMON_ENTRIES, IGNORED_DIRS

logger = logging.getLogger(__name__)


class GlobalConfig(BaseSettings):
    """Global configuration for deptrace."""

    model_config = SettingsConfigDict(
        env_prefix="DEPTRACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra environment variables
    )

    # Traversal
    max_depth: int = Field(default=30, ge=0, description="Maximum reference depth from an entry file")
    exclude_dirs: List[str] = Field(default_factory=list, description="Project-relative paths to skip")
    workers: int = Field(default=1, ge=1, description="Entry files analysed in parallel")

    # Rendering
    tree_depth: int = Field(default=10, ge=0, description="Maximum depth of the rendered tree")
    show_deps: bool = Field(default=True, description="Annotate files with dependency counts")
    report_title: str = Field(default="Dependency Graph", description="Markdown report heading")
    report_output: str = Field(default="dependency-report.md", description="Report path, relative to the project root")

    # Directory probe and watch mode
    probe_depth: int = Field(default=5, ge=1, description="Depth of the folder probe shown on errors")
    watch_delay: float = Field(default=2.0, ge=0, description="Seconds to wait for changes to settle")

    ignored_dirs: List[str] = Field(default=list(IGNORED_DIRS))

    common_entries: List[str] = Field(default=list(COMMON_ENTRIES))


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        return raw


class ConfigManager:
    """Manages the user-level deptrace configuration file."""

    def __init__(self, config_dir: Optional[Path] = None, state_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir or user_config_dir("deptrace", "deptrace"))
        self.state_dir = Path(state_dir or user_state_dir("deptrace", "deptrace"))

        # Create directories if they don't exist
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.state_dir.mkdir(parents=True, exist_ok=True)

        self.config_file = self.config_dir / "config.json"
        self.log_file = self.state_dir / "deptrace.log"

        self.overrides: Dict[str, Any] = self._load_overrides()
        self.global_config = self._build_config(self.overrides)

    def _load_overrides(self) -> Dict[str, Any]:
        """Load values saved in config.json."""
        if not self.config_file.exists():
            return {}

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read {self.config_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring {self.config_file}: expected a JSON object")
            return {}

        return {k: v for k, v in data.items() if k in GlobalConfig.model_fields}

    def _build_config(self, overrides: Dict[str, Any]) -> GlobalConfig:
        try:
            return GlobalConfig(**overrides)
        except ValidationError as e:
            logger.warning(f"Invalid values in {self.config_file}, using defaults: {e}")
            return GlobalConfig()

    def save_config(self):
        """Save overrides to the configuration file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self.overrides, f, indent=2)

    def set_value(self, key: str, raw_value: str) -> Any:
        """Validate and persist a single setting, returning the stored value."""
        if key not in GlobalConfig.model_fields:
            raise KeyError(key)

        overrides = dict(self.overrides)
        overrides[key] = _parse_value(raw_value)
        # Raises ValidationError on a bad value, leaving the file untouched
        config = GlobalConfig(**overrides)

        value = getattr(config, key)
        self.overrides[key] = value
        self.global_config = config
        self.save_config()
        return value

    def reset(self):
        """Drop all saved overrides."""
        self.overrides = {}
        self.global_config = GlobalConfig()
        self.config_file.unlink(missing_ok=True)
