from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from feedsource.exceptions import ConfigError

# Load .env file from the working directory
_env_path = Path.cwd() / ".env"
if _env_path.exists():
    load_dotenv(_env_path)

DEFAULT_CONFIG_NAME = "sleet.json"
CONFIG_ENV_VAR = "FEEDSOURCE_CONFIG"


class LocalSettings(BaseModel):
    """Parsed feed configuration plus the location it was read from.

    ``path`` is ``None`` for documents built in memory; relative local source
    paths cannot be resolved in that case.
    """

    model_config = ConfigDict(frozen=True)

    path: Path | None = None
    document: dict[str, Any] = Field(default_factory=dict)

    @property
    def sources(self) -> list[Any]:
        """Return the raw ``sources`` list of the document.

        Raises:
            ConfigError: If the document has no ``sources`` list.
        """
        for key, value in self.document.items():
            if isinstance(key, str) and key.lower() == "sources":
                if isinstance(value, list):
                    return value
                break
        raise ConfigError("Invalid config. No sources found.", field="sources")

    @classmethod
    def from_document(cls, document: dict[str, Any], path: Path | str | None = None) -> "LocalSettings":
        return cls(path=Path(path) if path is not None else None, document=document)

    @classmethod
    def load(cls, path: Path | None = None) -> "LocalSettings":
        """Load settings from a JSON or YAML configuration file.

        Args:
            path: Optional path to configuration file. If not provided, uses
                the FEEDSOURCE_CONFIG environment variable or defaults to
                sleet.json in the working directory.

        Returns:
            LocalSettings instance with loaded configuration.

        Raises:
            FileNotFoundError: If configuration file does not exist.
            ConfigError: If the file cannot be parsed into a mapping.
        """
        config_path = path or Path(os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_NAME))
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with config_path.open("r", encoding="utf-8") as fp:
            try:
                if config_path.suffix.lower() in {".yaml", ".yml"}:
                    payload = yaml.safe_load(fp) or {}
                else:
                    payload = json.load(fp)
            except (json.JSONDecodeError, yaml.YAMLError) as exc:
                raise ConfigError(
                    f"Invalid configuration file {config_path}: {exc}",
                    details={"path": str(config_path)},
                ) from exc
        if not isinstance(payload, dict):
            raise ConfigError(
                f"Invalid configuration file {config_path}: expected a mapping at the top level",
                details={"path": str(config_path)},
            )
        return cls(path=config_path, document=payload)


__all__ = ["LocalSettings", "CONFIG_ENV_VAR", "DEFAULT_CONFIG_NAME"]
