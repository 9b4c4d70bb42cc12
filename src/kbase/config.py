"""Configuration loader.

Loads settings from ~/.kbase/config.json and applies environment
overrides on top.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .ai.llm_client import DEFAULT_MODEL

logger = logging.getLogger(__name__)

KBASE_HOME = Path.home() / ".kbase"
DEFAULT_CONFIG_PATH = KBASE_HOME / "config.json"


@dataclass
class KBaseConfig:
    """Runtime configuration.

    Attributes:
        data_path: SQLite database file holding the knowledge base.
        log_dir: Directory for the JSONL event log.
        model: Groq model used by the assistant.
        api_key: Groq API key; None disables the assistant.
        max_log_size_mb: Event log size that triggers rotation.
    """

    data_path: Path = field(default_factory=lambda: KBASE_HOME / "kbase.db")
    log_dir: Path = field(default_factory=lambda: KBASE_HOME / "logs")
    model: str = DEFAULT_MODEL
    api_key: str | None = None
    max_log_size_mb: float = 10.0

    def __post_init__(self) -> None:
        if self.max_log_size_mb <= 0:
            raise ValueError("max_log_size_mb must be positive")


def load_config(
    config_path: Path | None = None, environ: dict[str, str] | None = None
) -> KBaseConfig:
    """Load KBaseConfig from a JSON file and the environment.

    The config file should have this structure:
    ```json
    {
      "data_path": "~/.kbase/kbase.db",
      "log_dir": "~/.kbase/logs",
      "model": "llama-3.1-70b-versatile",
      "max_log_size_mb": 10
    }
    ```

    Environment variables KBASE_DATA_PATH, KBASE_LOG_DIR, GROQ_MODEL and
    GROQ_API_KEY take precedence over the file.

    Args:
        config_path: Path to config file. Uses DEFAULT_CONFIG_PATH if None.
        environ: Environment mapping. Uses os.environ if None.

    Returns:
        KBaseConfig instance with loaded values.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    env = os.environ if environ is None else environ

    data: dict[str, Any] = {}
    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
    else:
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = json.load(f)
            if isinstance(loaded, dict):
                data = loaded
            else:
                logger.warning("Config in %s is not an object. Using defaults.", path)
        except json.JSONDecodeError as e:
            logger.warning("Invalid JSON in %s: %s. Using defaults.", path, e)
        except OSError as e:
            logger.warning("Cannot read %s: %s. Using defaults.", path, e)

    config = _parse_config(data)

    if env.get("KBASE_DATA_PATH"):
        config.data_path = Path(env["KBASE_DATA_PATH"]).expanduser()
    if env.get("KBASE_LOG_DIR"):
        config.log_dir = Path(env["KBASE_LOG_DIR"]).expanduser()
    if env.get("GROQ_MODEL"):
        config.model = env["GROQ_MODEL"]
    if env.get("GROQ_API_KEY"):
        config.api_key = env["GROQ_API_KEY"]

    return config


def _parse_config(data: dict[str, Any]) -> KBaseConfig:
    """Parse config dictionary into KBaseConfig, ignoring invalid values."""
    config = KBaseConfig()

    if isinstance(data.get("data_path"), str) and data["data_path"]:
        config.data_path = Path(data["data_path"]).expanduser()

    if isinstance(data.get("log_dir"), str) and data["log_dir"]:
        config.log_dir = Path(data["log_dir"]).expanduser()

    if isinstance(data.get("model"), str) and data["model"]:
        config.model = data["model"]

    max_size = data.get("max_log_size_mb")
    if isinstance(max_size, (int, float)) and max_size > 0:
        config.max_log_size_mb = float(max_size)

    return config
