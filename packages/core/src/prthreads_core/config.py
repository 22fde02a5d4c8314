from pathlib import Path
from typing import Optional

import yaml

from prthreads_core.errors import ConfigError

DEFAULT_CONFIG_PATH = ".prthreads.yml"

DEFAULT_CONFIG: dict = {
    "reaction": "THUMBS_UP",  # GraphQL ReactionContent value that counts as approval
    "exclude": [],  # fnmatch patterns or directory names whose threads are dropped (e.g. "migrations/", "*.lock")
}


def load_config(config_path: str = DEFAULT_CONFIG_PATH, cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prthreads.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "exclude": list(DEFAULT_CONFIG["exclude"])}

    path = Path(config_path)
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Error reading config file: {path}: {e}") from e
        if not isinstance(file_config, dict):
            raise ConfigError(f"{path} must contain a mapping of settings")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    if not isinstance(config["reaction"], str) or not config["reaction"]:
        raise ConfigError("reaction must be a non-empty string (e.g. THUMBS_UP)")
    if not isinstance(config["exclude"], list) or not all(isinstance(p, str) for p in config["exclude"]):
        raise ConfigError("exclude must be a list of patterns")

    return config
