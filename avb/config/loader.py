import yaml
from pathlib import Path
from .models import AppConfig

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "avb" / "config.yaml"


def load_config(config_path: Path, required: bool = True) -> AppConfig:
    """Loads YAML config and parses it into AppConfig Pydantic model.

    A missing file is an error when ``required``; otherwise defaults are used.
    """
    if not config_path.exists():
        if required:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        return AppConfig()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    return AppConfig(**data)
