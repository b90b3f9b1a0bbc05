import os
from pathlib import Path
from typing import Optional

import yaml

from codelens_core.modes import DEFAULT_MODE

DEFAULT_EXCLUDED_DIRS = ("node_modules", "dist", ".git", "build")

DEFAULT_CONFIG: dict = {
    "model": "anthropic",
    "mode": DEFAULT_MODE,
    "default_language": "typescript",  # used when neither an override nor the file name gives a language
    "instructions": None,  # None = no standing instructions; set to a Markdown file path to add some
    "exclude_dirs": list(DEFAULT_EXCLUDED_DIRS),
    "store": "sqlite",
    "store_path": ".codelens.db",
    "max_workers": 8,
    "model_name": None,  # None = the provider's default model
}


def load_config(config_path: str = ".codelens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .codelens.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "exclude_dirs": list(DEFAULT_CONFIG["exclude_dirs"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    config["anthropic_api_key"] = os.environ.get("ANTHROPIC_API_KEY")
    config["openai_api_key"] = os.environ.get("OPENAI_API_KEY")

    return config


def load_instructions(config: dict) -> str:
    """
    Load standing custom instructions.

    If ``instructions`` is set in config, reads that Markdown file (relative to
    cwd). Otherwise there are no standing instructions and "" is returned.
    """
    custom_path = config.get("instructions")
    if not custom_path:
        return ""
    p = Path(custom_path)
    if not p.exists():
        raise FileNotFoundError(f"Instructions file not found: {custom_path}")
    return p.read_text().strip()


def merge_instructions(standing: str, extra: Optional[str]) -> str:
    """Combine the configured instructions with a one-off ``--prompt``."""
    parts = [p.strip() for p in (standing, extra or "") if p and p.strip()]
    return "\n\n".join(parts)
