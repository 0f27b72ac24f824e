"""
Configuration for the tmpl CLI.

Sources, highest priority first:
- command line options (``-d/--custom-dir``, ``--answers``, ``-p``),
- environment variables (``TMPL_HOME``, ``TMPL_CONFIG``),
- the YAML config file (``~/.config/tmpl/config.yaml`` by default),
- built-in defaults (templates live in ``~/.tmpl/``).

Example config.yaml:

    templates_dir: ~/projects/templates
    answers:
      author: Ada
      license: MIT
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

import yaml

from .errors import ConfigError

DEFAULT_TEMPLATES_DIR = Path.home() / ".tmpl"
DEFAULT_CONFIG_FILE = Path.home() / ".config" / "tmpl" / "config.yaml"


@dataclass
class Config:
    templates_dir: Optional[Path] = None
    answers: Dict[str, Any] = field(default_factory=dict)


def _load_yaml(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e.strerror or e}") from e


def config_file_path(env: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    custom = env.get("TMPL_CONFIG")
    return Path(custom).expanduser() if custom else DEFAULT_CONFIG_FILE


def load_config(path: Optional[Path] = None) -> Config:
    """Load the config file; a missing file gives the defaults."""
    path = Path(path) if path is not None else config_file_path()
    if not path.exists():
        return Config()
    data = _load_yaml(path)
    if data is None:
        return Config()
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")

    config = Config()
    templates_dir = data.get("templates_dir")
    if templates_dir is not None:
        if not isinstance(templates_dir, str):
            raise ConfigError(f"'templates_dir' in {path} must be a string")
        config.templates_dir = Path(templates_dir).expanduser()
    answers = data.get("answers")
    if answers is not None:
        if not isinstance(answers, dict):
            raise ConfigError(f"'answers' in {path} must be a mapping")
        config.answers = {str(k): v for k, v in answers.items()}
    return config


def resolve_templates_dir(
    option: Optional[str],
    config: Optional[Config] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Path:
    env = os.environ if env is None else env
    if option:
        return Path(option).expanduser()
    if env.get("TMPL_HOME"):
        return Path(env["TMPL_HOME"]).expanduser()
    if config is not None and config.templates_dir is not None:
        return config.templates_dir
    return DEFAULT_TEMPLATES_DIR


def load_answers(path: Path) -> Dict[str, Any]:
    """Load a YAML mapping of variable name -> preset answer."""
    data = _load_yaml(Path(path))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Answers file {path} must contain a mapping")
    return {str(k): v for k, v in data.items()}


def parse_params(param_args: Optional[Sequence[str]]) -> Dict[str, str]:
    """
    Parse repeated -p arguments into a dict of preset answers.

    Accepted forms per item: ``key=value`` or ``key:value``, optionally
    quoted as a whole. A later occurrence of the same key wins.

    Example: ["name=demo", "useDocker:y"] -> {"name": "demo", "useDocker": "y"}
    """
    result: Dict[str, str] = {}
    if not param_args:
        return result

    for raw in param_args:
        if raw is None:
            continue
        s = str(raw).strip()
        if not s:
            continue
        if (s.startswith('"') and s.endswith('"')) or (s.startswith("'") and s.endswith("'")):
            s = s[1:-1]

        key: Optional[str] = None
        val: Optional[str] = None
        # whichever separator comes first splits key from value
        positions = [i for i in (s.find("="), s.find(":")) if i > 0]
        if positions:
            cut = min(positions)
            key, val = s[:cut].strip(), s[cut + 1:]
        if not key or val is None:
            raise ValueError(f"Invalid -p parameter format: {raw!r}. Expect key=value or key:value.")
        result[key] = val
    return result


def merge_presets(*sources: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge preset mappings; later sources override earlier ones."""
    merged: Dict[str, Any] = {}
    for source in sources:
        merged.update(source)
    return merged
