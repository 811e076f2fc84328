import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from tfreclaim.errors import ValidationError

DEFAULT_CONFIG_FILE = "tfreclaim.yaml"


@dataclass
class Config:
    include: List[str] = field(default_factory=list)
    exclude: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    targets: List[str] = field(default_factory=list)
    interpolate: bool = True
    log_file: Optional[str] = None


def _list(data: Dict[str, Any], key: str) -> List[str]:
    val = data.get(key) or []
    if isinstance(val, str):
        return [val]
    if not isinstance(val, list):
        raise ValidationError(f"config: '{key}' must be a list")
    return [str(v) for v in val]


def load_config(path: Optional[str] = None) -> Config:
    """
    Load the YAML config file with environment variable overrides.
    Without an explicit path, tfreclaim.yaml in the working directory is used
    when it exists.
    """
    data: Dict[str, Any] = {}
    if path is None and os.path.exists(DEFAULT_CONFIG_FILE):
        path = DEFAULT_CONFIG_FILE

    if path is not None:
        try:
            with open(path, encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ValidationError(f"failed to read config {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ValidationError(f"config {path} must be a mapping")

    cfg = Config(
        include=_list(data, "include"),
        exclude=_list(data, "exclude"),
        tags=_list(data, "tags"),
        targets=_list(data, "targets"),
        interpolate=bool(data.get("interpolate", True)),
        log_file=data.get("log_file"),
    )

    if os.environ.get("TFRECLAIM_LOG_FILE"):
        cfg.log_file = os.environ["TFRECLAIM_LOG_FILE"]
    if os.environ.get("TFRECLAIM_NO_INTERPOLATE", "").lower() in ("1", "true", "yes"):
        cfg.interpolate = False

    return cfg
