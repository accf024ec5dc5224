# ACP Lens - Annotation mining and variable resolution for source comments
# Copyright (c) 2025 Matt Varendorff
# SPDX-License-Identifier: BSL-1.0

"""Engine configuration read from ``.acp.toml``.

Example::

    max_depth = 10
    duplicate_policy = "last"
    value_optional_namespaces = ["note"]
    vars_file_patterns = [".acp.vars.json", "*.acp.vars.json"]
    log_level = "DEBUG"

Every key is optional. A file that cannot be read or validated is ignored
with a warning and the defaults apply.
"""

import logging
import tomllib
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, ValidationError

from acplens.documents.provider import DEFAULT_VARS_FILE_PATTERNS

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".acp.toml"


class EngineConfig(BaseModel):
    """Settings for parsing and variable resolution."""

    model_config = {"extra": "forbid"}

    max_depth: int = Field(default=10, ge=1)
    duplicate_policy: Literal["first", "last"] = "first"
    value_optional_namespaces: list[str] = Field(default_factory=list)
    vars_file_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_VARS_FILE_PATTERNS))
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"


def discover_config(source_path: Path) -> Optional[Path]:
    """Find the engine config governing a workspace path.

    A file path starts the search at its directory. The directory itself
    and at most three ancestors are checked, nearest first, so a nested
    workspace can override the settings of an enclosing repository.

    Returns:
        The nearest .acp.toml, or None when the engine runs on defaults.
    """
    start = source_path.parent if source_path.is_file() else source_path
    search = [start, *list(start.parents)[:3]]
    return next((d / CONFIG_FILE_NAME for d in search if (d / CONFIG_FILE_NAME).is_file()), None)


def load_config(config_path: Optional[Path]) -> EngineConfig:
    """Load a config file, falling back to defaults on any problem."""
    if config_path is None:
        return EngineConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring unreadable config {config_path}: {e}")
        return EngineConfig()

    try:
        config = EngineConfig.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid config {config_path}: {e.errors()[0]['msg']}")
        return EngineConfig()

    logger.debug(f"Loaded config from {config_path}")
    return config


def config_for(source_path: Path) -> EngineConfig:
    """Configuration that applies to a file or directory."""
    return load_config(discover_config(source_path))
