"""Flatten a local contract into a single compilation unit."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

from .exceptions import FlattenFailed
from .models import ProjectConfig
from .project_paths import ProjectPaths, ProjectPathsError

logger = logging.getLogger(__name__)


def create_project_paths(config: ProjectConfig) -> ProjectPaths:
    return ProjectPaths.from_project_config(config)


def flatten_file(target: Union[str, os.PathLike], config: ProjectConfig) -> str:
    """Return ``target`` with every import inlined.

    ``target`` is taken relative to ``config.root`` unless absolute.
    Nothing is written to disk.

    Raises:
        FlattenFailed: On any resolution or read error; the original
            exception is chained.
    """
    project_paths = create_project_paths(config)
    file_path = Path(target)
    if not file_path.is_absolute():
        file_path = config.root / file_path

    logger.info("Flattening %s (%d remapping(s))", file_path, len(config.remappings))
    try:
        return project_paths.flatten(file_path)
    except (ProjectPathsError, OSError, UnicodeDecodeError) as exc:
        raise FlattenFailed(str(target), exc) from exc
