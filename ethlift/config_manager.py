"""Remapping sources: Brownie YAML configs and Foundry TOML projects."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Union

import toml
import yaml

from .config import (
    FOUNDRY_PROFILE,
    LEGACY_CONFIG_FILENAME,
    LEGACY_CONFIG_FRAGMENT,
    LEGACY_REMAPPINGS_KEY,
    NATIVE_CONFIG_FILENAME,
    NATIVE_DEFAULT_LIBS,
    NATIVE_REMAPPINGS_FILENAME,
)
from .exceptions import ConfigError, ConfigKeyMissing
from .models import ProjectConfig, RemappingEntry
from .remappings import parse_remapping, translate_legacy_remappings

logger = logging.getLogger(__name__)

ConfigKind = Literal["auto", "brownie", "foundry"]


def detect_config_file_path(cwd: Path) -> Path:
    """Pick the project config in ``cwd``.

    The Brownie config wins when present; otherwise ``foundry.toml`` is
    returned whether or not it exists.
    """
    legacy = cwd / LEGACY_CONFIG_FILENAME
    if legacy.exists():
        return legacy
    return cwd / NATIVE_CONFIG_FILENAME


def select_config_kind(config_path: Union[str, os.PathLike], kind: ConfigKind = "auto") -> str:
    """Decide which remapping convention applies to ``config_path``."""
    if kind != "auto":
        return kind
    if LEGACY_CONFIG_FRAGMENT in str(config_path):
        return "brownie"
    return "foundry"


# ------------------------------------------------------------------
# Legacy (Brownie) configuration
# ------------------------------------------------------------------

def load_legacy_remappings(config_path: Union[str, os.PathLike]) -> List[str]:
    """Read ``compiler.solc.remappings`` from a Brownie YAML config.

    Raises:
        ConfigError: If the file cannot be read or is not valid YAML.
        ConfigKeyMissing: If the key is absent or not a list of strings.
    """
    path = Path(config_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc

    key = ".".join(LEGACY_REMAPPINGS_KEY)
    node: Any = data
    for part in LEGACY_REMAPPINGS_KEY:
        if not isinstance(node, dict) or part not in node:
            raise ConfigKeyMissing(str(path), key)
        node = node[part]

    if not isinstance(node, list) or not all(isinstance(item, str) for item in node):
        raise ConfigKeyMissing(str(path), key)

    logger.debug("Loaded %d remapping(s) from %s", len(node), path)
    return list(node)


# ------------------------------------------------------------------
# Native (Foundry) configuration
# ------------------------------------------------------------------

def load_native_config(config_path: Union[str, os.PathLike], profile: str = FOUNDRY_PROFILE) -> Dict[str, Any]:
    """Return the settings table for ``profile`` from a Foundry config.

    Looks up ``[profile.<name>]`` first and falls back to the legacy
    top-level ``[<name>]`` table. A missing file yields an empty dict.
    """
    path = Path(config_path)
    if not path.exists():
        logger.debug("No native config at %s, using defaults", path)
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            document = toml.load(f)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    except toml.TomlDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc

    profiles = document.get("profile", {})
    if isinstance(profiles, dict) and isinstance(profiles.get(profile), dict):
        return profiles[profile]
    section = document.get(profile, {})
    return section if isinstance(section, dict) else {}


def _absolutize(target: str, root: Path) -> str:
    if os.path.isabs(target):
        return target
    resolved = str(root / target)
    if target.endswith("/") and not resolved.endswith("/"):
        resolved += "/"
    return resolved


def _read_remappings_txt(path: Path) -> List[str]:
    if not path.is_file():
        return []
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"cannot read {path}: {exc}") from exc
    return [line.strip() for line in lines if line.strip() and not line.strip().startswith("#")]


def _detect_lib_remappings(root: Path, libs: List[str]) -> List[str]:
    detected = []
    for lib in libs:
        lib_dir = root / lib
        if not lib_dir.is_dir():
            continue
        for package in sorted(p for p in lib_dir.iterdir() if p.is_dir()):
            if package.name.startswith("."):
                continue
            if (package / "src").is_dir():
                detected.append(f"{package.name}/={lib}/{package.name}/src/")
            else:
                detected.append(f"{package.name}/={lib}/{package.name}/")
    return detected


def load_native_remappings(
    config_path: Union[str, os.PathLike],
    profile: str = FOUNDRY_PROFILE,
) -> List[RemappingEntry]:
    """Resolve the full remapping set of a Foundry project.

    Sources, in priority order: the profile's ``remappings`` list, then
    ``remappings.txt``, then one entry per package under each ``libs``
    directory. The first rule for a given alias wins. Relative targets are
    anchored at the directory holding ``config_path``.
    """
    path = Path(config_path)
    root = path.parent
    settings = load_native_config(path, profile)

    configured = settings.get("remappings", [])
    if not isinstance(configured, list) or not all(isinstance(item, str) for item in configured):
        raise ConfigError(f"'remappings' in {path} must be a list of strings")
    libs = settings.get("libs", NATIVE_DEFAULT_LIBS)

    raw = (
        list(configured)
        + _read_remappings_txt(root / NATIVE_REMAPPINGS_FILENAME)
        + _detect_lib_remappings(root, list(libs))
    )

    entries: List[RemappingEntry] = []
    seen = set()
    for line in raw:
        entry = parse_remapping(line)
        key = (entry.context, entry.alias)
        if key in seen:
            logger.debug("Skipping shadowed remapping %s", entry)
            continue
        seen.add(key)
        entries.append(
            RemappingEntry(
                alias=entry.alias,
                target_path=_absolutize(entry.target_path, root),
                context=entry.context,
            )
        )
    return entries


# ------------------------------------------------------------------
# Dispatch
# ------------------------------------------------------------------

def extract_remappings(
    config_path: Union[str, os.PathLike],
    home: Optional[Path] = None,
    kind: ConfigKind = "auto",
    profile: str = FOUNDRY_PROFILE,
) -> List[RemappingEntry]:
    """Return the effective remappings for ``config_path``.

    Brownie configs are read and translated into the package cache under
    ``home``; anything else is treated as a Foundry project.
    """
    selected = select_config_kind(config_path, kind)
    logger.info("Reading %s remappings from %s", selected, config_path)
    if selected == "brownie":
        return translate_legacy_remappings(load_legacy_remappings(config_path), home=home)
    return load_native_remappings(config_path, profile=profile)


def build_project_config(
    sources: Union[str, os.PathLike],
    root: Path,
    config_path: Optional[Union[str, os.PathLike]] = None,
    home: Optional[Path] = None,
    kind: ConfigKind = "auto",
    profile: str = FOUNDRY_PROFILE,
) -> ProjectConfig:
    """Assemble the immutable :class:`ProjectConfig` for one run."""
    path = Path(config_path) if config_path else detect_config_file_path(root)
    if not path.is_absolute():
        path = root / path
    remappings = extract_remappings(path, home=home, kind=kind, profile=profile)

    source_root = Path(sources)
    if not source_root.is_absolute():
        source_root = root / source_root
    return ProjectConfig(sources=source_root, root=root, remappings=tuple(remappings))


def render_native_config(
    remappings: List[RemappingEntry],
    src: str = "contracts",
    out: str = "out",
    libs: Optional[List[str]] = None,
    profile: str = "default",
) -> str:
    """Render a ``foundry.toml`` document carrying ``remappings``."""
    document = {
        "profile": {
            profile: {
                "src": src,
                "out": out,
                "libs": list(libs) if libs is not None else list(NATIVE_DEFAULT_LIBS),
                "remappings": [str(entry) for entry in remappings],
            }
        }
    }
    return toml.dumps(document)
