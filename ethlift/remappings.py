"""Parsing and translation of import remappings.

Two conventions are supported:

* legacy (Brownie) entries of the form ``alias=org/repo@version``, whose
  packages live in the per-user cache ``~/.brownie/packages``;
* native (Foundry) entries of the form ``[context:]prefix=path``.

Legacy entries are translated into :class:`~ethlift.models.RemappingEntry`
values so the flattener only ever deals with one shape.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from .config import LEGACY_PACKAGES_DIR
from .exceptions import HomeDirectoryNotFound, MalformedRemapping
from .models import ParsedLegacyRemapping, RemappingEntry

logger = logging.getLogger(__name__)


def parse_legacy_remapping(spec: str) -> ParsedLegacyRemapping:
    """Split ``alias=org/repo@version`` into its parts.

    Returns:
        ``(import_alias, library_name, library_path)`` where
        ``library_path`` is ``org/repo@version``.

    Raises:
        MalformedRemapping: If the string does not match the expected shape.
    """
    parts = spec.split("=")
    if len(parts) != 2:
        raise MalformedRemapping(spec, f"expected exactly one '=', found {len(parts) - 1}")
    import_alias, lib_spec = parts
    if not import_alias:
        raise MalformedRemapping(spec, "empty import alias")

    lib_path_split = lib_spec.split("@")
    if len(lib_path_split) != 2:
        raise MalformedRemapping(spec, f"expected exactly one '@', found {len(lib_path_split) - 1}")
    repo_path, version = lib_path_split

    lib_name_split = repo_path.split("/")
    if len(lib_name_split) != 2:
        raise MalformedRemapping(spec, "expected '<org>/<repo>' before '@'")
    org, lib_name = lib_name_split

    if not org or not lib_name or not version:
        raise MalformedRemapping(spec, "organization, repository and version must be non-empty")

    return ParsedLegacyRemapping(import_alias, lib_name, f"{repo_path}@{version}")


def parse_remapping(line: str) -> RemappingEntry:
    """Parse a native ``[context:]prefix=path`` remapping."""
    lhs, sep, target = line.strip().partition("=")
    if not sep:
        raise MalformedRemapping(line, "missing '='")

    context: Optional[str] = None
    alias = lhs
    if ":" in lhs:
        context, _, alias = lhs.partition(":")
        context = context or None
    if not alias:
        raise MalformedRemapping(line, "empty prefix")

    return RemappingEntry(alias=alias, target_path=target, context=context)


def resolve_home_dir() -> Path:
    """Return the current user's home directory.

    Raises:
        HomeDirectoryNotFound: If the platform cannot determine it.
    """
    try:
        return Path.home()
    except (RuntimeError, KeyError) as exc:
        raise HomeDirectoryNotFound() from exc


def translate_legacy_remappings(
    specs: Iterable[str],
    home: Optional[Path] = None,
) -> List[RemappingEntry]:
    """Convert legacy remappings into entries rooted in the package cache.

    All specs are parsed before anything is built, so a single malformed
    entry fails the whole translation. Order is preserved and duplicates
    are kept.

    Args:
        specs: Legacy ``alias=org/repo@version`` strings.
        home: Home directory to anchor the cache in. Resolved from the
            environment when omitted.
    """
    parsed = [parse_legacy_remapping(spec) for spec in specs]

    home_dir = home if home is not None else resolve_home_dir()
    packages_dir = home_dir / LEGACY_PACKAGES_DIR

    entries = [
        RemappingEntry(alias=item.import_alias, target_path=str(packages_dir / item.library_path))
        for item in parsed
    ]
    logger.debug("Translated %d legacy remapping(s) under %s", len(entries), packages_dir)
    return entries
