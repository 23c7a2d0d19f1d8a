"""
Product presence checks.

Detection is a cheap, read-only look for filesystem footprints and
executables. It never mutates anything.
"""

from __future__ import annotations

import os as _os
import pathlib as _pathlib
import typing as _typing

DEFAULT_BINARY_SEARCH_PATHS = ("/usr/local/bin", "/opt/homebrew/bin", "~/.local/bin")
"""Searched before $PATH; GUI-launched processes often have a minimal PATH."""


def expand_home(path: str | _pathlib.Path, home: _pathlib.Path) -> _pathlib.Path:
    """Expand a leading ``~`` against an explicit home directory."""
    text = str(path)
    if text == "~":
        return home
    if text.startswith("~/"):
        return home / text[2:]
    return _pathlib.Path(text)


def first_existing_path(
    candidates: _typing.Iterable[_pathlib.Path],
) -> _pathlib.Path | None:
    """Return the first candidate that exists (dangling symlinks count)."""
    for candidate in candidates:
        if _os.path.lexists(candidate):
            return candidate
    return None


def default_search_paths(home: _pathlib.Path) -> list[_pathlib.Path]:
    """Well-known binary directories followed by $PATH, de-duplicated."""
    paths = [expand_home(p, home) for p in DEFAULT_BINARY_SEARCH_PATHS]
    paths.extend(_pathlib.Path(p) for p in _os.environ.get("PATH", "").split(_os.pathsep) if p)

    seen: set[_pathlib.Path] = set()
    deduped: list[_pathlib.Path] = []
    for path in paths:
        if path not in seen:
            seen.add(path)
            deduped.append(path)
    return deduped


def first_executable_path(
    names: _typing.Iterable[str],
    search_paths: _typing.Iterable[_pathlib.Path],
    home: _pathlib.Path,
) -> _pathlib.Path | None:
    """
    Find the first executable among names.

    A name containing a slash is checked as a path; other names are
    looked up in each search path in turn.

    Args:
        names: Executable names or paths, in preference order.
        search_paths: Directories to look in.
        home: Home directory for ``~`` expansion.

    Returns:
        Path of the first executable found, or None.
    """
    search_paths = list(search_paths)
    for name in names:
        expanded = expand_home(name, home)
        if "/" in name:
            if expanded.is_file() and _os.access(expanded, _os.X_OK):
                return expanded
            continue
        for directory in search_paths:
            candidate = directory / name
            if candidate.is_file() and _os.access(candidate, _os.X_OK):
                return candidate
    return None
