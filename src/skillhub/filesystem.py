"""
Filesystem primitives for staging and placing skills.

Every multi-step mutation here is built from OS-level renames so that an
interrupted operation leaves either the old or the new content in place.
Failures surface as FileSystemError chained from the underlying OSError.

Staging leftovers inside the store root use hidden names:
- ``.<skill-id>.staging-<hex>``: a copy that was never renamed into place
- ``.<skill-id>.previous-<hex>``: prior content renamed aside
"""

from __future__ import annotations

import datetime as _datetime
import errno as _errno
import logging as _logging
import os as _os
import pathlib as _pathlib
import re as _re
import shutil as _shutil
import uuid as _uuid

import skillhub.errors as errors

_logger = _logging.getLogger(__name__)

_LEFTOVER_RE = _re.compile(r"^\.(?P<skill_id>[a-z0-9-]+)\.(?P<kind>staging|previous)-[0-9a-f]+$")


def _token() -> str:
    return _uuid.uuid4().hex[:12]


def exists(path: _pathlib.Path) -> bool:
    """Whether anything (including a dangling symlink) is at path."""
    return _os.path.lexists(path)


def ensure_directory(path: _pathlib.Path) -> None:
    """
    Create a directory and its parents if needed.

    Raises:
        FileSystemError: If path exists as a non-directory or cannot be created.
    """
    if path.is_dir():
        return
    if exists(path):
        raise errors.FileSystemError(path, "path exists and is not a directory")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise errors.FileSystemError(path, "cannot create directory") from e


def copy_item(src: _pathlib.Path, dst: _pathlib.Path) -> None:
    """
    Recursively copy src to dst, preserving internal structure.

    Symlinks inside a copied tree are copied as links.

    Raises:
        FileSystemError: If dst already exists or the copy fails. A
            partially copied tree is removed before raising.
    """
    if exists(dst):
        raise errors.FileSystemError(dst, "copy destination already exists")
    try:
        if src.is_dir():
            _shutil.copytree(src, dst, symlinks=True)
        else:
            _shutil.copy2(src, dst)
    except (OSError, _shutil.Error) as e:
        if exists(dst):
            remove_item(dst)
        raise errors.FileSystemError(src, f"cannot copy to {dst}") from e
    _logger.debug("Copied %s -> %s", src, dst)


def create_symlink(target: _pathlib.Path, link_path: _pathlib.Path) -> None:
    """
    Point link_path at target, replacing whatever is at link_path.

    Callers back up existing content first. The link records the absolute
    target path, so moving the target later breaks the link.

    Raises:
        FileSystemError: If the old entry cannot be removed or the link
            cannot be created.
    """
    absolute_target = _pathlib.Path(_os.path.abspath(target))
    if exists(link_path):
        remove_item(link_path)
    try:
        link_path.symlink_to(absolute_target, target_is_directory=absolute_target.is_dir())
    except OSError as e:
        raise errors.FileSystemError(
            link_path, f"cannot create symlink to {absolute_target}"
        ) from e
    _logger.debug("Linked %s -> %s", link_path, absolute_target)


def remove_item(path: _pathlib.Path) -> bool:
    """
    Remove a file, symlink or directory tree. Missing paths are not an error.

    Returns:
        True if something was removed.

    Raises:
        FileSystemError: If removal fails.
    """
    try:
        if path.is_symlink() or (exists(path) and not path.is_dir()):
            path.unlink()
        elif path.is_dir():
            _shutil.rmtree(path)
        else:
            return False
    except OSError as e:
        raise errors.FileSystemError(path, "cannot remove") from e
    _logger.debug("Removed %s", path)
    return True


def _rename(src: _pathlib.Path, dst: _pathlib.Path) -> None:
    """Rename, falling back to a copy-then-delete move across devices."""
    try:
        _os.rename(src, dst)
    except OSError as e:
        if e.errno != _errno.EXDEV:
            raise
        _shutil.move(str(src), str(dst))


def timestamp_label(timestamp: _datetime.datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with ':' replaced so it is safe as a directory name."""
    if timestamp is None:
        timestamp = _datetime.datetime.now(_datetime.UTC)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=_datetime.UTC)
    label = timestamp.astimezone(_datetime.UTC).replace(microsecond=0).isoformat()
    return label.replace("+00:00", "Z").replace(":", "-")


def backup_path(
    backups_dir: _pathlib.Path,
    product_id: str,
    skill_id: str,
    timestamp: _datetime.datetime | None = None,
) -> _pathlib.Path:
    """Deterministic backup location: ``<backups>/<timestamp>/<product>/<skill>``."""
    return backups_dir / timestamp_label(timestamp) / product_id / skill_id


def backup_if_exists(
    path: _pathlib.Path,
    backups_dir: _pathlib.Path,
    product_id: str,
    skill_id: str,
    timestamp: _datetime.datetime | None = None,
) -> _pathlib.Path | None:
    """
    Move whatever is at path into the backups directory.

    The move is a single rename, so the original is either relocated or
    left untouched. Two backups of the same (product, skill) within one
    second get distinct ``<timestamp>.N`` directories.

    Args:
        path: Product-side location about to be overwritten.
        backups_dir: Root of the backups directory.
        product_id: Product the content belongs to.
        skill_id: Skill the content belongs to.
        timestamp: Backup time (default: now).

    Returns:
        The backup location, or None if nothing was at path.

    Raises:
        FileSystemError: If the backup cannot be made. The original is
            left in place.
    """
    if not exists(path):
        return None

    destination = backup_path(backups_dir, product_id, skill_id, timestamp)
    label = destination.parent.parent.name
    suffix = 0
    while exists(destination):
        suffix += 1
        destination = backups_dir / f"{label}.{suffix}" / product_id / skill_id

    ensure_directory(destination.parent)
    try:
        _rename(path, destination)
    except OSError as e:
        raise errors.FileSystemError(path, f"cannot back up to {destination}") from e

    _logger.info("Backed up %s to %s", path, destination)
    return destination


def stage_into_store(
    skill_id: str,
    source_dir: _pathlib.Path,
    store_dir: _pathlib.Path,
) -> _pathlib.Path:
    """
    Replace the store entry for a skill with a fresh copy of source_dir.

    Sequence:
    1. Copy source_dir into a hidden staging directory in the store root.
    2. Rename any existing entry aside to a hidden "previous" directory.
    3. Rename the staging directory into place.
    4. Delete the previous directory.
    On failure after step 2 the previous directory is renamed back.

    The destination is therefore always the old content, the new content,
    or briefly absent during a rename. A crash between steps 2 and 3 is
    repaired by recover_store().

    Args:
        skill_id: Skill being staged; names the store entry.
        source_dir: Directory holding the skill's files.
        store_dir: Canonical store root.

    Returns:
        The store entry path.

    Raises:
        FileSystemError: If any step fails. Prior content is restored.
    """
    ensure_directory(store_dir)
    destination = store_dir / skill_id
    staging = store_dir / f".{skill_id}.staging-{_token()}"

    copy_item(source_dir, staging)

    previous: _pathlib.Path | None = None
    try:
        if exists(destination):
            previous = store_dir / f".{skill_id}.previous-{_token()}"
            _os.rename(destination, previous)
        _os.rename(staging, destination)
    except OSError as e:
        if previous is not None and not exists(destination):
            try:
                _os.rename(previous, destination)
                _logger.warning("Staging '%s' failed, restored previous content", skill_id)
            except OSError:
                # previous stays in the store root for recover_store()
                _logger.error(
                    "Staging '%s' failed and %s could not be restored",
                    skill_id,
                    previous,
                    exc_info=True,
                )
        try:
            remove_item(staging)
        except errors.FileSystemError:
            _logger.warning("Could not delete staging copy %s", staging, exc_info=True)
        raise errors.FileSystemError(destination, "cannot stage into store") from e

    if previous is not None:
        try:
            remove_item(previous)
        except errors.FileSystemError:
            # New content is in place; the next recover_store() clears it
            _logger.warning("Could not delete previous content %s", previous, exc_info=True)

    _logger.debug("Staged '%s' into %s", skill_id, destination)
    return destination


def recover_store(store_dir: _pathlib.Path, skill_id: str | None = None) -> list[str]:
    """
    Repair leftovers of interrupted staging.

    A "previous" directory whose destination is missing is renamed back;
    any other leftover is deleted.

    Args:
        store_dir: Canonical store root.
        skill_id: Limit recovery to one skill (default: all).

    Returns:
        Human-readable descriptions of the repairs made.

    Raises:
        FileSystemError: If a leftover cannot be restored or removed.
    """
    if not store_dir.is_dir():
        return []

    actions: list[str] = []
    leftovers = sorted(store_dir.iterdir(), key=lambda p: p.name)
    # Restore renamed-aside content before deleting abandoned staging copies
    leftovers.sort(key=lambda p: 0 if ".previous-" in p.name else 1)

    for entry in leftovers:
        match = _LEFTOVER_RE.match(entry.name)
        if match is None:
            continue
        leftover_id = match.group("skill_id")
        if skill_id is not None and leftover_id != skill_id:
            continue

        destination = store_dir / leftover_id
        if match.group("kind") == "previous" and not exists(destination):
            try:
                _os.rename(entry, destination)
            except OSError as e:
                raise errors.FileSystemError(entry, "cannot restore previous content") from e
            _logger.info("Restored %s from interrupted staging", destination)
            actions.append(f"restored {leftover_id}")
        else:
            remove_item(entry)
            _logger.info("Removed staging leftover %s", entry)
            actions.append(f"removed {entry.name}")

    return actions


def write_text_atomic(path: _pathlib.Path, content: str) -> None:
    """
    Write a file through a temporary sibling and an atomic replace.

    Readers see either the old document or the complete new one.

    Raises:
        FileSystemError: If the write or replace fails.
    """
    ensure_directory(path.parent)
    tmp_path = path.with_name(f".{path.name}.tmp.{_token()}")
    try:
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            _os.fsync(f.fileno())
        _os.replace(tmp_path, path)
    except OSError as e:
        if exists(tmp_path):
            tmp_path.unlink()
        raise errors.FileSystemError(path, "cannot write") from e
