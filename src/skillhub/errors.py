"""
Exception hierarchy for SkillHub.

Every failure raised by the engine derives from SkillHubError so that
callers (the CLI, a GUI) can report engine errors uniformly while still
distinguishing the kinds below.
"""

from __future__ import annotations

import pathlib as _pathlib


class SkillHubError(Exception):
    """Base class for all SkillHub errors."""

    pass


class ValidationError(SkillHubError, ValueError):
    """Malformed manifest, bad identifier or description, or frontmatter syntax.

    The message always names the offending field or line.
    """

    def __init__(self, message: str, *, path: _pathlib.Path | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)


class NotStagedError(SkillHubError):
    """An adapter operation was attempted before the skill was staged."""

    def __init__(self, skill_id: str, store_path: _pathlib.Path) -> None:
        self.skill_id = skill_id
        self.store_path = store_path
        super().__init__(
            f"Skill '{skill_id}' is not staged at {store_path}; stage it first"
        )


class UnsupportedModeError(SkillHubError):
    """The requested or resolved install mode is not supported by an adapter."""

    def __init__(self, mode: str, adapter_id: str, detail: str | None = None) -> None:
        self.mode = mode
        self.adapter_id = adapter_id
        message = f"Install mode '{mode}' is not supported by adapter '{adapter_id}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class NotFoundError(SkillHubError, LookupError):
    """Unknown skill or product identifier."""

    pass


class SkillNotFoundError(NotFoundError):
    """Registry operation on a skill ID that has no record."""

    def __init__(self, skill_id: str) -> None:
        self.skill_id = skill_id
        super().__init__(f"Skill not found: {skill_id}")


class AdapterNotFoundError(NotFoundError):
    """No adapter is registered for a product ID."""

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"Unknown product: {product_id}")


class NotInstalledError(NotFoundError):
    """Enable attempted for a product with no recorded install mode."""

    def __init__(self, skill_id: str, product_id: str) -> None:
        self.skill_id = skill_id
        self.product_id = product_id
        super().__init__(
            f"Skill '{skill_id}' has no recorded install mode for '{product_id}'; "
            "install it first"
        )


class FileSystemError(SkillHubError):
    """A copy, symlink, rename or permission failure.

    The underlying OSError is available as ``__cause__``.
    """

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"{message}: {path}")


class ConfigShapeError(SkillHubError, ValueError):
    """A product's JSON config is not in a shape that can be safely patched."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Cannot patch {path}: {message}")


class StateFileCorruptedError(SkillHubError):
    """The registry document exists but does not parse or validate."""

    def __init__(self, path: _pathlib.Path, message: str) -> None:
        self.path = path
        super().__init__(f"Corrupted state file {path}: {message}")


class ProductNotDetectedError(SkillHubError):
    """A lifecycle operation targeted a product that is not present on this machine."""

    def __init__(self, product_id: str, reason: str) -> None:
        self.product_id = product_id
        self.reason = reason
        super().__init__(f"Product '{product_id}' was not detected: {reason}")
