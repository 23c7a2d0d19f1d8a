"""Install-mode resolution policy."""

from __future__ import annotations

import typing as _typing

import skillhub.errors as errors
import skillhub.models as models

AUTO_PRIORITY: tuple[models.InstallMode, ...] = (
    models.InstallMode.SYMLINK,
    models.InstallMode.COPY,
    models.InstallMode.CONFIG_PATCH,
)
"""Order in which AUTO picks a concrete mode."""


def resolve_install_mode(
    requested: models.InstallMode | str,
    supported: _typing.Iterable[models.InstallMode],
    adapter_id: str,
) -> models.InstallMode:
    """
    Turn a requested mode into a concrete one.

    A concrete request must be supported as-is. AUTO picks the first
    supported mode from AUTO_PRIORITY.

    Args:
        requested: Mode asked for by the caller.
        supported: Modes the adapter advertises.
        adapter_id: Adapter ID, for error messages.

    Returns:
        A concrete InstallMode.

    Raises:
        UnsupportedModeError: If a concrete request is not supported, or
            AUTO finds no concrete mode to pick.
    """
    requested = models.InstallMode(requested)
    supported_set = set(supported)

    if requested is not models.InstallMode.AUTO:
        if requested not in supported_set:
            raise errors.UnsupportedModeError(requested.value, adapter_id)
        return requested

    for mode in AUTO_PRIORITY:
        if mode in supported_set:
            return mode

    raise errors.UnsupportedModeError(
        requested.value, adapter_id, "adapter supports no concrete install mode"
    )
