"""
Adapter registry.

Holds one adapter per product ID and builds the default set from
SkillHubPaths, user overrides and custom product definitions.
"""

from __future__ import annotations

import logging as _logging
import pathlib as _pathlib
import typing as _typing

import skillhub.adapters.base as base
import skillhub.adapters.products as products
import skillhub.config.paths as paths_module
import skillhub.config.types as config_types
import skillhub.errors as errors

_logger = _logging.getLogger(__name__)


class AdapterRegistry:
    """Adapters keyed by product ID."""

    def __init__(self, adapters: _typing.Iterable[base.ProductAdapter] = ()) -> None:
        self._adapters: dict[str, base.ProductAdapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: base.ProductAdapter) -> None:
        """
        Add an adapter.

        Raises:
            ValueError: If an adapter with the same ID is registered.
        """
        if adapter.id in self._adapters:
            raise ValueError(f"Adapter already registered: {adapter.id}")
        self._adapters[adapter.id] = adapter

    def get(self, product_id: str) -> base.ProductAdapter:
        """
        Look up an adapter.

        Raises:
            AdapterNotFoundError: If no adapter has this ID.
        """
        adapter = self._adapters.get(product_id)
        if adapter is None:
            raise errors.AdapterNotFoundError(product_id)
        return adapter

    def all(self) -> list[base.ProductAdapter]:
        """All adapters, sorted by ID."""
        return [self._adapters[k] for k in sorted(self._adapters)]

    def ids(self) -> list[str]:
        """All product IDs, sorted."""
        return sorted(self._adapters)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._adapters

    def __len__(self) -> int:
        return len(self._adapters)


def default_registry(
    paths: paths_module.SkillHubPaths,
    overrides: base.ProductOverrides | None = None,
    custom_products: _typing.Iterable[config_types.CustomProductConfig] = (),
    *,
    executable_search_paths: _typing.Sequence[_pathlib.Path] | None = None,
) -> AdapterRegistry:
    """
    Build the registry of built-in and custom product adapters.

    A custom product whose ID collides with a built-in one is skipped
    with a warning.

    Args:
        paths: SkillHub filesystem roots.
        overrides: User overrides for skills and config locations.
        custom_products: User-defined products.
        executable_search_paths: Directories searched during detection
            (None = well-known directories plus $PATH).

    Returns:
        Populated AdapterRegistry.
    """
    registry = AdapterRegistry(
        adapter_cls(paths, overrides, executable_search_paths=executable_search_paths)
        for adapter_cls in products.BUILTIN_ADAPTERS
    )

    for custom in custom_products:
        if custom.id in registry:
            _logger.warning(
                "Custom product '%s' collides with a built-in product; skipped", custom.id
            )
            continue
        registry.register(
            products.CustomProductAdapter(
                custom, paths, overrides, executable_search_paths=executable_search_paths
            )
        )

    return registry
