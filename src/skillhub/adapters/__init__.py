"""
Product adapters for SkillHub.

One adapter per target product, all implementing the same
detect / install / enable / disable / status interface, plus the
install-mode resolver and the config-patch subsystem they share.
"""

from skillhub.adapters.base import (
    DirectoryProductAdapter,
    ProductAdapter,
    ProductOverrides,
)
from skillhub.adapters.config_patch import (
    ConfigDocument,
    SkillHubNamespace,
    is_skill_registered,
    register_skill_path,
    unregister_skill,
)
from skillhub.adapters.products import (
    BUILTIN_ADAPTERS,
    ClaudeCodeAdapter,
    CodexAdapter,
    CursorAdapter,
    CustomProductAdapter,
    OpenClawAdapter,
    OpenCodeAdapter,
    VSCodeAdapter,
)
from skillhub.adapters.registry import AdapterRegistry, default_registry
from skillhub.adapters.resolver import AUTO_PRIORITY, resolve_install_mode

__all__ = [
    "AUTO_PRIORITY",
    "BUILTIN_ADAPTERS",
    "AdapterRegistry",
    "ClaudeCodeAdapter",
    "CodexAdapter",
    "ConfigDocument",
    "CursorAdapter",
    "CustomProductAdapter",
    "DirectoryProductAdapter",
    "OpenClawAdapter",
    "OpenCodeAdapter",
    "ProductAdapter",
    "ProductOverrides",
    "SkillHubNamespace",
    "VSCodeAdapter",
    "default_registry",
    "is_skill_registered",
    "register_skill_path",
    "resolve_install_mode",
    "unregister_skill",
]
