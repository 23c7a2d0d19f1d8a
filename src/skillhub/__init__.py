"""
SkillHub - Skill Deployment Engine

Stages skills into a canonical local store and deploys them into the
products (editors, CLIs, agents) that consume them.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("skillhub")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "SkillHub Contributors"

from skillhub.config import Settings, SkillHubPaths  # noqa: E402
from skillhub.manager import SkillManager  # noqa: E402

__all__ = ["__version__", "__version_info__", "Settings", "SkillHubPaths", "SkillManager"]
