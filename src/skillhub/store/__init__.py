"""
Local skill registry for SkillHub.

Provides the JSON-backed store that records skills and their
per-product installation state.
"""

from skillhub.store.state import JSONSkillStore

__all__ = ["JSONSkillStore"]
