"""
Activity logging for SkillHub.

Provides JSONL logging of skill lifecycle events for auditing.
"""

from skillhub.logging.activity import ActivityLogger, read_activity

__all__ = ["ActivityLogger", "read_activity"]
