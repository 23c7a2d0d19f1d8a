"""
Shared constants for SkillHub.

This module provides a single source of truth for names and defaults
that are used across multiple modules.
"""

# Manifest defaults
ENTRYPOINT_FILENAME = "SKILL.md"
"""Canonical entrypoint file of a skill directory."""

DEFAULT_SKILL_VERSION = "1.0.0"
"""Version assigned to skills whose entrypoint does not carry one."""

JSON_MANIFEST_FILENAMES = ("skill.json", "manifest.json")
"""Structured manifest files recognised inside product skill directories."""

SKILL_ID_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"
"""Skill identifiers: lowercase alphanumeric words joined by single hyphens."""

SKILL_ID_MAX_LENGTH = 64
"""Maximum skill identifier length."""

SUMMARY_MAX_LENGTH = 1024
"""Maximum manifest summary (frontmatter description) length."""

# Product config documents
CONFIG_NAMESPACE = "skillhub"
"""Top-level key owned by SkillHub inside a product's JSON config."""

CONFIG_SKILLS_KEY = "skills"
"""Array of absolute skill paths inside the namespace object."""

# Local state layout
DEFAULT_STATE_DIRNAME = ".skillhub"
"""State directory created under the user's home."""

STATE_FILENAME = "state.json"
"""Registry document inside the state directory."""

STORE_DIRNAME = "skills"
"""Canonical skill store inside the state directory."""

BACKUPS_DIRNAME = "backups"
"""Rescued product-side content inside the state directory."""

LOGS_DIRNAME = "logs"
"""Activity logs inside the state directory."""

ACTIVITY_LOG_FILENAME = "activity.jsonl"
"""Append-only lifecycle event log."""

STATE_SCHEMA_VERSION = 1
"""Registry document schema version."""
