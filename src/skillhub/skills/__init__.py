"""
Skill manifests for SkillHub.

Skills are directories identified by a SKILL.md entrypoint (frontmatter
plus instructions) or by a structured skill.json / manifest.json.

This module provides:
- Frontmatter parsing for the SKILL.md sub-grammar
- Manifest loading and validation
- Discovery of unregistered skills inside product directories
"""

from skillhub.skills.discovery import SkillCandidate, scan_directory
from skillhub.skills.frontmatter import ParsedEntrypoint, parse_frontmatter
from skillhub.skills.loader import (
    LoadedSkill,
    find_json_manifest,
    load_json_manifest,
    load_manifest,
    load_skill,
    locate_entrypoint,
    parse_entrypoint,
    validate_skill_id,
)

__all__ = [
    "LoadedSkill",
    "ParsedEntrypoint",
    "SkillCandidate",
    "find_json_manifest",
    "load_json_manifest",
    "load_manifest",
    "load_skill",
    "locate_entrypoint",
    "parse_entrypoint",
    "parse_frontmatter",
    "scan_directory",
    "validate_skill_id",
]
