"""Manifest parsing modules for buldr."""

from .manifest import (
    MANIFEST_FILENAME,
    TEMPLATE_PATH,
    BuildConfig,
    Manifest,
    Project,
    ProjectKind,
    load_manifest,
    parse_manifest,
)

__all__ = [
    "MANIFEST_FILENAME",
    "TEMPLATE_PATH",
    "BuildConfig",
    "Manifest",
    "Project",
    "ProjectKind",
    "load_manifest",
    "parse_manifest",
]
