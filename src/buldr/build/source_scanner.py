"""
Source file discovery.

This module handles:
- Listing each project's source directories (one level deep)
- Filtering by the project's extension allow-list
- Mapping each source file to the object file it compiles to
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from ..config.manifest import BuildConfig, Project


@dataclass(frozen=True)
class SourceFile:
    """A source file and its modification time (epoch seconds)."""

    path: Path
    mtime: float


def is_valid_file(file_name: str, extensions: tuple[str, ...]) -> bool:
    """Check a file name against an extension allow-list.

    An empty allow-list accepts every file.
    """
    if not extensions:
        return True
    return any(file_name.endswith(ext) for ext in extensions)


def object_path_for(project: Project, source: Path, config: BuildConfig) -> Path:
    """
    Compute the object file a source compiles to.

    The result is `<obj>/<project>/<source path>` with the suffix replaced by
    `.o`, relative to the manifest root when `obj` is relative. `..` components
    become `__` so every object stays under its project's directory.

    Args:
        project: Project owning the source
        source: Source path as enumerated
        config: Build configuration (for the obj directory)

    Returns:
        Object file path
    """
    source = Path(source)
    if source.is_absolute():
        source = source.relative_to(source.anchor)
    parts = ["__" if part == ".." else part for part in source.parts]
    return Path(config.obj, project.name, *parts).with_suffix(".o")


class SourceScanner:
    """
    Enumerates the source files of a project.

    Source directories are listed one level deep (no recursion), as the
    manifest declares each directory explicitly.
    """

    def __init__(self, root: Path):
        """
        Initialize source scanner.

        Args:
            root: Manifest root that relative source directories hang off
        """
        self.root = Path(root)

    def scan(self, project: Project) -> List[SourceFile]:
        """
        Scan all source directories of a project.

        Args:
            project: Project to scan

        Returns:
            Source files in directory order, each directory sorted by name.
            Paths keep the form the manifest used (relative stays relative).
        """
        sources: List[SourceFile] = []
        for src_dir in project.src:
            sources.extend(self._scan_dir(src_dir, project.extensions))
        return sources

    def _scan_dir(self, src_dir: Path, extensions: tuple[str, ...]) -> List[SourceFile]:
        directory = self.root / src_dir
        if not directory.is_dir():
            logging.warning(f"Source directory not found: {directory}")
            return []

        sources = []
        for entry in sorted(directory.iterdir(), key=lambda p: p.name):
            if not entry.is_file() or not is_valid_file(entry.name, extensions):
                continue
            sources.append(SourceFile(path=src_dir / entry.name, mtime=entry.stat().st_mtime))
        return sources
