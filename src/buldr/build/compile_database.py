"""Compile database emitter.

Writes compile_commands.json, the per-file compiler invocation list consumed
by clangd, clang-tidy and similar tooling. Entries come from the same
generator the build uses; nothing is compiled.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ..config.manifest import Manifest, Project
from ..errors import BuildFilesystemError
from .compile_command import CompileCommand, generate_compile_commands
from .source_scanner import SourceScanner

COMPILE_DATABASE_FILENAME = "compile_commands.json"


def collect_commands(
    manifest: Manifest,
    projects: Optional[Sequence[Project]] = None,
    scanner: Optional[SourceScanner] = None,
) -> List[CompileCommand]:
    """Generate the compile command of every source of the given projects.

    Args:
        manifest: Decoded manifest
        projects: Projects to include (defaults to all, in manifest order)
        scanner: Source enumerator (defaults to one over the manifest root)
    """
    if projects is None:
        projects = manifest.projects
    if scanner is None:
        scanner = SourceScanner(manifest.root)
    commands: List[CompileCommand] = []
    for project in projects:
        commands.extend(
            generate_compile_commands(project, scanner.scan(project), manifest.config, manifest.root)
        )
    return commands


def collect_entries(
    manifest: Manifest,
    projects: Optional[Sequence[Project]] = None,
) -> List[Dict[str, Any]]:
    return [command.to_database_entry() for command in collect_commands(manifest, projects)]


def write_compile_database(
    manifest: Manifest,
    projects: Optional[Sequence[Project]] = None,
    output: Optional[Path] = None,
) -> Path:
    """Write compile_commands.json.

    Args:
        manifest: Decoded manifest
        projects: Projects to include (defaults to all)
        output: Destination (defaults to compile_commands.json in the manifest root)

    Returns:
        Path of the written database

    Raises:
        BuildFilesystemError: If the file can't be written
    """
    if output is None:
        output = manifest.root / COMPILE_DATABASE_FILENAME

    entries = collect_entries(manifest, projects)
    try:
        with open(output, "w", encoding="utf-8") as f:
            json.dump(entries, f, indent=2)
    except OSError as e:
        raise BuildFilesystemError(f"Failed to write {output}: {e}") from e
    return output
