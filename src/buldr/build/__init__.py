"""
Build system components for buldr.

This module provides the incremental build engine including:
- Dependency resolution across projects
- Change detection against a persisted build cache
- Compile command generation and execution
- Linking (executables) and archiving (libraries)
- Build orchestration and compile database emission
"""

from .archive_creator import ArchiveCreator
from .build_cache import BuildCache
from .compilation_executor import CompilationExecutor
from .compile_command import CompileCommand, generate_compile_commands
from .compile_database import collect_entries, write_compile_database
from .dependency_resolver import resolve_build_order
from .linker import Linker, LinkStage
from .orchestrator import BuildOrchestrator, BuildResult, ProjectBuild, ProjectState
from .source_scanner import SourceFile, SourceScanner, object_path_for

__all__ = [
    "ArchiveCreator",
    "BuildCache",
    "BuildOrchestrator",
    "BuildResult",
    "CompilationExecutor",
    "CompileCommand",
    "LinkStage",
    "Linker",
    "ProjectBuild",
    "ProjectState",
    "SourceFile",
    "SourceScanner",
    "collect_entries",
    "generate_compile_commands",
    "object_path_for",
    "resolve_build_order",
    "write_compile_database",
]
