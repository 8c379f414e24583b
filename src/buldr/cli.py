"""
Command-line interface for buldr.

This module provides the `buldr` CLI tool for building multi-project
C/C++ repositories described by a build.toml manifest.
"""

import argparse
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from buldr import __version__
from buldr.build import BuildCache, BuildOrchestrator, BuildResult, resolve_build_order, write_compile_database
from buldr.build.compile_database import COMPILE_DATABASE_FILENAME
from buldr.build.linker import executable_path_for
from buldr.cli_utils import ErrorFormatter, ManifestLocator, setup_logging
from buldr.config import TEMPLATE_PATH, ProjectKind, load_manifest
from buldr.errors import BuildFilesystemError, BuildrError


@dataclass
class BuildArgs:
    """Arguments for the build and run commands."""

    manifest: Optional[Path] = None
    project: Optional[str] = None
    verbose: bool = False
    progress: bool = True
    program_args: List[str] = field(default_factory=list)


@dataclass
class ManifestArgs:
    """Arguments for commands that only need the manifest."""

    manifest: Optional[Path] = None
    project: Optional[str] = None
    verbose: bool = False


def _run_build(args: BuildArgs) -> BuildResult:
    manifest = load_manifest(ManifestLocator.locate(args.manifest))
    orchestrator = BuildOrchestrator(
        manifest,
        show_progress=args.progress,
        verbose=args.verbose,
    )
    return orchestrator.build(args.project)


def _print_build_summary(result: BuildResult) -> None:
    if result.compiled_count == 0 and not result.linked_projects:
        ErrorFormatter.print_success(f"{result.target} is up to date")
    else:
        ErrorFormatter.print_success("Build successful!")
        print(f"Compiled: {result.compiled_count} file(s)")
        if result.linked_projects:
            print(f"Linked:   {', '.join(result.linked_projects)}")
    if result.artifact:
        print(f"Output:   {result.artifact}")
    print(f"Build time: {result.build_time:.2f}s")


def build_command(args: BuildArgs) -> None:
    """Build a project and its dependencies.

    Examples:
        buldr                          # Build the default project
        buldr build app               # Build a specific project
        buldr -f other/build.toml build
    """
    try:
        result = _run_build(args)

        if not result.success:
            ErrorFormatter.print_error("Build failed!", result.message)
            sys.exit(1)

        _print_build_summary(result)
        sys.exit(0)

    except BuildrError as e:
        ErrorFormatter.print_error("Build failed!", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def run_command(args: BuildArgs) -> None:
    """Build an executable project, then run it.

    The program inherits stdin/stdout/stderr; buldr exits with its status.

    Examples:
        buldr run                      # Build and run the default project
        buldr run app -- --flag value  # Pass arguments to the program
    """
    try:
        manifest = load_manifest(ManifestLocator.locate(args.manifest))
        target = manifest.select_target(args.project)
        if target.kind is not ProjectKind.EXECUTABLE:
            ErrorFormatter.print_error(
                "Cannot run project", f"'{target.name}' is a library, not an executable"
            )
            sys.exit(1)

        orchestrator = BuildOrchestrator(
            manifest,
            show_progress=args.progress,
            verbose=args.verbose,
        )
        result = orchestrator.build(target.name)
        if not result.success:
            ErrorFormatter.print_error("Build failed!", result.message)
            sys.exit(1)

        executable = manifest.root / executable_path_for(target, manifest.config)
        if not executable.exists():
            ErrorFormatter.print_error("Cannot run project", f"Executable not found: {executable}")
            sys.exit(1)

        program_args = list(args.program_args)
        if program_args and program_args[0] == "--":
            program_args = program_args[1:]

        completed = subprocess.run([str(executable), *program_args])
        sys.exit(completed.returncode)

    except BuildrError as e:
        ErrorFormatter.print_error("Build failed!", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def create_command(args: ManifestArgs) -> None:
    """Write a template build.toml (no-op if one already exists)."""
    manifest_path = ManifestLocator.locate(args.manifest)

    if manifest_path.exists():
        print(f"{manifest_path.name} already exists")
        sys.exit(0)

    try:
        shutil.copyfile(TEMPLATE_PATH, manifest_path)
    except OSError as e:
        ErrorFormatter.print_error("Failed to create manifest", str(e))
        sys.exit(1)

    ErrorFormatter.print_success(f"Created {manifest_path}")
    sys.exit(0)


def clean_command(args: ManifestArgs) -> None:
    """Remove the build cache, bin and obj directories and the compile database."""
    try:
        manifest = load_manifest(ManifestLocator.locate(args.manifest))

        store = BuildCache.discard(manifest.path)
        removed = [store]
        try:
            for directory in (manifest.bin_dir, manifest.obj_dir):
                if directory.exists():
                    shutil.rmtree(directory)
                    removed.append(directory)
            database = manifest.root / COMPILE_DATABASE_FILENAME
            if database.exists():
                database.unlink()
                removed.append(database)
        except OSError as e:
            raise BuildFilesystemError(f"Failed to clean build outputs: {e}") from e

        if args.verbose:
            for path in removed:
                print(f"Removed {path}")
        ErrorFormatter.print_success("Clean complete")
        sys.exit(0)

    except BuildrError as e:
        ErrorFormatter.print_error("Clean failed!", str(e))
        sys.exit(1)


def compile_commands_command(args: ManifestArgs) -> None:
    """Generate compile_commands.json without compiling anything.

    With a project name, only that project and its dependencies are listed.
    """
    try:
        manifest = load_manifest(ManifestLocator.locate(args.manifest))

        projects = None
        if args.project is not None:
            target = manifest.select_target(args.project)
            projects = resolve_build_order(manifest.projects, target)

        output = write_compile_database(manifest, projects)
        ErrorFormatter.print_success(f"Wrote {output}")
        sys.exit(0)

    except BuildrError as e:
        ErrorFormatter.print_error("Failed to generate compile database", str(e))
        sys.exit(1)


def main() -> None:
    """buldr - incremental builds for multi-project C/C++ repositories."""
    parser = argparse.ArgumentParser(
        prog="buldr",
        description="buldr - dependency-ordered incremental build tool",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"buldr {__version__}",
    )
    parser.add_argument(
        "-f",
        "--manifest",
        type=Path,
        default=None,
        help="Path to the manifest (default: ./build.toml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Hide the compile progress bar",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    build_parser = subparsers.add_parser(
        "build",
        help="Build a project and its dependencies (default command)",
    )
    build_parser.add_argument(
        "project",
        nargs="?",
        default=None,
        help="Project to build (default: the project marked default = true)",
    )

    run_parser = subparsers.add_parser(
        "run",
        help="Build an executable project, then run it",
    )
    run_parser.add_argument(
        "project",
        nargs="?",
        default=None,
        help="Project to run (default: the project marked default = true)",
    )
    run_parser.add_argument(
        "program_args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the program (after --)",
    )

    subparsers.add_parser("create", help="Generate a template build.toml file")
    subparsers.add_parser("clean", help="Clean all build files")

    db_parser = subparsers.add_parser(
        "compile_commands",
        help="Generate compile_commands.json",
    )
    db_parser.add_argument(
        "project",
        nargs="?",
        default=None,
        help="Limit to a project and its dependencies (default: all projects)",
    )

    parsed_args = parser.parse_args()
    setup_logging(parsed_args.verbose)

    command = parsed_args.command or "build"
    project = getattr(parsed_args, "project", None)

    if command in ("build", "run"):
        build_args = BuildArgs(
            manifest=parsed_args.manifest,
            project=project,
            verbose=parsed_args.verbose,
            progress=not parsed_args.no_progress,
            program_args=getattr(parsed_args, "program_args", None) or [],
        )
        if command == "build":
            build_command(build_args)
        else:
            run_command(build_args)
    else:
        manifest_args = ManifestArgs(
            manifest=parsed_args.manifest,
            project=project,
            verbose=parsed_args.verbose,
        )
        if command == "create":
            create_command(manifest_args)
        elif command == "clean":
            clean_command(manifest_args)
        elif command == "compile_commands":
            compile_commands_command(manifest_args)


if __name__ == "__main__":
    main()
