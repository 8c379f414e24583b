"""Build utilities for buldr.

Helpers shared by the link and archive stages.
"""

import logging
import subprocess
from pathlib import Path
from typing import List

from ..errors import BuildFilesystemError, LinkFailureError


def ensure_directory(directory: Path) -> None:
    """Create a directory (and parents), failing the build if it can't."""
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BuildFilesystemError(f"Failed to create {directory}: {e}") from e


def remove_file(path: Path) -> None:
    """Delete a file if it exists, failing the build if it can't."""
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        raise BuildFilesystemError(f"Failed to remove {path}: {e}") from e


def run_link_tool(argv: List[str], cwd: Path, project_name: str) -> None:
    """Run a linker or archiver invocation for a project.

    Args:
        argv: Full command line, tool first
        cwd: Working directory (manifest root)
        project_name: Project being linked, for error reporting

    Raises:
        LinkFailureError: If the tool can't be started or exits non-zero
    """
    logging.debug(f"Linking {project_name}: {' '.join(argv)}")

    try:
        result = subprocess.run(argv, cwd=cwd, capture_output=True, text=True)
    except KeyboardInterrupt as ke:
        from buldr.interrupt_utils import handle_keyboard_interrupt_properly
        handle_keyboard_interrupt_properly(ke)
        raise  # Never reached, but satisfies type checker
    except OSError as e:
        raise LinkFailureError(project_name, f"Failed to run {argv[0]}: {e}") from e

    if result.returncode != 0:
        raise LinkFailureError(project_name, result.stderr)
