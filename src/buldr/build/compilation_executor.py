"""Compilation Executor.

This module runs generated compile commands via subprocess.

Design:
    - Wraps subprocess.run; one blocking invocation at a time
    - Captures stderr and surfaces it on failure
    - No timeouts and no retries
"""

import logging
import subprocess

from ..errors import BuildFilesystemError, CompileFailureError
from .compile_command import CompileCommand


class CompilationExecutor:
    """Executes compile commands one at a time."""

    def __init__(self, verbose: bool = False):
        """Initialize compilation executor.

        Args:
            verbose: Echo compiler warnings written to stderr on success
        """
        self.verbose = verbose

    def execute(self, command: CompileCommand) -> None:
        """Compile a single source file.

        Args:
            command: Command to run

        Raises:
            BuildFilesystemError: If the object directory can't be created
            CompileFailureError: If the compiler can't be started or fails
        """
        try:
            command.output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BuildFilesystemError(
                f"Failed to create {command.output_path.parent}: {e}"
            ) from e

        argv = command.argv()
        logging.debug(f"Compiling {command.source.path}: {' '.join(argv)}")

        try:
            result = subprocess.run(
                argv,
                cwd=command.directory,
                capture_output=True,
                text=True,
            )
        except KeyboardInterrupt as ke:
            from buldr.interrupt_utils import handle_keyboard_interrupt_properly
            handle_keyboard_interrupt_properly(ke)
            raise  # Never reached, but satisfies type checker
        except OSError as e:
            raise CompileFailureError(
                command.source.path, f"Failed to run {command.compiler}: {e}"
            ) from e

        if result.returncode != 0:
            raise CompileFailureError(command.source.path, result.stderr)

        if self.verbose and result.stderr:
            print(result.stderr)
