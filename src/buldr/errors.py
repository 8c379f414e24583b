"""Error types for buldr.

Library code raises these; the CLI is the only place that turns them into a
process exit status.
"""

from pathlib import Path
from typing import Sequence


class BuildrError(Exception):
    """Base exception for all buldr errors."""
    pass


class ManifestMissingError(BuildrError):
    """Raised when the manifest file does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"No manifest found at {path}")


class ManifestParseError(BuildrError):
    """Raised when the manifest cannot be decoded or fails validation."""
    pass


class UnknownDependencyError(BuildrError):
    """Raised when a project depends on a name no project in the manifest has."""

    def __init__(self, name: str, dependent: str):
        self.name = name
        self.dependent = dependent
        super().__init__(
            f"No dependency found with name '{name}' (required by '{dependent}')"
        )


class DependencyCycleError(BuildrError):
    """Raised when dependency edges form a cycle."""

    def __init__(self, cycle: Sequence[str]):
        self.cycle = list(cycle)
        super().__init__(f"Dependency cycle detected: {' -> '.join(self.cycle)}")


class NoProjectsDefinedError(BuildrError):
    """Raised when the manifest declares no projects."""

    def __init__(self) -> None:
        super().__init__("No projects defined")


class ProjectNotFoundError(BuildrError):
    """Raised when the requested project is not in the manifest."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No project found with name '{name}'")


class NoDefaultProjectError(BuildrError):
    """Raised when no project is named and none is flagged as default."""

    def __init__(self) -> None:
        super().__init__("No default project")


class CompileFailureError(BuildrError):
    """Raised when the compiler exits with failure for a source file."""

    def __init__(self, source: Path, stderr: str):
        self.source = source
        self.stderr = stderr
        super().__init__(f"Compilation failed for {source}\n{stderr}")


class LinkFailureError(BuildrError):
    """Raised when the linker or archiver exits with failure."""

    def __init__(self, project: str, stderr: str):
        self.project = project
        self.stderr = stderr
        super().__init__(f"Linking failed for {project}\n{stderr}")


class CacheIOError(BuildrError):
    """Raised when the build cache store cannot be read or written."""
    pass


class BuildFilesystemError(BuildrError):
    """Raised when output directories cannot be created."""
    pass
