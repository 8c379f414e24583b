"""Compile command generation.

Turns a project's stale sources into concrete compiler invocations. The same
generator feeds both the real build and the compile database, so the
database always matches what the compiler receives.

Argument layout per source:
    -c <source> -o <object> [-I<include>...] [-D<define>...] [compiler_opts...]
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Union

from ..config.manifest import BuildConfig, Project
from .source_scanner import SourceFile, object_path_for


@dataclass(frozen=True)
class CompileCommand:
    """One compiler invocation for one source file."""

    directory: Path
    compiler: str
    arguments: tuple[str, ...]
    source: SourceFile
    output: Path

    @property
    def file(self) -> Path:
        """Absolute path of the compiled source."""
        return (self.directory / self.source.path).resolve()

    @property
    def output_path(self) -> Path:
        """Absolute path of the object file."""
        return self.directory / self.output

    def argv(self) -> List[str]:
        return [self.compiler, *self.arguments]

    def to_database_entry(self) -> Dict[str, Union[str, List[str]]]:
        """Render as a compile_commands.json record."""
        return {
            "directory": str(self.directory),
            "arguments": self.argv(),
            "file": str(self.file),
            "output": str(self.output),
        }


def generate_compile_commands(
    project: Project,
    sources: Sequence[SourceFile],
    config: BuildConfig,
    root: Path,
) -> List[CompileCommand]:
    """Build the compiler invocations for a set of sources.

    Args:
        project: Project the sources belong to
        sources: Source files to compile
        config: Build configuration
        root: Working directory the compiler runs in (manifest root)

    Returns:
        One CompileCommand per source, in the order given
    """
    commands = []
    for source in sources:
        output = object_path_for(project, source.path, config)

        arguments = ["-c", str(source.path), "-o", str(output)]
        arguments.extend(f"-I{include_dir}" for include_dir in project.include)
        arguments.extend(f"-D{define}" for define in project.defines)
        arguments.extend(config.compiler_opts)

        commands.append(
            CompileCommand(
                directory=Path(root),
                compiler=config.compiler,
                arguments=tuple(arguments),
                source=source,
                output=output,
            )
        )
    return commands
