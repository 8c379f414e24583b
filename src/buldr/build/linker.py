"""
Linker wrapper and link/archive stage.

This module turns a project's compiled objects into its final artifact: an
executable (via the configured linker) or a static archive (via the
configured archiver, see archive_creator).
"""

import logging
from pathlib import Path
from typing import List, Sequence

from ..config.manifest import BuildConfig, Project, ProjectKind
from .archive_creator import ArchiveCreator, archive_path_for
from .build_utils import ensure_directory, run_link_tool


def executable_path_for(project: Project, config: BuildConfig) -> Path:
    """Executable produced for a project, relative to the manifest root."""
    return Path(config.bin) / project.name


def artifact_path_for(project: Project, config: BuildConfig) -> Path:
    """Artifact (executable or archive) a project produces."""
    if project.kind is ProjectKind.LIBRARY:
        return archive_path_for(project, config)
    return executable_path_for(project, config)


class Linker:
    """
    Wrapper for the configured linker.

    Links an executable project's own objects against the archives of its
    dependencies (found in the bin directory) and any external libraries.
    """

    def build_link_command(
        self,
        project: Project,
        object_files: Sequence[Path],
        config: BuildConfig,
    ) -> List[str]:
        """
        Build the linker command line.

        Layout:
            <linker> <objects...> [linker_opts...] -o <bin>/<name> -L<bin>
                [-l<dependency>...] [-l<link>...]

        Dependencies come before external links so that symbols the
        dependency archives need from external libraries still resolve.
        """
        cmd = [config.linker]
        cmd.extend(str(obj) for obj in object_files)
        cmd.extend(config.linker_opts)
        cmd.extend(["-o", str(executable_path_for(project, config))])
        cmd.append(f"-L{config.bin}")
        cmd.extend(f"-l{dep}" for dep in project.depends)
        cmd.extend(f"-l{link}" for link in project.links)
        return cmd

    def link(
        self,
        project: Project,
        object_files: Sequence[Path],
        config: BuildConfig,
        root: Path,
    ) -> Path:
        """
        Link an executable.

        Args:
            project: Executable project
            object_files: All of the project's object files
            config: Build configuration
            root: Manifest root (working directory)

        Returns:
            Absolute path to the executable

        Raises:
            LinkFailureError: If the linker fails
            BuildFilesystemError: If the bin directory can't be created
        """
        ensure_directory(root / config.bin)

        output = root / executable_path_for(project, config)
        logging.info(f"Linking {len(object_files)} objects into {output.name}")
        run_link_tool(self.build_link_command(project, object_files, config), root, project.name)
        return output


class LinkStage:
    """Dispatches a project to the linker or the archiver by kind."""

    def __init__(self, linker: Linker | None = None, archiver: ArchiveCreator | None = None):
        self.linker = linker or Linker()
        self.archiver = archiver or ArchiveCreator()

    def run(
        self,
        project: Project,
        object_files: Sequence[Path],
        config: BuildConfig,
        root: Path,
    ) -> Path:
        """Produce the project's artifact and return its absolute path."""
        if project.kind is ProjectKind.LIBRARY:
            return self.archiver.create_archive(project, object_files, config, root)
        return self.linker.link(project, object_files, config, root)
