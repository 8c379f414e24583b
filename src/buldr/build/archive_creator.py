"""Archive Creator.

This module handles creating static library archives (.a files) from a
library project's object files using the configured archiver (ar).

Design:
    - Wraps archiver execution in replace/create mode
    - Archives only the project's own objects; dependencies are not merged in
    - Provides clear error messages
"""

import logging
from pathlib import Path
from typing import List, Sequence

from ..config.manifest import BuildConfig, Project
from .build_utils import ensure_directory, run_link_tool

ARCHIVE_EXTENSION = "a"


def archive_path_for(project: Project, config: BuildConfig) -> Path:
    """Archive produced for a library project, relative to the manifest root."""
    return Path(config.bin) / f"lib{project.name}.{ARCHIVE_EXTENSION}"


class ArchiveCreator:
    """Creates static library archives from object files."""

    def build_archive_command(
        self,
        project: Project,
        object_files: Sequence[Path],
        config: BuildConfig,
    ) -> List[str]:
        """Build the archiver command line.

        Layout:
            <packer> [packer_opts...] rcs <bin>/lib<name>.a <objects...> [-l<link>...]

        'rcs' flags: r=insert/replace, c=create, s=index (ranlib)
        """
        cmd = [config.packer, *config.packer_opts, "rcs", str(archive_path_for(project, config))]
        cmd.extend(str(obj) for obj in object_files)
        cmd.extend(f"-l{link}" for link in project.links)
        return cmd

    def create_archive(
        self,
        project: Project,
        object_files: Sequence[Path],
        config: BuildConfig,
        root: Path,
    ) -> Path:
        """Create the static library archive for a project.

        Args:
            project: Library project
            object_files: All of the project's object files
            config: Build configuration
            root: Manifest root (working directory)

        Returns:
            Absolute path to the archive

        Raises:
            LinkFailureError: If the archiver fails
            BuildFilesystemError: If the bin directory can't be created
        """
        ensure_directory(root / config.bin)

        archive_path = root / archive_path_for(project, config)
        logging.info(f"Archiving {len(object_files)} objects into {archive_path.name}")
        run_link_tool(self.build_archive_command(project, object_files, config), root, project.name)
        return archive_path
