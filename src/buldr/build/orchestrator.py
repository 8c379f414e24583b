"""
Build orchestration for buldr manifests.

This module coordinates an incremental build of a target project and its
dependencies. It integrates all build system components:
- Target selection and dependency resolution
- Source scanning and staleness checks against the build cache
- Compile command generation and execution
- Linking executables / archiving libraries, including cascade relinks
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from tqdm import tqdm

from ..config.manifest import Manifest, Project
from ..errors import BuildrError
from .build_cache import BuildCache
from .build_utils import ensure_directory, remove_file
from .compilation_executor import CompilationExecutor
from .compile_command import CompileCommand, generate_compile_commands
from .compile_database import collect_commands
from .dependency_resolver import resolve_build_order
from .linker import LinkStage, artifact_path_for
from .source_scanner import SourceFile, SourceScanner, object_path_for


class ProjectState(Enum):
    """Lifecycle of one project within a build."""

    NOT_STARTED = "not_started"
    DEPENDENCIES_BUILT = "dependencies_built"
    SOURCES_CHECKED = "sources_checked"
    UP_TO_DATE = "up_to_date"
    COMPILING = "compiling"
    LINKING = "linking"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ProjectBuild:
    """What happened to one project during a build."""

    name: str
    state: ProjectState = ProjectState.NOT_STARTED
    compiled: List[Path] = field(default_factory=list)
    artifact: Optional[Path] = None
    rebuilt: bool = False

    @property
    def linked(self) -> bool:
        return self.artifact is not None

    def transition(self, state: ProjectState) -> None:
        logging.debug(f"{self.name}: {self.state.value} -> {state.value}")
        self.state = state


@dataclass
class BuildResult:
    """Result of a complete build operation."""

    success: bool
    target: Optional[str]
    projects: List[ProjectBuild]
    artifact: Optional[Path]
    build_time: float
    message: str
    error: Optional[BuildrError] = None

    @property
    def compiled_count(self) -> int:
        return sum(len(p.compiled) for p in self.projects)

    @property
    def linked_projects(self) -> List[str]:
        return [p.name for p in self.projects if p.linked]


class BuildOrchestrator:
    """
    Orchestrates an incremental build of a manifest's projects.

    For each project, in dependency order:
    1. Collect whether any dependency rebuilt (upstream changed)
    2. Scan sources and split them into stale and fresh via the build cache
    3. Nothing stale and nothing upstream: done, no compile, no link
    4. Compile stale sources one at a time, persisting the cache after each
    5. Link (executable) or archive (library) if anything changed

    The first failure stops the whole build. Cache entries of sources that
    compiled before the failure stay persisted.

    Example usage:
        manifest = load_manifest(Path("build.toml"))
        orchestrator = BuildOrchestrator(manifest)
        result = orchestrator.build("app")
        if result.success:
            print(f"Artifact: {result.artifact}")
    """

    def __init__(
        self,
        manifest: Manifest,
        cache: Optional[BuildCache] = None,
        executor: Optional[CompilationExecutor] = None,
        link_stage: Optional[LinkStage] = None,
        scanner: Optional[SourceScanner] = None,
        show_progress: bool = True,
        verbose: bool = False,
    ):
        """
        Initialize build orchestrator.

        Args:
            manifest: Decoded manifest
            cache: Build cache (optional, opened for the manifest on first build)
            executor: Runs compile commands (optional)
            link_stage: Runs the linker/archiver (optional)
            scanner: Enumerates sources (optional)
            show_progress: Show a progress bar while compiling
            verbose: Enable verbose output
        """
        self.manifest = manifest
        self.cache = cache
        self.executor = executor or CompilationExecutor(verbose=verbose)
        self.link_stage = link_stage or LinkStage()
        self.scanner = scanner or SourceScanner(manifest.root)
        self.show_progress = show_progress
        self.verbose = verbose

    def build(self, target_name: Optional[str] = None) -> BuildResult:
        """
        Build a target project and everything it depends on.

        Args:
            target_name: Project to build (defaults to the default-flagged project)

        Returns:
            BuildResult with build status; failures are reported, not raised
        """
        start_time = time.time()
        records: List[ProjectBuild] = []
        target: Optional[Project] = None

        try:
            # Selection and resolution happen before any filesystem change.
            target = self.manifest.select_target(target_name)
            order = resolve_build_order(self.manifest.projects, target)

            if self.cache is None:
                self.cache = BuildCache.for_manifest(self.manifest.path)

            self._create_directories()
            self.build_order(order, records)

            artifact = self.manifest.root / artifact_path_for(target, self.manifest.config)
            return BuildResult(
                success=True,
                target=target.name,
                projects=records,
                artifact=artifact if artifact.exists() else None,
                build_time=time.time() - start_time,
                message="Build successful",
            )

        except BuildrError as e:
            logging.debug(f"Build failed: {e}")
            return BuildResult(
                success=False,
                target=target.name if target else target_name,
                projects=records,
                artifact=None,
                build_time=time.time() - start_time,
                message=str(e),
                error=e,
            )

    def build_order(
        self,
        order: Sequence[Project],
        records: Optional[List[ProjectBuild]] = None,
    ) -> List[ProjectBuild]:
        """
        Build projects that are already in dependency order.

        Args:
            order: Projects, dependencies before dependents
            records: List to append per-project records to (optional)

        Returns:
            Per-project records

        Raises:
            BuildrError: On the first failure
        """
        if records is None:
            records = []
        if self.cache is None:
            self.cache = BuildCache.for_manifest(self.manifest.path)

        rebuilt: Dict[str, bool] = {}
        for project in order:
            upstream_changed = any(rebuilt.get(dep, False) for dep in project.depends)
            record = ProjectBuild(project.name)
            records.append(record)
            try:
                self._build_project(project, upstream_changed, record)
            except BaseException:
                record.transition(ProjectState.FAILED)
                raise
            rebuilt[project.name] = record.rebuilt

        return records

    def compile_commands(self, projects: Optional[Sequence[Project]] = None) -> List[CompileCommand]:
        """Commands a full rebuild of `projects` would run (defaults to all projects)."""
        return collect_commands(self.manifest, projects, self.scanner)

    def _create_directories(self) -> None:
        ensure_directory(self.manifest.bin_dir)
        ensure_directory(self.manifest.obj_dir)

    def _is_stale(self, project: Project, source: SourceFile) -> bool:
        assert self.cache is not None
        output = self.manifest.root / object_path_for(project, source.path, self.manifest.config)
        return self.cache.has_changed(output, source.mtime)

    def _build_project(self, project: Project, upstream_changed: bool, record: ProjectBuild) -> None:
        assert self.cache is not None
        config = self.manifest.config
        root = self.manifest.root

        record.transition(ProjectState.DEPENDENCIES_BUILT)

        sources = self.scanner.scan(project)
        stale = [source for source in sources if self._is_stale(project, source)]
        record.transition(ProjectState.SOURCES_CHECKED)

        artifact = root / artifact_path_for(project, config)
        artifact_missing = not artifact.exists()

        if stale:
            record.transition(ProjectState.COMPILING)
            commands = generate_compile_commands(project, stale, config, root)
            with tqdm(
                total=len(commands),
                desc=project.name,
                unit="file",
                disable=not self.show_progress,
            ) as progress:
                for command in commands:
                    logging.info(f"Compiling {command.source.path}")
                    self.executor.execute(command)
                    self.cache.update(command.output_path)
                    self.cache.write()
                    record.compiled.append(command.source.path)
                    progress.update(1)
        else:
            record.transition(ProjectState.UP_TO_DATE)
            if not upstream_changed and not artifact_missing:
                logging.info(f"{project.name} is up to date")
                record.transition(ProjectState.DONE)
                return

        record.transition(ProjectState.LINKING)
        # A failed link must leave no artifact behind so the next run relinks.
        remove_file(artifact)
        objects = [object_path_for(project, source.path, config) for source in sources]
        record.artifact = self.link_stage.run(project, objects, config, root)
        record.rebuilt = True
        record.transition(ProjectState.DONE)
