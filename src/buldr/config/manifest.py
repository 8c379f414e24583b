"""
build.toml manifest parser.

This module decodes a build.toml manifest into immutable configuration
objects: the global toolchain configuration and the list of projects.

Example build.toml:
    [config]
    compiler = "gcc"
    compiler_opts = ["-Wall"]
    linker = "gcc"
    packer = "ar"
    bin = "bin"
    obj = "obj"

    [[project]]
    name = "core"
    kind = "library"
    src = ["src/core"]

    [[project]]
    name = "app"
    kind = "executable"
    src = ["src/app"]
    depends = ["core"]
    default = true
"""

import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..errors import (
    ManifestMissingError,
    ManifestParseError,
    NoDefaultProjectError,
    NoProjectsDefinedError,
    ProjectNotFoundError,
)

MANIFEST_FILENAME = "build.toml"
TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "assets" / "template.toml"


class ProjectKind(Enum):
    """Kind of artifact a project produces."""

    EXECUTABLE = "executable"
    LIBRARY = "library"


@dataclass(frozen=True)
class Project:
    """One build target with its own sources and flags."""

    name: str
    kind: ProjectKind
    src: Tuple[Path, ...]
    extensions: Tuple[str, ...] = ()
    include: Tuple[str, ...] = ()
    links: Tuple[str, ...] = ()
    defines: Tuple[str, ...] = ()
    depends: Tuple[str, ...] = ()
    default: bool = False


@dataclass(frozen=True)
class BuildConfig:
    """Toolchain executables, their extra options and output directories."""

    compiler: str
    linker: str
    packer: str
    bin: str
    obj: str
    compiler_opts: Tuple[str, ...] = ()
    linker_opts: Tuple[str, ...] = ()
    packer_opts: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Manifest:
    """Decoded manifest: where it lives, the config and the project set."""

    path: Path
    config: BuildConfig
    projects: Tuple[Project, ...]

    @property
    def root(self) -> Path:
        """Directory all relative manifest paths are resolved against."""
        return self.path.parent

    @property
    def bin_dir(self) -> Path:
        return self.root / self.config.bin

    @property
    def obj_dir(self) -> Path:
        return self.root / self.config.obj

    def get_project(self, name: str) -> Project:
        """
        Look up a project by name.

        Raises:
            ProjectNotFoundError: If no project has that name
        """
        for project in self.projects:
            if project.name == name:
                return project
        raise ProjectNotFoundError(name)

    def select_target(self, name: Optional[str] = None) -> Project:
        """
        Pick the project to build.

        Args:
            name: Explicit project name, or None for the default-flagged project

        Returns:
            The selected project

        Raises:
            NoProjectsDefinedError: If the manifest declares no projects
            ProjectNotFoundError: If the named project doesn't exist
            NoDefaultProjectError: If no name is given and no project is default
        """
        if not self.projects:
            raise NoProjectsDefinedError()

        if name is not None:
            return self.get_project(name)

        for project in self.projects:
            if project.default:
                return project
        raise NoDefaultProjectError()


_CONFIG_REQUIRED = ("compiler", "linker", "packer", "bin", "obj")
_PROJECT_REQUIRED = ("name", "kind", "src")


def _string_list(value: Any, field: str, owner: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ManifestParseError(f"{owner}: '{field}' must be a list of strings")
    return tuple(value)


def _string(value: Any, field: str, owner: str) -> str:
    if not isinstance(value, str) or not value:
        raise ManifestParseError(f"{owner}: '{field}' must be a non-empty string")
    return value


def _parse_config(data: Dict[str, Any]) -> BuildConfig:
    section = data.get("config")
    if not isinstance(section, dict):
        raise ManifestParseError("Missing [config] section")

    missing = [key for key in _CONFIG_REQUIRED if key not in section]
    if missing:
        raise ManifestParseError(
            f"[config] is missing required fields: {', '.join(missing)}"
        )

    return BuildConfig(
        compiler=_string(section["compiler"], "compiler", "[config]"),
        linker=_string(section["linker"], "linker", "[config]"),
        packer=_string(section["packer"], "packer", "[config]"),
        bin=_string(section["bin"], "bin", "[config]"),
        obj=_string(section["obj"], "obj", "[config]"),
        compiler_opts=_string_list(section.get("compiler_opts"), "compiler_opts", "[config]"),
        linker_opts=_string_list(section.get("linker_opts"), "linker_opts", "[config]"),
        packer_opts=_string_list(section.get("packer_opts"), "packer_opts", "[config]"),
    )


def _parse_project(entry: Any, index: int) -> Project:
    if not isinstance(entry, dict):
        raise ManifestParseError(f"[[project]] #{index} must be a table")

    owner = f"project '{entry.get('name', f'#{index}')}'"
    missing = [key for key in _PROJECT_REQUIRED if key not in entry]
    if missing:
        raise ManifestParseError(f"{owner} is missing required fields: {', '.join(missing)}")

    name = _string(entry["name"], "name", owner)

    try:
        kind = ProjectKind(entry["kind"])
    except ValueError:
        allowed = ", ".join(k.value for k in ProjectKind)
        raise ManifestParseError(
            f"{owner}: unknown kind '{entry['kind']}' (expected one of: {allowed})"
        )

    src = _string_list(entry["src"], "src", owner)
    if not src:
        raise ManifestParseError(f"{owner}: 'src' must list at least one directory")

    default = entry.get("default", False)
    if not isinstance(default, bool):
        raise ManifestParseError(f"{owner}: 'default' must be a boolean")

    return Project(
        name=name,
        kind=kind,
        src=tuple(Path(s) for s in src),
        extensions=_string_list(entry.get("extensions"), "extensions", owner),
        include=_string_list(entry.get("include"), "include", owner),
        links=_string_list(entry.get("links"), "links", owner),
        defines=_string_list(entry.get("defines"), "defines", owner),
        depends=_string_list(entry.get("depends"), "depends", owner),
        default=default,
    )


def _validate_projects(projects: List[Project]) -> None:
    kinds: Dict[str, ProjectKind] = {}
    for project in projects:
        if project.name in kinds:
            raise ManifestParseError(f"Duplicate project name '{project.name}'")
        kinds[project.name] = project.kind

    # Unknown names are left to the resolver, which only fails on them
    # when the requested target actually reaches them.
    for project in projects:
        for dep in project.depends:
            if kinds.get(dep, ProjectKind.LIBRARY) is not ProjectKind.LIBRARY:
                raise ManifestParseError(
                    f"project '{project.name}' depends on '{dep}', "
                    + "which is not a library"
                )


def parse_manifest(text: str, path: Path) -> Manifest:
    """
    Decode manifest text.

    Args:
        text: TOML document
        path: Canonical path the text was read from

    Returns:
        Decoded Manifest

    Raises:
        ManifestParseError: If the document is invalid
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(f"Failed to parse {path}: {e}") from e

    config = _parse_config(data)

    raw_projects = data.get("project", [])
    if not isinstance(raw_projects, list):
        raise ManifestParseError("'project' must be an array of tables ([[project]])")

    projects = [_parse_project(entry, i) for i, entry in enumerate(raw_projects)]
    _validate_projects(projects)

    return Manifest(path=path, config=config, projects=tuple(projects))


def load_manifest(path: Path) -> Manifest:
    """
    Load and decode a build.toml manifest.

    Args:
        path: Path to the manifest file

    Returns:
        Decoded Manifest, with its path canonicalized

    Raises:
        ManifestMissingError: If the file doesn't exist
        ManifestParseError: If the file can't be read or decoded
    """
    path = Path(path)
    if not path.is_file():
        raise ManifestMissingError(path)

    canonical = path.resolve()
    try:
        text = canonical.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestParseError(f"Failed to read {canonical}: {e}") from e

    return parse_manifest(text, canonical)
