"""Unit tests for compile command generation."""

from pathlib import Path

import pytest

from buldr.build import SourceFile, generate_compile_commands
from buldr.config import BuildConfig, Project, ProjectKind


@pytest.fixture
def config():
    return BuildConfig(
        compiler="gcc",
        linker="gcc",
        packer="ar",
        bin="bin",
        obj="obj",
        compiler_opts=("-Wall", "-O2"),
    )


@pytest.fixture
def project():
    return Project(
        name="app",
        kind=ProjectKind.EXECUTABLE,
        src=(Path("src/app"),),
        include=("include", "third_party/include"),
        defines=("DEBUG", "LEVEL=2"),
    )


class TestGenerateCompileCommands:
    """Test the compiler invocation layout."""

    def test_argument_layout(self, project, config, tmp_path):
        source = SourceFile(path=Path("src/app/main.c"), mtime=0)

        (command,) = generate_compile_commands(project, [source], config, tmp_path)

        assert command.compiler == "gcc"
        assert command.directory == tmp_path
        assert list(command.arguments) == [
            "-c",
            "src/app/main.c",
            "-o",
            "obj/app/src/app/main.o",
            "-Iinclude",
            "-Ithird_party/include",
            "-DDEBUG",
            "-DLEVEL=2",
            "-Wall",
            "-O2",
        ]
        assert command.argv()[0] == "gcc"
        assert command.argv()[1:] == list(command.arguments)

    def test_one_command_per_source_in_order(self, project, config, tmp_path):
        sources = [SourceFile(Path(f"src/app/{n}.c"), 0) for n in ("b", "a", "c")]

        commands = generate_compile_commands(project, sources, config, tmp_path)

        assert [c.source for c in commands] == sources
        assert [c.output for c in commands] == [
            Path("obj/app/src/app/b.o"),
            Path("obj/app/src/app/a.o"),
            Path("obj/app/src/app/c.o"),
        ]

    def test_no_sources_no_commands(self, project, config, tmp_path):
        assert generate_compile_commands(project, [], config, tmp_path) == []

    def test_no_deduplication(self, config, tmp_path):
        project = Project(
            name="app",
            kind=ProjectKind.EXECUTABLE,
            src=(Path("src"),),
            include=("inc", "inc"),
        )
        dup_config = BuildConfig(
            compiler="gcc", linker="gcc", packer="ar", bin="bin", obj="obj",
            compiler_opts=("-Iinc",),
        )

        (command,) = generate_compile_commands(project, [SourceFile(Path("src/a.c"), 0)], dup_config, tmp_path)

        assert list(command.arguments).count("-Iinc") == 3

    def test_generation_is_pure(self, project, config, tmp_path):
        sources = [SourceFile(Path("src/app/main.c"), 0)]

        first = generate_compile_commands(project, sources, config, tmp_path)
        second = generate_compile_commands(project, sources, config, tmp_path)

        assert first == second
        assert not (tmp_path / "obj").exists()

    def test_paths(self, project, config, tmp_path):
        (command,) = generate_compile_commands(
            project, [SourceFile(Path("src/app/main.c"), 0)], config, tmp_path
        )

        assert command.file == (tmp_path / "src/app/main.c").resolve()
        assert command.output_path == tmp_path / "obj/app/src/app/main.o"

    def test_database_entry(self, project, config, tmp_path):
        (command,) = generate_compile_commands(
            project, [SourceFile(Path("src/app/main.c"), 0)], config, tmp_path
        )

        entry = command.to_database_entry()

        assert entry["directory"] == str(tmp_path)
        assert entry["arguments"] == ["gcc", *command.arguments]
        assert entry["file"] == str((tmp_path / "src/app/main.c").resolve())
        assert entry["output"] == str(Path("obj/app/src/app/main.o"))
