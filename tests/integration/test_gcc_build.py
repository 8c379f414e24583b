"""
Integration tests against the system C toolchain.

These compile, archive, link and run a real two-project repository.
Run with: pytest --full
"""

import shutil
import subprocess
import textwrap
from pathlib import Path

import pytest

from buldr.build import BuildOrchestrator, write_compile_database
from buldr.config import load_manifest

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        shutil.which("cc") is None or shutil.which("ar") is None,
        reason="requires a C compiler (cc) and ar",
    ),
]

MANIFEST = """\
[config]
compiler = "cc"
compiler_opts = ["-Wall"]
linker = "cc"
packer = "ar"
bin = "bin"
obj = "obj"

[[project]]
name = "greet"
kind = "library"
src = ["src/greet"]
extensions = [".c"]
include = ["include"]

[[project]]
name = "hello"
kind = "executable"
src = ["src/hello"]
extensions = [".c"]
include = ["include"]
depends = ["greet"]
default = true
"""


@pytest.fixture
def hello_repo(tmp_path) -> Path:
    root = tmp_path / "hello"
    (root / "include").mkdir(parents=True)
    (root / "src" / "greet").mkdir(parents=True)
    (root / "src" / "hello").mkdir(parents=True)
    (root / "build.toml").write_text(MANIFEST)
    (root / "include" / "greet.h").write_text("int greet(const char *name);\n")
    (root / "src" / "greet" / "greet.c").write_text(
        textwrap.dedent(
            """\
            #include <stdio.h>
            #include "greet.h"

            int greet(const char *name) {
                return printf("hello, %s\\n", name);
            }
            """
        )
    )
    (root / "src" / "hello" / "main.c").write_text(
        textwrap.dedent(
            """\
            #include "greet.h"

            int main(int argc, char **argv) {
                greet(argc > 1 ? argv[1] : "world");
                return 7;
            }
            """
        )
    )
    return root


def test_build_and_run(hello_repo):
    manifest = load_manifest(hello_repo / "build.toml")

    result = BuildOrchestrator(manifest, show_progress=False).build()

    assert result.success, result.message
    assert result.compiled_count == 2
    assert (hello_repo / "bin" / "libgreet.a").exists()
    assert result.artifact == manifest.root / "bin" / "hello"

    completed = subprocess.run([str(result.artifact), "buldr"], capture_output=True, text=True)
    assert completed.returncode == 7
    assert completed.stdout == "hello, buldr\n"


def test_rebuild_is_noop(hello_repo):
    manifest = load_manifest(hello_repo / "build.toml")
    BuildOrchestrator(manifest, show_progress=False).build()

    result = BuildOrchestrator(manifest, show_progress=False).build()

    assert result.success
    assert result.compiled_count == 0
    assert result.linked_projects == []


def test_compile_error_is_reported(hello_repo):
    (hello_repo / "src" / "hello" / "main.c").write_text("int main(void) { return missing; }\n")
    manifest = load_manifest(hello_repo / "build.toml")

    result = BuildOrchestrator(manifest, show_progress=False).build()

    assert result.success is False
    assert "missing" in result.error.stderr
    assert (hello_repo / "bin" / "libgreet.a").exists()


def test_compile_database_for_clang_tooling(hello_repo):
    manifest = load_manifest(hello_repo / "build.toml")

    output = write_compile_database(manifest)

    assert output.exists()
    assert "greet.c" in output.read_text()
