"""Shared fixtures for the buldr test suite."""

import os
import stat
import textwrap
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List

import pytest

from buldr.config import Manifest, load_manifest


@pytest.fixture(autouse=True)
def isolated_cache_dir(tmp_path, monkeypatch):
    """Keep build cache stores out of the real temp directory."""
    cache_dir = tmp_path / "cache"
    monkeypatch.setenv("BULDR_CACHE_DIR", str(cache_dir))
    return cache_dir


FAKE_CC = """\
#!/bin/sh
out=""
src=""
while [ $# -gt 0 ]; do
  case "$1" in
    -o) out="$2"; shift 2 ;;
    -c) src="$2"; shift 2 ;;
    *) shift ;;
  esac
done
echo "cc $src" >> "{log}"
if grep -q FAIL "$src"; then
  echo "$src: error: forced failure" >&2
  exit 1
fi
: > "$out"
"""

FAKE_LD = """\
#!/bin/sh
out=""
prev=""
for arg in "$@"; do
  if [ "$prev" = "-o" ]; then out="$arg"; fi
  prev="$arg"
done
echo "ld $out" >> "{log}"
if [ -n "$FAKE_LD_FAIL" ]; then
  echo "undefined reference to main" >&2
  exit 1
fi
: > "$out"
"""

FAKE_AR = """\
#!/bin/sh
echo "ar $2" >> "{log}"
if [ -n "$FAKE_AR_FAIL" ]; then
  echo "ar: $2: cannot write archive" >&2
  exit 1
fi
: > "$2"
"""

CORE_APP_PROJECTS = """
[[project]]
name = "core"
kind = "library"
src = ["src/core"]
extensions = [".c"]

[[project]]
name = "app"
kind = "executable"
src = ["src/app"]
extensions = [".c"]
include = ["include"]
depends = ["core"]
default = true
"""


@dataclass
class FakeToolchain:
    """Shell scripts standing in for cc/ld/ar that log every invocation."""

    cc: Path
    ld: Path
    ar: Path
    log: Path

    def calls(self) -> List[str]:
        if not self.log.exists():
            return []
        return self.log.read_text().splitlines()

    def reset(self) -> None:
        if self.log.exists():
            self.log.unlink()


@dataclass
class RepoBuilder:
    """Writes manifests and sources for a throwaway repository."""

    root: Path
    toolchain: FakeToolchain

    def write_manifest(self, projects: str) -> Path:
        """Write build.toml using the fake toolchain and the given [[project]] tables."""
        manifest = self.root / "build.toml"
        manifest.write_text(
            textwrap.dedent(
                f"""\
                [config]
                compiler = "{self.toolchain.cc}"
                compiler_opts = ["-Wall"]
                linker = "{self.toolchain.ld}"
                packer = "{self.toolchain.ar}"
                bin = "bin"
                obj = "obj"
                """
            )
            + textwrap.dedent(projects)
        )
        return manifest

    def write_sources(self, directory: str, names: List[str], body: str = "int x;\n") -> List[Path]:
        target = self.root / directory
        target.mkdir(parents=True, exist_ok=True)
        paths = []
        for name in names:
            path = target / name
            path.write_text(body)
            paths.append(path)
        return paths

    def load(self) -> Manifest:
        return load_manifest(self.root / "build.toml")

    @staticmethod
    def touch_future(path: Path, seconds: int = 10) -> None:
        """Bump a file's mtime past any build time recorded so far."""
        future = path.stat().st_mtime + seconds
        os.utime(path, (future, future))

    @staticmethod
    def backdate(path: Path, seconds: int = 3600) -> None:
        """Move a file's mtime before any build time recorded so far."""
        past = time.time() - seconds
        os.utime(path, (past, past))


def _write_script(path: Path, body: str) -> Path:
    path.write_text(body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_toolchain(tmp_path):
    """Create fake compiler, linker and archiver executables."""
    bin_dir = tmp_path / "toolchain"
    bin_dir.mkdir()
    log = tmp_path / "toolchain.log"
    return FakeToolchain(
        cc=_write_script(bin_dir / "cc", FAKE_CC.format(log=log)),
        ld=_write_script(bin_dir / "ld", FAKE_LD.format(log=log)),
        ar=_write_script(bin_dir / "ar", FAKE_AR.format(log=log)),
        log=log,
    )


@pytest.fixture
def repo(tmp_path, fake_toolchain):
    """Empty repository root wired to the fake toolchain."""
    root = tmp_path / "repo"
    root.mkdir()
    return RepoBuilder(root=root, toolchain=fake_toolchain)


@pytest.fixture
def core_app_repo(repo):
    """Library 'core' (two files) and executable 'app' depending on it."""
    repo.write_sources("src/core", ["a.c", "b.c"])
    repo.write_sources("src/app", ["main.c"])
    (repo.root / "src" / "core" / "notes.txt").write_text("not a source")
    repo.write_manifest(CORE_APP_PROJECTS)
    return repo
