"""Pytest fixtures for gvt tests."""
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from gvt.core.config import Workspace
from gvt.core.errors import CleanupError
from gvt.vendor.repo import strip_scheme


def write_go_file(dir: Path, filename: str, package: str, imports: List[str]) -> Path:
    """Write a minimal Go source file importing imports."""
    dir.mkdir(parents=True, exist_ok=True)
    lines = [f"package {package}", ""]
    if imports:
        lines.append("import (")
        lines.extend(f'\t"{imp}"' for imp in imports)
        lines.append(")")
    lines.append("")
    path = dir / filename
    path.write_text("\n".join(lines))
    return path


def _git(repo_path: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def git_repo_fixture(tmp_path: Path) -> Dict[str, any]:
    """Create a git repository holding a Go package, with a tag and a branch.

    Layout on main (tagged v0.1):
        widgets.go   package widgets, imports fmt
        sub/sub.go   package sub, imports strings
        .hidden      not copied into vendor trees

    Branch dev adds extra.go.

    Returns dict with:
        - path: Path to repo
        - tag_sha: SHA of v0.1 tag
        - dev_sha: SHA of dev branch
        - main_sha: SHA of main branch
    """
    repo_path = tmp_path / "widgets_repo"
    repo_path.mkdir()

    _git(repo_path, "init")
    _git(repo_path, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "user.name", "Test User")

    write_go_file(repo_path, "widgets.go", "widgets", ["fmt"])
    write_go_file(repo_path / "sub", "sub.go", "sub", ["strings"])
    (repo_path / ".hidden").write_text("secret\n")
    _git(repo_path, "add", "-A")
    _git(repo_path, "commit", "-m", "Initial commit")
    main_sha = _git(repo_path, "rev-parse", "HEAD")
    _git(repo_path, "tag", "v0.1")

    _git(repo_path, "checkout", "-b", "dev")
    write_go_file(repo_path, "extra.go", "widgets", ["os"])
    _git(repo_path, "add", "extra.go")
    _git(repo_path, "commit", "-m", "Add extra.go on dev")
    dev_sha = _git(repo_path, "rev-parse", "HEAD")

    # Clones without a branch selector should land on main
    _git(repo_path, "checkout", "main")

    return {
        "path": repo_path,
        "tag_sha": main_sha,
        "dev_sha": dev_sha,
        "main_sha": main_sha,
    }


@pytest.fixture
def goroot(tmp_path: Path) -> Path:
    """A fake Go installation with a few standard library packages."""
    root = tmp_path / "goroot"
    src = root / "src"
    write_go_file(src / "errors", "errors.go", "errors", [])
    write_go_file(src / "io", "io.go", "io", ["errors"])
    write_go_file(src / "os", "file.go", "os", ["errors", "io"])
    write_go_file(src / "strings", "strings.go", "strings", ["errors"])
    write_go_file(src / "fmt", "print.go", "fmt", ["errors", "io", "os", "strings"])
    return root


@pytest.fixture
def workspace(tmp_path: Path, goroot: Path) -> Workspace:
    project = tmp_path / "project"
    project.mkdir()
    return Workspace(project_dir=project, goroot=goroot, gopath=tmp_path / "gopath")


class FakeWorkingCopy:
    """Working copy backed by a directory that outlives it."""

    def __init__(self, dir: Path, revision: str, branch: str = "", fail_destroy: bool = False):
        self.dir = dir
        self._revision = revision
        self._branch = branch
        self.fail_destroy = fail_destroy
        self.destroyed = False

    def revision(self) -> str:
        return self._revision

    def branch(self) -> str:
        return self._branch

    def destroy(self) -> None:
        self.destroyed = True
        if self.fail_destroy:
            raise CleanupError(f"cannot remove {self.dir}")


class FakeRepository:
    def __init__(self, url: str, wc: FakeWorkingCopy):
        self._url = url
        self.wc = wc
        self.checkouts = []

    def url(self) -> str:
        return self._url

    def checkout(self, branch: str = "", tag: str = "", revision: str = "") -> FakeWorkingCopy:
        self.checkouts.append((branch, tag, revision))
        if branch and not self.wc._branch:
            self.wc._branch = branch
        return self.wc


class FakeUpstream:
    """Serves packages from directories under root, one per import path.

    deduce() has the signature of deduce_remote_repo and records every
    import path it is asked for, so tests can check fetch order.
    """

    def __init__(self, root: Path):
        self.root = root
        self.fetched: List[str] = []
        self.checkouts: List[tuple] = []
        self.working_copies: List[FakeWorkingCopy] = []
        self.fail_destroy = False

    def add(self, importpath: str, imports: List[str], package: Optional[str] = None) -> Path:
        name = package or importpath.rsplit("/", 1)[-1].replace(".", "_").replace("-", "_")
        return write_go_file(self.root / importpath, f"{name}.go", name, imports)

    def deduce(self, path: str, insecure: bool):
        importpath = strip_scheme(path)
        self.fetched.append(importpath)
        wc = FakeWorkingCopy(
            self.root / importpath,
            revision=f"{len(self.fetched):040x}",
            fail_destroy=self.fail_destroy,
        )
        self.working_copies.append(wc)
        repo = _RecordingRepository(f"https://{importpath}", wc, self.checkouts)
        return repo, ""


class _RecordingRepository(FakeRepository):
    def __init__(self, url, wc, log):
        super().__init__(url, wc)
        self._log = log

    def checkout(self, branch="", tag="", revision=""):
        self._log.append((branch, tag, revision))
        return super().checkout(branch, tag, revision)


@pytest.fixture
def upstream(tmp_path: Path) -> FakeUpstream:
    return FakeUpstream(tmp_path / "upstream")
