"""Workspace settings: where the project, GOROOT and GOPATH live."""
import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


def default_goroot() -> Optional[Path]:
    """Return $GOROOT, asking the go tool when the variable is unset."""
    env = os.environ.get("GOROOT")
    if env:
        return Path(env)
    try:
        result = subprocess.run(
            ["go", "env", "GOROOT"],
            capture_output=True,
            text=True,
            timeout=30,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Cannot determine GOROOT: {e}")
        return None
    if result.returncode != 0 or not result.stdout.strip():
        logger.warning(f"Cannot determine GOROOT: {result.stderr.strip()}")
        return None
    return Path(result.stdout.strip())


def default_gopath() -> Path:
    """Return the first entry of $GOPATH, or ~/go."""
    env = os.environ.get("GOPATH")
    if env:
        return Path(env.split(os.pathsep)[0])
    return Path.home() / "go"


class Workspace(BaseModel):
    """Locations a fetch reads from and writes to.

    The manifest always lives in the project's vendor directory, even when
    packages are installed into GOPATH.
    """

    project_dir: Path = Field(default_factory=Path.cwd, description="Project root")
    goroot: Optional[Path] = Field(default=None, description="Go installation root")
    gopath: Path = Field(default_factory=default_gopath, description="Global Go workspace")

    model_config = ConfigDict(frozen=True)

    @property
    def vendor_dir(self) -> Path:
        return self.project_dir / "vendor"

    @property
    def manifest_file(self) -> Path:
        return self.vendor_dir / "manifest"

    @property
    def stdlib_root(self) -> Optional[Path]:
        """Source root of the standard library, if GOROOT is known."""
        return self.goroot / "src" if self.goroot else None

    def install_dir(self, global_: bool = False) -> Path:
        """Directory vendored packages are copied into."""
        if global_:
            return self.gopath / "src"
        return self.vendor_dir

    @classmethod
    def from_env(
        cls,
        project_dir: Optional[Path] = None,
        goroot: Optional[Path] = None,
        gopath: Optional[Path] = None,
    ) -> "Workspace":
        """Build a workspace, filling unset locations from the environment."""
        return cls(
            project_dir=Path(project_dir or Path.cwd()).absolute(),
            goroot=goroot or default_goroot(),
            gopath=gopath or default_gopath(),
        )
