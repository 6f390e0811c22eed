"""gvt CLI - Command line interface for gvt."""
import logging
import shutil
import sys
from pathlib import Path

import click

from gvt.core.config import Workspace
from gvt.core.errors import (
    CheckoutError,
    CleanupError,
    CopyError,
    DependencyNotFoundError,
    DuplicateImportError,
    ImportCycleError,
    InvalidImportPathError,
    ManifestIOError,
    UnresolvableImportError,
)
from gvt.fetch import ALREADY_VENDORED, Fetcher, fetch as fetch_recursive
from gvt.vendor.manifest import ManifestStore
from gvt.vendor.repo import strip_scheme

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(name)s: %(message)s",
)
logger = logging.getLogger("gvt")

DEFAULT_LIST_FORMAT = "{importpath} {repository}{path} {branch} {revision}"


@click.group()
@click.option(
    "--project-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="GVT_PROJECT_DIR",
    default=None,
    help="Project root containing vendor/ (default: current directory)",
)
@click.option(
    "--goroot",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="GOROOT",
    default=None,
    help="Go installation root (default: $GOROOT or `go env GOROOT`)",
)
@click.option(
    "--gopath",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="GOPATH",
    default=None,
    help="Global Go workspace for -g installs (default: $GOPATH or ~/go)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, project_dir: Path, goroot: Path, gopath: Path, verbose: bool):
    """gvt - vendor Go dependencies into a project."""
    if verbose:
        logger.setLevel(logging.DEBUG)
    ctx.obj = {
        "project_dir": project_dir,
        "goroot": goroot,
        "gopath": gopath,
    }


def _workspace(ctx) -> Workspace:
    return Workspace.from_env(**ctx.obj)


@main.command()
@click.option("--branch", default="", help="Branch of the package")
@click.option("--revision", default="", help="Revision of the package")
@click.option("--tag", default="", help="Tag of the package")
@click.option("--no-recurse", is_flag=True, help="Do not fetch recursively")
@click.option(
    "--precaire",
    "insecure",
    is_flag=True,
    help="Allow the use of insecure protocols",
)
@click.option(
    "-g",
    "--global",
    "global_",
    is_flag=True,
    help="Install package in $GOPATH/src instead of vendor/",
)
@click.argument("importpath")
@click.pass_context
def fetch(
    ctx,
    branch: str,
    revision: str,
    tag: str,
    no_recurse: bool,
    insecure: bool,
    global_: bool,
    importpath: str,
):
    """Vendor an upstream import path.

    The import path may include a url scheme. This may be useful when
    fetching dependencies from private repositories that cannot be probed.

    Unless --no-recurse is given, every import the package transitively
    needs that is neither in the standard library nor already vendored is
    fetched too, from its default upstream branch.

    Examples:
        gvt fetch github.com/pkg/errors
        gvt fetch --tag v1.2.0 --no-recurse github.com/pkg/errors

    Exit codes:
        0: Success (or already vendored)
        1: Generic runtime failure
        2: Invalid CLI usage
        3: Import path cannot be resolved
        4: Checkout failed
        5: Copying sources failed
        6: Manifest error
        7: Working copy cleanup failed
        8: Import cycle detected
    """
    if branch and tag:
        raise click.UsageError("only one of --branch or --tag may be supplied")

    workspace = _workspace(ctx)
    recurse = not no_recurse
    if recurse and workspace.stdlib_root is None:
        logger.error("Cannot determine GOROOT; set --goroot or use --no-recurse")
        sys.exit(1)

    fetcher = Fetcher(workspace, insecure=insecure, global_=global_)
    try:
        result = fetch_recursive(
            fetcher,
            importpath,
            recurse=recurse,
            branch=branch,
            tag=tag,
            revision=revision,
        )

        if result is ALREADY_VENDORED:
            click.echo(f"{strip_scheme(importpath)} is already vendored")
            sys.exit(0)

        click.echo(f"[OK] Fetched: {result.importpath}")
        click.echo(f"  Repository: {result.repository}")
        click.echo(f"  Revision: {result.revision[:12]}")
        if result.branch:
            click.echo(f"  Branch: {result.branch}")
        sys.exit(0)

    except (InvalidImportPathError, UnresolvableImportError) as e:
        logger.error(f"Cannot resolve import path: {str(e)}")
        sys.exit(3)

    except CheckoutError as e:
        logger.error(f"Checkout failed: {str(e)}")
        sys.exit(4)

    except CopyError as e:
        logger.error(f"Copy failed: {str(e)}")
        sys.exit(5)

    except (ManifestIOError, DuplicateImportError) as e:
        logger.error(f"Manifest error: {str(e)}")
        sys.exit(6)

    except CleanupError as e:
        logger.error(f"Cleanup failed: {str(e)}")
        sys.exit(7)

    except ImportCycleError as e:
        logger.error(f"Import graph fault: {str(e)}")
        sys.exit(8)

    except Exception as e:
        logger.error(f"Fetch failed: {str(e)}")
        sys.exit(1)


@main.command(name="list")
@click.option(
    "-f",
    "--format",
    "fmt",
    default=DEFAULT_LIST_FORMAT,
    show_default=True,
    help="Format of each line; fields are the manifest keys",
)
@click.pass_context
def list_(ctx, fmt: str):
    """List dependencies recorded in the manifest."""
    workspace = _workspace(ctx)
    try:
        manifest = ManifestStore(workspace.manifest_file).load()
    except ManifestIOError as e:
        logger.error(f"Manifest error: {str(e)}")
        sys.exit(6)

    for dep in manifest.dependencies:
        try:
            click.echo(fmt.format(**dep.model_dump()))
        except (KeyError, IndexError, ValueError) as e:
            raise click.UsageError(f"invalid format {fmt!r}: {e}")


def _remove_empty_parents(path: Path, stop: Path) -> None:
    parent = path.parent
    while parent != stop and stop in parent.parents:
        try:
            parent.rmdir()
        except OSError:
            return
        parent = parent.parent


@main.command()
@click.option(
    "-g",
    "--global",
    "global_",
    is_flag=True,
    help="Remove the package from $GOPATH/src instead of vendor/",
)
@click.argument("importpath")
@click.pass_context
def delete(ctx, global_: bool, importpath: str):
    """Delete a vendored dependency and its sources.

    Exit codes:
        0: Success
        1: Sources could not be removed
        6: Manifest error or dependency not vendored
    """
    workspace = _workspace(ctx)
    store = ManifestStore(workspace.manifest_file)
    try:
        manifest = store.load()
        dep = manifest.get_dependency(strip_scheme(importpath))

        install_dir = workspace.install_dir(global_)
        pkg_dir = install_dir / dep.importpath
        if pkg_dir.exists():
            shutil.rmtree(pkg_dir)
            _remove_empty_parents(pkg_dir, install_dir)

        manifest.remove_dependency(dep)
        store.save(manifest)
        click.echo(f"[OK] Deleted: {dep.importpath}")

    except (ManifestIOError, DependencyNotFoundError, InvalidImportPathError) as e:
        logger.error(f"Manifest error: {str(e)}")
        sys.exit(6)

    except OSError as e:
        logger.error(f"Delete failed: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
