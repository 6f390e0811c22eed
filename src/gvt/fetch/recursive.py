"""Recursive fetch: vendor a package and everything it transitively needs."""
import logging
from typing import List, Union

from gvt.core.config import Workspace
from gvt.core.errors import GvtError
from gvt.fetch.fetcher import ALREADY_VENDORED, Fetcher, FetchResult
from gvt.vendor.depset import PackageRoot, load_paths
from gvt.vendor.graph import find_missing
from gvt.vendor.manifest import Dependency, Manifest

logger = logging.getLogger(__name__)


def package_roots(workspace: Workspace, manifest: Manifest, global_: bool = False) -> List[PackageRoot]:
    """Roots that can satisfy an import: the standard library and each dependency."""
    roots = []
    if workspace.stdlib_root is not None:
        roots.append(PackageRoot(workspace.stdlib_root, ""))
    install_dir = workspace.install_dir(global_)
    for dep in manifest.dependencies:
        roots.append(PackageRoot(install_dir / dep.importpath, dep.importpath))
    return roots


def fetch(
    fetcher: Fetcher,
    path: str,
    recurse: bool = True,
    branch: str = "",
    tag: str = "",
    revision: str = "",
) -> Union[Dependency, FetchResult]:
    """Fetch path, then fetch its missing imports until none remain.

    Missing imports are fetched one at a time from their default upstream
    head, smallest import path first; the manifest and every package root
    are reloaded before each choice. The loop also stops when a fetch
    reports ALREADY_VENDORED, since no further progress can be made.

    Returns:
        The Dependency committed for path, or ALREADY_VENDORED

    Raises:
        GvtError: Any failure of a fetch step or of the import analysis
    """
    result = fetcher.fetch_one(path, branch=branch, tag=tag, revision=revision)
    if result is ALREADY_VENDORED or not recurse:
        return result

    target_root = str(fetcher.workspace.install_dir(fetcher.global_) / result.importpath)

    while True:
        manifest = fetcher.store.load()
        roots = package_roots(fetcher.workspace, manifest, fetcher.global_)
        depsets = load_paths(roots, fetcher.loader)

        depset = depsets.get(target_root)
        if depset is None:
            raise GvtError(f"unable to locate depset for {result.importpath!r}")

        missing = find_missing(depset.pkgs.values(), depsets)
        if not missing:
            break

        pkg = sorted(missing)[0]
        logger.info(f"fetching recursive dependency {pkg}")
        if fetcher.fetch_one(pkg) is ALREADY_VENDORED:
            break

    return result
