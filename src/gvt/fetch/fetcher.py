"""Fetch step: vendor a single import path without recursion."""
import enum
import logging
from typing import Callable, Optional, Tuple, Union

from gvt.core.config import Workspace
from gvt.core.errors import CleanupError
from gvt.vendor.copy import copypath
from gvt.vendor.depset import PackageLoader
from gvt.vendor.manifest import Dependency, ManifestStore
from gvt.vendor.repo import GitRepository, deduce_remote_repo, strip_scheme

logger = logging.getLogger(__name__)


class FetchResult(enum.Enum):
    """Outcomes of a fetch that are not a committed Dependency."""

    ALREADY_VENDORED = "already vendored"


ALREADY_VENDORED = FetchResult.ALREADY_VENDORED


class Fetcher:
    """Vendors import paths into a workspace.

    Collaborators are injectable: deduce maps (path, insecure) to a
    (repository, sub_path) pair, copier copies a checked out tree into
    place and loader reads Go packages for the recursive fetch.
    """

    def __init__(
        self,
        workspace: Workspace,
        insecure: bool = False,
        global_: bool = False,
        deduce: Callable[[str, bool], Tuple[GitRepository, str]] = deduce_remote_repo,
        copier: Callable = copypath,
        loader: Optional[PackageLoader] = None,
    ):
        self.workspace = workspace
        self.insecure = insecure
        self.global_ = global_
        self.deduce = deduce
        self.copier = copier
        self.loader = loader or PackageLoader()
        self.store = ManifestStore(workspace.manifest_file)

    def fetch_one(
        self,
        path: str,
        branch: str = "",
        tag: str = "",
        revision: str = "",
    ) -> Union[Dependency, FetchResult]:
        """Vendor path at the requested branch, tag or revision.

        The package is copied before the manifest is written, so a failed
        copy never leaves a manifest entry behind. The working copy is
        destroyed on every exit path.

        Args:
            path: Import path, optionally with a URL scheme
            branch: Branch to fetch (default: upstream default branch)
            tag: Tag to fetch
            revision: Revision to pin, optionally within branch or tag

        Returns:
            The committed Dependency, or ALREADY_VENDORED if path is
            already in the manifest (nothing is touched in that case)

        Raises:
            ManifestIOError, DuplicateImportError: Manifest failures
            UnresolvableImportError, InsecureProtocolError: Path resolution
            CheckoutError: Clone or revision lookup failed
            CopyError: Vendored sources could not be copied
            CleanupError: The working copy could not be removed
        """
        importpath = strip_scheme(path)

        manifest = self.store.load()
        if manifest.has_importpath(importpath):
            logger.info(f"{importpath} is already vendored")
            return ALREADY_VENDORED

        repo, extra = self.deduce(path, self.insecure)
        wc = repo.checkout(branch, tag, revision)

        try:
            dep = Dependency(
                importpath=importpath,
                repository=repo.url(),
                revision=wc.revision(),
                branch=wc.branch(),
                path=extra,
            )
            manifest.add_dependency(dep)

            dst = self.workspace.install_dir(self.global_) / dep.importpath
            src = wc.dir / dep.path.lstrip("/")
            self.copier(dst, src)

            self.store.save(manifest)
        except BaseException:
            try:
                wc.destroy()
            except CleanupError as e:
                logger.warning(f"Ignoring cleanup failure after error: {e}")
            raise

        wc.destroy()
        logger.info(f"Vendored {dep.importpath} at {dep.revision[:12]}")
        return dep
