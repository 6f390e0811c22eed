"""Core exception types for gvt."""
from typing import List, Optional


class GvtError(Exception):
    """Base exception for all gvt errors."""
    pass


class ManifestIOError(GvtError):
    """Raised when the manifest cannot be read or written."""
    pass


class DuplicateImportError(GvtError):
    """Raised when a dependency with the same import path is already recorded."""
    pass


class DependencyNotFoundError(GvtError):
    """Raised when an import path is not recorded in the manifest."""
    pass


class InvalidImportPathError(GvtError):
    """Raised when an import path argument cannot be parsed at all."""
    pass


class UnresolvableImportError(GvtError):
    """Raised when no remote repository can be deduced for an import path."""
    pass


class InsecureProtocolError(UnresolvableImportError):
    """Raised when the only way to reach a repository is an insecure transport."""
    pass


class CheckoutError(GvtError):
    """Raised when a working copy cannot be checked out or queried."""
    pass


class CopyError(GvtError):
    """Raised when vendored sources cannot be copied into place."""
    pass


class CleanupError(GvtError):
    """Raised when a temporary working copy cannot be removed."""
    pass


class PackageLoadError(GvtError):
    """Raised when a Go source file cannot be parsed."""
    pass


class ImportCycleError(GvtError):
    """Raised when the import graph contains a cycle.

    This is an integrity fault in the packages on disk, not something the
    recursive fetch can make progress on, so it always aborts the command.
    """

    def __init__(self, importpath: str, stack: Optional[List[str]] = None):
        self.importpath = importpath
        self.stack = list(stack or [])
        super().__init__(
            f"import loop: {importpath} (stack: {' -> '.join(self.stack)})"
        )
