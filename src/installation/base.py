"""Base class for type-specific installer strategies."""

from package.models import Package
from repository.base import WritableRepositoryInterface


class InstallerInterface:
    """Installer strategy for one or more package types.

    The InstallationManager picks the first registered strategy whose
    ``supports`` returns True for a package's type.
    """

    # Package type reported by `vendorkit installers`.
    type = ""

    def supports(self, package_type: str) -> bool:
        """Return True if this installer handles ``package_type``."""
        raise NotImplementedError

    def is_installed(self, repo: WritableRepositoryInterface, package: Package) -> bool:
        raise NotImplementedError

    def install(self, repo: WritableRepositoryInterface, package: Package) -> None:
        raise NotImplementedError

    def update(self, repo: WritableRepositoryInterface, initial: Package, target: Package) -> None:
        """Replace ``initial`` by ``target`` in place.

        Only called when both packages share a type this installer supports.
        """
        raise NotImplementedError

    def uninstall(self, repo: WritableRepositoryInterface, package: Package) -> None:
        raise NotImplementedError

    def get_install_path(self, package: Package) -> str:
        """Return the directory the package's files live in."""
        raise NotImplementedError
