"""Installer for metapackages, which carry dependencies but no files."""

from constants import PackageTypes
from installation.base import InstallerInterface
from package.models import Package
from repository.base import WritableRepositoryInterface


class MetapackageInstaller(InstallerInterface):
    """Tracks metapackages in the repository without touching the filesystem."""

    type = PackageTypes.METAPACKAGE.value

    def supports(self, package_type: str) -> bool:
        return package_type == self.type

    def is_installed(self, repo: WritableRepositoryInterface, package: Package) -> bool:
        return repo.has_package(package)

    def install(self, repo: WritableRepositoryInterface, package: Package) -> None:
        if not repo.has_package(package):
            repo.add_package(package)

    def update(self, repo: WritableRepositoryInterface, initial: Package, target: Package) -> None:
        repo.remove_package(initial)
        self.install(repo, target)

    def uninstall(self, repo: WritableRepositoryInterface, package: Package) -> None:
        repo.remove_package(package)

    def get_install_path(self, package: Package) -> str:
        return ""
