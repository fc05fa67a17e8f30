"""Installer for plain library packages placed under the vendor directory."""

from __future__ import annotations

import logging
import os
from typing import Optional, Protocol

from common.errors import InvalidArgumentError
from common.filesystem import ensure_directory_exists, normalize_path
from constants import PackageTypes
from installation.base import InstallerInterface
from package.models import Package
from repository.base import WritableRepositoryInterface

logger = logging.getLogger(__name__)


class DownloadManager(Protocol):
    """Places package files on disk; implemented by the retrieval layer."""

    def download(self, package: Package, path: str) -> None:
        ...

    def update(self, initial: Package, target: Package, path: str) -> None:
        ...

    def remove(self, package: Package, path: str) -> None:
        ...


class LibraryInstaller(InstallerInterface):
    """Installs packages to ``<vendor_dir>/<name>[/<target-dir>]``.

    File placement is delegated to the download manager; without one the
    installer only keeps the repository in sync, which is enough for callers
    that need install paths and bookkeeping.
    """

    def __init__(
        self,
        vendor_dir: str,
        download_manager: Optional[DownloadManager] = None,
        package_type: str = PackageTypes.LIBRARY.value,
    ):
        self.vendor_dir = normalize_path(vendor_dir).rstrip("/")
        self.download_manager = download_manager
        self.type = package_type

    def supports(self, package_type: str) -> bool:
        return package_type == self.type

    def is_installed(self, repo: WritableRepositoryInterface, package: Package) -> bool:
        return repo.has_package(package) and os.path.isdir(self.get_install_path(package))

    def install(self, repo: WritableRepositoryInterface, package: Package) -> None:
        path = self.get_install_path(package)
        ensure_directory_exists(self.vendor_dir or ".")
        if self.download_manager is not None:
            self.download_manager.download(package, path)
        if not repo.has_package(package):
            repo.add_package(package)
        logger.debug("Installed %s to %s", package, path)

    def update(self, repo: WritableRepositoryInterface, initial: Package, target: Package) -> None:
        if not repo.has_package(initial):
            raise InvalidArgumentError(f"Package is not installed: {initial}")

        path = self.get_install_path(initial)
        if self.download_manager is not None:
            self.download_manager.update(initial, target, path)
        repo.remove_package(initial)
        if not repo.has_package(target):
            repo.add_package(target)

    def uninstall(self, repo: WritableRepositoryInterface, package: Package) -> None:
        if not repo.has_package(package):
            raise InvalidArgumentError(f"Package is not installed: {package}")

        path = self.get_install_path(package)
        if self.download_manager is not None:
            self.download_manager.remove(package, path)
        repo.remove_package(package)
        logger.debug("Removed %s from %s", package, path)

    def get_install_path(self, package: Package) -> str:
        base = f"{self.vendor_dir}/" if self.vendor_dir else ""
        target = f"/{package.target_dir}" if package.target_dir else ""
        return base + package.pretty_name + target
