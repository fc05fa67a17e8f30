"""Installer registry and operation dispatcher."""

from __future__ import annotations

import logging
import os
from typing import List, Optional

from common.errors import FilesystemError, InvalidArgumentError, UnsupportedTypeError
from common.filesystem import (
    ensure_directory_exists,
    find_shortest_path,
    is_absolute_path,
    normalize_path,
)
from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from installation.base import InstallerInterface
from installation.operations import (
    InstallOperation,
    Operation,
    OperationState,
    UninstallOperation,
    UpdateOperation,
)
from package.models import Package
from repository.base import WritableRepositoryInterface

logger = logging.getLogger(__name__)


class InstallationManager:
    """Routes operations to the installer registered for each package type.

    Installers are queried in registration order and the first one whose
    ``supports`` matches wins; a later installer claiming the same type is
    shadowed.
    """

    def __init__(self, vendor_dir: Optional[str] = None):
        """Initialize the manager.

        Args:
            vendor_dir: Installation root, absolute or relative to the
                working directory. Created when missing. Defaults to
                ``Constants.VENDOR_DIR`` as configured at call time.

        Raises:
            InvalidArgumentError: If the directory is not a directory or
                cannot be created.
        """
        if vendor_dir is None:
            vendor_dir = Constants.VENDOR_DIR
        self._installers: List[InstallerInterface] = []

        cwd = os.getcwd()
        absolute = os.path.normpath(vendor_dir if is_absolute_path(vendor_dir) else os.path.join(cwd, vendor_dir))
        try:
            ensure_directory_exists(absolute)
        except FilesystemError as exc:
            raise InvalidArgumentError(
                f"Vendor dir ({vendor_dir}) must be accessible from the directory ({cwd}): {exc}"
            ) from exc

        if is_absolute_path(vendor_dir):
            relative = find_shortest_path(cwd, os.path.normpath(vendor_dir), directories=True)
            if relative.startswith("./"):
                relative = relative[2:] or "."
            self._vendor_path = relative
        else:
            self._vendor_path = normalize_path(os.path.normpath(vendor_dir))

    def get_vendor_path(self, absolute: bool = False) -> str:
        """Return the installation root.

        Args:
            absolute: Return an absolute path instead of the stored form,
                which is relative to the working directory when possible.
        """
        if not absolute:
            return self._vendor_path
        if is_absolute_path(self._vendor_path):
            return self._vendor_path
        return os.path.normpath(os.path.join(os.getcwd(), self._vendor_path))

    def add_installer(self, installer: InstallerInterface) -> None:
        self._installers.append(installer)

    @property
    def installers(self) -> List[InstallerInterface]:
        return list(self._installers)

    def get_installer(self, package_type: str) -> InstallerInterface:
        """Return the first registered installer supporting ``package_type``.

        Raises:
            UnsupportedTypeError: If no installer supports the type.
        """
        for installer in self._installers:
            if installer.supports(package_type):
                if is_debug_enabled(logger):
                    logger.debug(
                        "Installer selected",
                        extra=extra_context(
                            event="decision",
                            component="installation_manager",
                            action="get_installer",
                            package_type=package_type,
                            installer=type(installer).__name__,
                        ),
                    )
                return installer
        raise UnsupportedTypeError(package_type)

    def is_package_installed(self, repo: WritableRepositoryInterface, package: Package) -> bool:
        return self.get_installer(package.type).is_installed(repo, package)

    def get_install_path(self, package: Package) -> str:
        return self.get_installer(package.type).get_install_path(package)

    def execute(self, repo: WritableRepositoryInterface, operation: Operation) -> None:
        """Run ``operation`` through the method named by its job type.

        The operation is marked FAILED and the error re-raised if the
        installer fails; nothing is rolled back.

        Raises:
            InvalidArgumentError: If the operation was already executed or
                has an unknown job type.
        """
        if operation.state is not OperationState.PENDING:
            raise InvalidArgumentError(f"Operation already {operation.state.value}: {operation}")
        if operation.job_type not in ("install", "update", "uninstall"):
            raise InvalidArgumentError(f"Unknown operation job type: {operation.job_type!r}")

        operation.state = OperationState.DISPATCHED
        try:
            getattr(self, operation.job_type)(repo, operation)
        except Exception:
            operation.state = OperationState.FAILED
            logger.error("Failed: %s", operation)
            raise
        operation.state = OperationState.COMPLETED

    def install(self, repo: WritableRepositoryInterface, operation: InstallOperation) -> None:
        installer = self.get_installer(operation.package.type)
        logger.info("%s", operation)
        installer.install(repo, operation.package)

    def update(self, repo: WritableRepositoryInterface, operation: UpdateOperation) -> None:
        """Update in place, or uninstall + install when the package type changes."""
        initial = operation.initial_package
        target = operation.target_package

        initial_type = initial.type
        target_type = target.type

        logger.info("%s", operation)
        if initial_type == target_type:
            installer = self.get_installer(initial_type)
            installer.update(repo, initial, target)
            return

        if is_debug_enabled(logger):
            logger.debug(
                "Package type changed, replacing package",
                extra=extra_context(
                    event="decision",
                    component="installation_manager",
                    action="update",
                    outcome="type_change",
                    initial_type=initial_type,
                    target_type=target_type,
                ),
            )
        self.get_installer(initial_type).uninstall(repo, initial)
        self.get_installer(target_type).install(repo, target)

    def uninstall(self, repo: WritableRepositoryInterface, operation: UninstallOperation) -> None:
        installer = self.get_installer(operation.package.type)
        logger.info("%s", operation)
        installer.uninstall(repo, operation.package)
