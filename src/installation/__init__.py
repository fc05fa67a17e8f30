"""Installer strategies and the installation manager.

- base.py: the InstallerInterface every strategy implements
- manager.py: registry of strategies and operation dispatch
- library.py / metapackage.py: bundled strategies
- operations.py: install / update / uninstall operation records
"""

from .base import InstallerInterface
from .library import DownloadManager, LibraryInstaller
from .manager import InstallationManager
from .metapackage import MetapackageInstaller
from .operations import (
    InstallOperation,
    Operation,
    OperationState,
    UninstallOperation,
    UpdateOperation,
)

__all__ = [
    "DownloadManager",
    "InstallOperation",
    "InstallationManager",
    "InstallerInterface",
    "LibraryInstaller",
    "MetapackageInstaller",
    "Operation",
    "OperationState",
    "UninstallOperation",
    "UpdateOperation",
]
