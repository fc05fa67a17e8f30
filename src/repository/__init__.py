"""Package repositories consumed by the installers and the autoload generator."""

from .base import ArrayRepository, RepositoryInterface, WritableRepositoryInterface
from .filesystem import InstalledFilesystemRepository

__all__ = [
    "ArrayRepository",
    "InstalledFilesystemRepository",
    "RepositoryInterface",
    "WritableRepositoryInterface",
]
