"""Repository interfaces and the in-memory repository."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from package.models import Package, normalize_version


class RepositoryInterface:
    """Read access to an ordered set of packages.

    ``get_packages`` returns packages in dependency order; the autoload
    generator relies on that order for namespace overrides.
    """

    def get_packages(self) -> List[Package]:
        raise NotImplementedError

    def has_package(self, package: Package) -> bool:
        return any(p.unique_name == package.unique_name for p in self.get_packages())

    def find_package(self, name: str, version: Optional[str] = None) -> Optional[Package]:
        """Return the first package named ``name`` (optionally at ``version``)."""
        name = name.lower()
        wanted = normalize_version(version) if version is not None else None
        for package in self.get_packages():
            if package.name == name and (wanted is None or package.version == wanted):
                return package
        return None

    def __len__(self) -> int:
        return len(self.get_packages())


class WritableRepositoryInterface(RepositoryInterface):
    """Repository that installers keep in sync with the vendor directory."""

    def add_package(self, package: Package) -> None:
        raise NotImplementedError

    def remove_package(self, package: Package) -> None:
        raise NotImplementedError

    def write(self) -> None:
        """Persist the current state; no-op for in-memory repositories."""

    def reload(self) -> None:
        """Re-read persisted state; no-op for in-memory repositories."""


class ArrayRepository(WritableRepositoryInterface):
    """In-memory repository preserving insertion order."""

    def __init__(self, packages: Iterable[Package] = ()):
        self._packages: Dict[str, Package] = {}
        for package in packages:
            self.add_package(package)

    def get_packages(self) -> List[Package]:
        return list(self._packages.values())

    def has_package(self, package: Package) -> bool:
        return package.unique_name in self._packages

    def add_package(self, package: Package) -> None:
        self._packages.setdefault(package.unique_name, package)

    def remove_package(self, package: Package) -> None:
        self._packages.pop(package.unique_name, None)

    def __len__(self) -> int:
        return len(self._packages)
