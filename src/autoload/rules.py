"""Collects and merges autoload declarations across the package set.

Packages are processed in dependency order with the root package last. A
package declaring a namespace prefix replaces whatever an earlier package
declared for the identical prefix, so root rules always win.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from common.filesystem import is_absolute_path, normalize_path
from common.logging_utils import extra_context, is_debug_enabled
from package.models import Package

logger = logging.getLogger(__name__)

# (package, install path); the root package's install path is ''.
PackageMap = List[Tuple[Package, str]]


@dataclass
class AutoloadTables:
    """Merged autoload rules; paths are still relative to the working directory."""
    namespaces: Dict[str, List[str]] = field(default_factory=dict)
    fallback_dirs: List[str] = field(default_factory=list)
    classmap_roots: List[str] = field(default_factory=list)
    include_paths: List[str] = field(default_factory=list)


def build_package_map(installation_manager, root_package: Package, packages: Iterable[Package]) -> PackageMap:
    """Pair every package with its install path, root package last.

    Args:
        installation_manager: Provides ``get_install_path(package)``.
        root_package: The project's own package, installed at the working directory.
        packages: Installed packages in dependency order.
    """
    package_map: PackageMap = []
    for package in packages:
        if package.name == root_package.name:
            continue
        package_map.append((package, normalize_path(installation_manager.get_install_path(package))))
    package_map.append((root_package, ""))
    return package_map


def _join(install_path: str, path: str) -> str:
    path = normalize_path(path)
    if not install_path or is_absolute_path(path):
        return path
    return f"{install_path}/{path}"


def _strip_target_dir(package: Package, install_path: str) -> str:
    # PSR-0 prefixes already encode the target-dir part of the path.
    suffix = f"/{package.target_dir}" if package.target_dir else ""
    if suffix and install_path.endswith(suffix):
        return install_path[:-len(suffix)]
    return install_path


def parse_autoloads(package_map: PackageMap) -> AutoloadTables:
    """Merge the autoload and include-path declarations of ``package_map``.

    Returns:
        Tables with namespaces sorted so longer, more specific prefixes come
        first, the '' fallback bucket split out, and classmap roots and
        include paths in package then declaration order.
    """
    tables = AutoloadTables()
    namespaces: Dict[str, List[str]] = {}
    owners: Dict[str, int] = {}

    for index, (package, install_path) in enumerate(package_map):
        base_path = _strip_target_dir(package, install_path)

        for rule in package.psr0_rules():
            prefix = rule.prefix or ""
            if owners.get(prefix) != index:
                if prefix in namespaces and is_debug_enabled(logger):
                    logger.debug(
                        "Namespace prefix overridden",
                        extra=extra_context(
                            event="decision",
                            component="autoload_rules",
                            action="override",
                            prefix=prefix,
                            package=package.pretty_name,
                        ),
                    )
                namespaces[prefix] = []
                owners[prefix] = index
            namespaces[prefix].extend(_join(base_path, p) for p in rule.paths)

        for rule in package.classmap_rules():
            tables.classmap_roots.extend(_join(install_path, p) for p in rule.paths)

        tables.include_paths.extend(_join(base_path, p) for p in package.include_paths)

    tables.fallback_dirs = namespaces.pop("", [])
    tables.namespaces = dict(sorted(namespaces.items(), key=lambda item: item[0], reverse=True))
    return tables
