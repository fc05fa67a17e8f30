"""Autoload generator: turns the installed package set into PHP lookup tables.

The generator resolves every package's install path through the
installation manager, merges the autoload rules, scans classmap roots and
writes the following files into the output directory:

- ``autoload_namespaces.php``: PSR-0 prefixes and the fallback directories.
- ``autoload_classmap.php``: class name to file, always written.
- ``include_paths.php``: only when at least one package declares include paths.
- ``autoload.php`` and ``ClassLoader.php``: the runtime bootstrap.

Paths are written relative to ``$vendorDir``/``$baseDir`` so the tree can
be moved as a whole.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional, Sequence, Tuple

from autoload.classmap import ClassMapGenerator
from autoload.rules import AutoloadTables, build_package_map, parse_autoloads
from autoload.templates import (
    CLASS_LOADER,
    export_php_string,
    render_autoload,
    render_path_list,
    render_table,
)
from common.filesystem import (
    ensure_directory_exists,
    find_shortest_path_code,
    is_absolute_path,
    normalize_path,
    remove_file,
    write_file_atomic,
)
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from package.models import Package
from repository.base import RepositoryInterface

logger = logging.getLogger(__name__)


class AutoloadGenerator:
    """Generates the autoload files for a root package and its dependencies."""

    def __init__(
        self,
        working_dir: Optional[str] = None,
        class_map_generator: Optional[ClassMapGenerator] = None,
    ):
        """Initialize the generator.

        Args:
            working_dir: Project root; defaults to the process working
                directory at generation time.
            class_map_generator: Scanner used for classmap roots.
        """
        self.working_dir = working_dir
        self.class_map_generator = class_map_generator or ClassMapGenerator()

    def generate(
        self,
        repository: RepositoryInterface,
        root_package: Package,
        installation_manager,
        output_dir: str,
    ) -> List[str]:
        """Write the autoload files for ``root_package`` and ``repository``.

        Args:
            repository: Installed packages in dependency order.
            root_package: The project's own package, processed last.
            installation_manager: Resolves vendor and install paths.
            output_dir: Directory receiving the generated files.

        Returns:
            Paths of the files written.

        Raises:
            FilesystemError: If the output directory cannot be created or
                written, or a classmap file cannot be read.
            DuplicateClassError: If two different files declare the same class.
        """
        logger.info("Generating autoload files")

        base_path = normalize_path(os.path.abspath(self.working_dir or os.getcwd()))
        ensure_directory_exists(output_dir)
        target_dir = normalize_path(os.path.abspath(output_dir))

        vendor_path = installation_manager.get_vendor_path(True)
        if not is_absolute_path(vendor_path):
            vendor_path = os.path.join(base_path, vendor_path)
        vendor_path = normalize_path(os.path.normpath(vendor_path))
        ensure_directory_exists(vendor_path)

        resolver = _PathCodeResolver(vendor_path, base_path)
        vendor_code = find_shortest_path_code(os.path.realpath(target_dir), resolver.vendor_real, True)
        base_code = find_shortest_path_code(resolver.vendor_real, resolver.base_real, True)
        if not base_code.startswith("'"):
            base_code = base_code.replace("__DIR__", "$vendorDir")

        package_map = build_package_map(installation_manager, root_package, repository.get_packages())
        tables = parse_autoloads(package_map)
        classmap = self._build_classmap(tables, base_path, target_dir)

        files: List[Tuple[str, str]] = [
            (Constants.NAMESPACES_FILE, self._render_namespaces(tables, resolver, vendor_code, base_code)),
            (Constants.CLASSMAP_FILE, self._render_classmap(classmap, resolver, vendor_code, base_code)),
        ]
        include_paths_file = ""
        if tables.include_paths:
            include_paths_file = Constants.INCLUDE_PATHS_FILE
            files.append(
                (include_paths_file, self._render_include_paths(tables, resolver, vendor_code, base_code))
            )
        files.append(
            (
                Constants.AUTOLOAD_FILE,
                render_autoload(Constants.NAMESPACES_FILE, Constants.CLASSMAP_FILE, include_paths_file),
            )
        )
        files.append((Constants.CLASS_LOADER_FILE, CLASS_LOADER))

        written: List[str] = []
        for file_name, content in files:
            path = os.path.join(output_dir, file_name)
            write_file_atomic(path, content)
            written.append(path)

        if not include_paths_file and remove_file(os.path.join(output_dir, Constants.INCLUDE_PATHS_FILE)):
            logger.debug("Removed stale %s", Constants.INCLUDE_PATHS_FILE)

        return written

    def _build_classmap(self, tables: AutoloadTables, base_path: str, output_dir: str) -> Dict[str, str]:
        classmap: Dict[str, str] = {}
        with Timer() as t:
            for root in tables.classmap_roots:
                absolute = root if is_absolute_path(root) else os.path.join(base_path, root or ".")
                absolute = os.path.normpath(absolute)
                if not os.path.exists(absolute):
                    logger.debug("Skipping missing classmap root %s", root)
                    continue
                self.class_map_generator.merge(
                    classmap, self.class_map_generator.create_map(absolute, exclude=(output_dir,))
                )
        if is_debug_enabled(logger):
            logger.debug(
                "Classmap built",
                extra=extra_context(
                    event="scan",
                    component="autoload_generator",
                    action="build_classmap",
                    count=len(classmap),
                    duration_ms=t.duration_ms(),
                ),
            )
        return classmap

    @staticmethod
    def _render_namespaces(tables: AutoloadTables, resolver, vendor_code: str, base_code: str) -> str:
        entries = [
            f"{export_php_string(prefix)} => {render_path_list([resolver.code(p) for p in paths])}"
            for prefix, paths in tables.namespaces.items()
        ]
        if tables.fallback_dirs:
            fallback = render_path_list([resolver.code(p) for p in tables.fallback_dirs], force_array=True)
            entries.append(f"'' => {fallback}")
        return render_table(Constants.NAMESPACES_FILE, vendor_code, base_code, entries)

    @staticmethod
    def _render_classmap(classmap: Dict[str, str], resolver, vendor_code: str, base_code: str) -> str:
        entries = [f"{export_php_string(name)} => {resolver.code(path)}" for name, path in classmap.items()]
        return render_table(Constants.CLASSMAP_FILE, vendor_code, base_code, entries)

    @staticmethod
    def _render_include_paths(tables: AutoloadTables, resolver, vendor_code: str, base_code: str) -> str:
        entries = [resolver.code(p) for p in tables.include_paths]
        return render_table(Constants.INCLUDE_PATHS_FILE, vendor_code, base_code, entries)


class _PathCodeResolver:
    """Renders filesystem paths as PHP expressions over $vendorDir and $baseDir."""

    def __init__(self, vendor_path: str, base_path: str):
        self.vendor_real = normalize_path(os.path.realpath(vendor_path))
        self.base_real = normalize_path(os.path.realpath(base_path))
        self.base_path = base_path
        # Vendor candidates come first: the vendor dir usually lives inside the base dir.
        self._anchors: Sequence[Tuple[str, str]] = (
            (vendor_path, "$vendorDir"),
            (self.vendor_real, "$vendorDir"),
            (base_path, "$baseDir"),
            (self.base_real, "$baseDir"),
        )

    def code(self, path: str) -> str:
        path = normalize_path(path)
        trailing = "/" if path.endswith("/") and path.strip("/") else ""
        absolute = path if is_absolute_path(path) else f"{self.base_path}/{path}"
        absolute = normalize_path(os.path.normpath(absolute))

        for anchor, variable in self._anchors:
            anchor = anchor.rstrip("/")
            if not anchor:
                continue
            if absolute == anchor:
                return variable + (f" . {export_php_string('/')}" if trailing else "")
            if absolute.startswith(anchor + "/"):
                return f"{variable} . {export_php_string(absolute[len(anchor):] + trailing)}"
        return export_php_string(absolute + trailing)
