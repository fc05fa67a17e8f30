"""Autoload generation: classmap scanning, rule merging and PHP file emission."""

from .classmap import ClassMapGenerator, find_classes
from .generator import AutoloadGenerator
from .rules import AutoloadTables, build_package_map, parse_autoloads

__all__ = [
    "AutoloadGenerator",
    "AutoloadTables",
    "ClassMapGenerator",
    "build_package_map",
    "find_classes",
    "parse_autoloads",
]
