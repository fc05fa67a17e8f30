"""Manifest loading and dumping for package records.

Accepts the composer.json shape::

    {
        "name": "acme/lib",
        "version": "1.2",
        "type": "library",
        "target-dir": "Acme/Lib",
        "include-path": ["lib/"],
        "autoload": {
            "psr-0": {"Acme\\\\Lib": "src/", "": ["fallback/"]},
            "classmap": ["src/", "Legacy.php"]
        }
    }
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

from common.errors import InvalidArgumentError
from constants import Constants
from package.models import AutoloadKind, AutoloadRule, Package

logger = logging.getLogger(__name__)


def _as_path_list(value: Any, context: str) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise InvalidArgumentError(f"{context} must be a string or a list of strings")


def _load_autoload(autoload: Any, package_name: str) -> List[AutoloadRule]:
    if autoload is None:
        return []
    if not isinstance(autoload, dict):
        raise InvalidArgumentError(f"autoload of {package_name} must be an object")

    rules: List[AutoloadRule] = []
    for kind_name, mapping in autoload.items():
        try:
            kind = AutoloadKind(kind_name)
        except ValueError:
            logger.warning("Ignoring unsupported autoload type '%s' in %s", kind_name, package_name)
            continue

        if kind is AutoloadKind.PSR0:
            if not isinstance(mapping, dict):
                raise InvalidArgumentError(f"autoload.psr-0 of {package_name} must be an object")
            for prefix, paths in mapping.items():
                rules.append(AutoloadRule(
                    kind=kind,
                    prefix=prefix,
                    paths=tuple(_as_path_list(paths, f"autoload.psr-0.{prefix} of {package_name}")),
                ))
        else:
            rules.append(AutoloadRule(
                kind=kind,
                paths=tuple(_as_path_list(mapping, f"autoload.classmap of {package_name}")),
            ))
    return rules


def load_package(config: Dict[str, Any], default_version: Optional[str] = None) -> Package:
    """Build a Package from a manifest mapping.

    Args:
        config: Parsed manifest data.
        default_version: Version used when the manifest declares none
            (root manifests usually omit it).

    Returns:
        The loaded package.

    Raises:
        InvalidArgumentError: If required keys are missing or malformed.
    """
    if not isinstance(config, dict):
        raise InvalidArgumentError("Package manifest must be an object")

    name = config.get("name")
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgumentError("Package manifest requires a non-empty 'name'")

    version = config.get("version", default_version)
    if not isinstance(version, str) or not version.strip():
        raise InvalidArgumentError(f"Package {name} requires a 'version'")

    target_dir = config.get("target-dir")
    if target_dir is not None and not isinstance(target_dir, str):
        raise InvalidArgumentError(f"target-dir of {name} must be a string")

    return Package(
        pretty_name=name.strip(),
        pretty_version=version.strip(),
        type=str(config.get("type") or "library"),
        autoload=tuple(_load_autoload(config.get("autoload"), name)),
        include_paths=tuple(_as_path_list(config.get("include-path", []), f"include-path of {name}")),
        target_dir=(target_dir.strip("/") or None) if target_dir else None,
    )


def load_manifest(path: str) -> Dict[str, Any]:
    """Read a JSON manifest file into a mapping."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            config = json.load(fh)
    except FileNotFoundError as exc:
        raise InvalidArgumentError(f"Manifest not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidArgumentError(f"Could not read manifest {path}: {exc}") from exc
    if not isinstance(config, dict):
        raise InvalidArgumentError(f"Manifest {path} must contain a JSON object")
    return config


def load_root_package(path: str) -> Package:
    """Load the root package from a JSON manifest file on disk."""
    return load_package(load_manifest(path), default_version=Constants.DEFAULT_ROOT_VERSION)


def dump_package(package: Package) -> Dict[str, Any]:
    """Return the manifest mapping for ``package``; inverse of load_package."""
    data: Dict[str, Any] = {
        "name": package.pretty_name,
        "version": package.pretty_version,
        "type": package.type,
    }
    autoload: Dict[str, Any] = {}
    for rule in package.autoload:
        if rule.kind is AutoloadKind.PSR0:
            paths = list(rule.paths)
            autoload.setdefault(rule.kind.value, {})[rule.prefix] = paths[0] if len(paths) == 1 else paths
        else:
            autoload.setdefault(rule.kind.value, []).extend(rule.paths)
    if autoload:
        data["autoload"] = autoload
    if package.include_paths:
        data["include-path"] = list(package.include_paths)
    if package.target_dir:
        data["target-dir"] = package.target_dir
    return data
