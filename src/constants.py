"""Constants used in the project."""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    INVALID_ARGUMENT = 2
    DUPLICATE_CLASS = 3


class PackageTypes(Enum):
    """Package types handled by the bundled installers.

    Args:
        Enum (string): Package type tags.
    """

    LIBRARY = "library"
    METAPACKAGE = "metapackage"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    VENDOR_DIR = "vendor"
    AUTOLOAD_DIR = ".composer"
    MANIFEST_FILE = "composer.json"
    INSTALLED_FILE = "installed.json"
    CLASSMAP_EXTENSIONS = ["php", "inc"]
    DEFAULT_ROOT_VERSION = "dev-master"

    NAMESPACES_FILE = "autoload_namespaces.php"
    CLASSMAP_FILE = "autoload_classmap.php"
    INCLUDE_PATHS_FILE = "include_paths.php"
    AUTOLOAD_FILE = "autoload.php"
    CLASS_LOADER_FILE = "ClassLoader.php"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_LEVEL = "INFO"
    ENV_CONFIG = "VENDORKIT_CONFIG"
    ENV_LOG_LEVEL = "VENDORKIT_LOG_LEVEL"
    CONFIG_SEARCH_PATHS = [
        "vendorkit.yml",
        "vendorkit.yaml",
        os.path.join("~", ".config", "vendorkit", "vendorkit.yml"),
    ]


def _config_candidates() -> list:
    """Return config file candidates in priority order."""
    candidates = []
    env_path = os.environ.get(Constants.ENV_CONFIG)
    if env_path and env_path.strip():
        candidates.append(env_path.strip())
    candidates.extend(os.path.expanduser(p) for p in Constants.CONFIG_SEARCH_PATHS)
    return candidates


def _load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the first available YAML configuration file.

    Args:
        path: Explicit file to load; when omitted the default locations are searched.

    Returns:
        The parsed mapping, or an empty dict when nothing usable was found.
    """
    candidates = [path] if path else _config_candidates()
    for candidate in candidates:
        if not candidate or not os.path.isfile(candidate):
            continue
        try:
            with open(candidate, "r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.warning("Ignoring unreadable config file %s: %s", candidate, exc)
            continue
        if isinstance(data, dict):
            logger.debug("Loaded configuration from %s", candidate)
            return data
        logger.warning("Ignoring config file %s: top level is not a mapping", candidate)
    return {}


def apply_config(cfg: Dict[str, Any]) -> None:
    """Overlay configuration values onto Constants."""
    if not isinstance(cfg, dict):
        return
    if isinstance(cfg.get("vendor_dir"), str) and cfg["vendor_dir"].strip():
        Constants.VENDOR_DIR = cfg["vendor_dir"].strip()
    if isinstance(cfg.get("autoload_dir"), str) and cfg["autoload_dir"].strip():
        Constants.AUTOLOAD_DIR = cfg["autoload_dir"].strip()
    extensions = cfg.get("classmap_extensions")
    if isinstance(extensions, list) and extensions:
        Constants.CLASSMAP_EXTENSIONS = [str(e).lstrip(".").lower() for e in extensions]
    if isinstance(cfg.get("log_level"), str):
        Constants.LOG_LEVEL = cfg["log_level"].upper()
