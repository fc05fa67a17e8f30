"""Package records and manifest loading."""

from .models import AutoloadKind, AutoloadRule, Package, normalize_version
from .loader import dump_package, load_manifest, load_package, load_root_package

__all__ = [
    "AutoloadKind",
    "AutoloadRule",
    "Package",
    "normalize_version",
    "dump_package",
    "load_manifest",
    "load_package",
    "load_root_package",
]
