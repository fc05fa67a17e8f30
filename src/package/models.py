"""Data models for resolved packages and their autoload declarations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import semantic_version


class AutoloadKind(Enum):
    """Kinds of autoload declarations a package may carry."""
    PSR0 = "psr-0"
    CLASSMAP = "classmap"


@dataclass(frozen=True)
class AutoloadRule:
    """One autoload declaration: a namespace prefix mapping or a classmap root list."""
    kind: AutoloadKind
    paths: Tuple[str, ...]
    prefix: Optional[str] = None  # None for classmap rules, '' is the fallback bucket


def normalize_version(version: str) -> str:
    """Normalize a version string; non-semver strings (dev-master) are kept as is."""
    text = version.strip()
    try:
        return str(semantic_version.Version.coerce(text.lstrip("vV")))
    except ValueError:
        return text


@dataclass(frozen=True)
class Package:
    """A resolved package record.

    Instances are immutable; installers and repositories never modify them in
    place, they add and remove whole records instead.
    """
    pretty_name: str
    pretty_version: str
    type: str = "library"
    autoload: Tuple[AutoloadRule, ...] = ()
    include_paths: Tuple[str, ...] = ()
    target_dir: Optional[str] = None
    name: str = field(init=False)
    version: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "name", self.pretty_name.lower())
        object.__setattr__(self, "version", normalize_version(self.pretty_version))

    @property
    def unique_name(self) -> str:
        return f"{self.name}-{self.version}"

    @property
    def is_dev(self) -> bool:
        return self.version.startswith("dev-") or self.version.endswith("-dev")

    def psr0_rules(self) -> Tuple[AutoloadRule, ...]:
        return tuple(r for r in self.autoload if r.kind is AutoloadKind.PSR0)

    def classmap_rules(self) -> Tuple[AutoloadRule, ...]:
        return tuple(r for r in self.autoload if r.kind is AutoloadKind.CLASSMAP)

    def __str__(self) -> str:
        return f"{self.pretty_name} ({self.pretty_version})"
