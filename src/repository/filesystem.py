"""Installed-packages repository persisted as a JSON file (installed.json)."""

from __future__ import annotations

import json
import logging
import os

from common.errors import InvalidArgumentError
from common.filesystem import ensure_directory_exists, write_file_atomic
from package.loader import dump_package, load_package
from repository.base import ArrayRepository

logger = logging.getLogger(__name__)


class InstalledFilesystemRepository(ArrayRepository):
    """Repository of installed packages backed by a JSON list on disk.

    A missing file is an empty repository. Package order in the file is the
    dependency order and is preserved on write.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self.reload()

    def reload(self) -> None:
        self._packages.clear()
        if not os.path.exists(self.path):
            logger.debug("No installed repository at %s", self.path)
            return
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise InvalidArgumentError(f"Could not read installed repository {self.path}: {exc}") from exc
        if not isinstance(data, list):
            raise InvalidArgumentError(f"Installed repository {self.path} must contain a JSON list")
        for entry in data:
            self.add_package(load_package(entry))
        logger.debug("Loaded %d installed packages from %s", len(self), self.path)

    def write(self) -> None:
        ensure_directory_exists(os.path.dirname(os.path.abspath(self.path)))
        payload = [dump_package(p) for p in self.get_packages()]
        write_file_atomic(self.path, json.dumps(payload, indent=4) + "\n")
