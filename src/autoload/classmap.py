"""Classmap scanner: maps PHP class, interface and trait names to files.

Files are not tokenized by a PHP interpreter. Instead the contents are
cleaned of everything that may contain misleading text (inline HTML,
string literals, heredocs, comments) and the remaining code is searched for
``namespace`` and ``class``/``interface``/``trait`` declarations.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from common.errors import DuplicateClassError, FilesystemError
from common.filesystem import normalize_path
from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants

logger = logging.getLogger(__name__)

_QUICK_CHECK = re.compile(r"\b(?:class|interface|trait)\b", re.IGNORECASE)

# Searched from inside a PHP block; the first alternative that starts
# earliest wins, so comment markers inside strings are never seen.
_PHP_NOISE = re.compile(
    r"""
      (?P<close>\?>)
    | (?P<heredoc><<<[ \t]*(?P<quote>['"]?)(?P<label>\w+)(?P=quote)\r?\n(?:.*?\n)?[ \t]*(?P=label)\b)
    | (?P<dq>"[^"\\]*(?:\\.[^"\\]*)*")
    | (?P<sq>'[^'\\]*(?:\\.[^'\\]*)*')
    | (?P<block>/\*.*?\*/)
    | (?P<line>(?://|\#(?!\[))[^\r\n]*?(?=\?>|\r|\n|$))
    """,
    re.DOTALL | re.VERBOSE,
)

_DECLARATION = re.compile(
    r"""
      \b(?<![$:>])(?P<type>class|interface|trait)\s+
        (?P<name>[a-zA-Z_\x7f-\uffff][a-zA-Z0-9_\x7f-\uffff]*)
    | \b(?<![$:>])namespace
        (?P<nsname>\s+[a-zA-Z_\x7f-\uffff][a-zA-Z0-9_\x7f-\uffff]*(?:\s*\\\s*[a-zA-Z0-9_\x7f-\uffff]+)*)?
        \s*[{;]
    """,
    re.IGNORECASE | re.VERBOSE,
)

_NOT_A_NAME = ("extends", "implements")


def _strip_non_code(contents: str) -> str:
    """Return only the PHP code of ``contents`` with literals and comments blanked."""
    out: List[str] = []
    pos = 0
    length = len(contents)
    while pos < length:
        start = contents.find("<?", pos)
        if start == -1:
            break
        pos = start + 2
        if contents[pos:pos + 3].lower() == "php":
            pos += 3
        elif contents[pos:pos + 1] == "=":
            pos += 1

        while pos < length:
            match = _PHP_NOISE.search(contents, pos)
            if match is None:
                out.append(contents[pos:])
                pos = length
                break
            out.append(contents[pos:match.start()])
            pos = match.end()
            kind = match.lastgroup
            if kind == "close":
                out.append(";\n")
                break
            out.append(" null " if kind in ("heredoc", "dq", "sq", "label") else " ")
    return "".join(out)


def find_classes(path: str) -> List[str]:
    """Extract the fully qualified classes, interfaces and traits declared in a file.

    Args:
        path: The PHP file to parse.

    Returns:
        Class names without a leading backslash, in declaration order.

    Raises:
        FilesystemError: If the file cannot be read.
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as fh:
            contents = fh.read()
    except OSError as exc:
        raise FilesystemError(f"Could not scan for classes inside {path}: {exc}", path=path) from exc

    if not _QUICK_CHECK.search(contents):
        return []

    classes: List[str] = []
    namespace = ""
    for match in _DECLARATION.finditer(_strip_non_code(contents)):
        if match.group("type"):
            name = match.group("name")
            if name.lower() in _NOT_A_NAME:
                continue
            classes.append((namespace + name).lstrip("\\"))
        else:
            nsname = re.sub(r"\s+", "", match.group("nsname") or "")
            namespace = nsname + "\\" if nsname else ""
    return classes


def _real_path(path: str) -> str:
    return normalize_path(os.path.realpath(path))


def _is_excluded(real: str, excluded: Tuple[str, ...]) -> bool:
    return any(real == e or real.startswith(e.rstrip("/") + "/") for e in excluded)


def _raise_walk_error(exc: OSError) -> None:
    path = exc.filename or ""
    raise FilesystemError(f"Could not scan for classes inside {path}: {exc}", path=path) from exc


class ClassMapGenerator:
    """Scans classmap roots and merges the results into one classmap."""

    def __init__(self, extensions: Optional[Iterable[str]] = None):
        exts = extensions if extensions is not None else Constants.CLASSMAP_EXTENSIONS
        self.extensions = tuple(e.lstrip(".").lower() for e in exts)

    def _iter_files(self, root: str, excluded: Tuple[str, ...]) -> Iterator[Tuple[str, str]]:
        if os.path.isfile(root):
            real = _real_path(root)
            if not _is_excluded(real, excluded):
                yield root, real
            return
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
            dirnames[:] = sorted(
                d for d in dirnames if _real_path(os.path.join(dirpath, d)) not in excluded
            )
            for filename in sorted(filenames):
                extension = os.path.splitext(filename)[1][1:].lower()
                if extension not in self.extensions:
                    continue
                file_path = os.path.join(dirpath, filename)
                real = _real_path(file_path)
                if not _is_excluded(real, excluded):
                    yield file_path, real

    def create_map(self, root: str, exclude: Iterable[str] = ()) -> Dict[str, str]:
        """Scan a directory recursively, or a single file, for class declarations.

        Args:
            root: Directory or file to scan.
            exclude: Directories whose contents are never scanned, compared
                by real path.

        Returns:
            Mapping of class name to the real path of its file, in a stable
            (sorted walk) order.

        Raises:
            DuplicateClassError: If two different files declare the same class.
            FilesystemError: If a file or directory cannot be read.
        """
        excluded = tuple(_real_path(path) for path in exclude)
        classmap: Dict[str, str] = {}
        with Timer() as t:
            for file_path, real in self._iter_files(root, excluded):
                for class_name in find_classes(file_path):
                    self._add(classmap, class_name, real)
        if is_debug_enabled(logger):
            logger.debug(
                "Scanned classmap root",
                extra=extra_context(
                    event="scan",
                    component="classmap",
                    action="create_map",
                    target=root,
                    count=len(classmap),
                    duration_ms=t.duration_ms(),
                ),
            )
        return classmap

    @staticmethod
    def _add(classmap: Dict[str, str], class_name: str, path: str) -> None:
        existing = classmap.get(class_name)
        if existing is not None and existing != path:
            raise DuplicateClassError(class_name, existing, path)
        classmap[class_name] = path

    def merge(self, classmap: Dict[str, str], other: Dict[str, str]) -> None:
        """Merge ``other`` into ``classmap``.

        Re-declaring a class from the same file is allowed.

        Raises:
            DuplicateClassError: If a class maps to a different file.
        """
        for class_name, path in other.items():
            self._add(classmap, class_name, path)
