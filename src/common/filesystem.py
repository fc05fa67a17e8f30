"""Path resolution and file writing helpers.

All comparisons operate on '/'-separated paths so the generated PHP code is
identical across platforms. The shortest-path helpers answer two questions
for the autoload generator and the installation manager:

- ``find_shortest_path``: the relative filesystem path from one location to
  another, or the absolute target when the two only share the filesystem root.
- ``find_shortest_path_code``: the same relation expressed as a PHP expression
  built on ``__DIR__``, so generated files keep working when the project tree
  is moved as a whole.
"""
from __future__ import annotations

import logging
import os
import posixpath
import re
import tempfile

from common.errors import FilesystemError, InvalidArgumentError

logger = logging.getLogger(__name__)

_DRIVE_ROOT = re.compile(r"^[a-zA-Z]:/?$")


def normalize_path(path: str) -> str:
    """Return ``path`` with forward slashes only."""
    return path.replace("\\", "/")


def is_absolute_path(path: str) -> bool:
    """Return True for POSIX absolute paths and Windows drive or UNC paths."""
    return path.startswith("/") or path.startswith("\\\\") or path[1:2] == ":"


def export_php_string(value: str) -> str:
    """Render ``value`` as a single-quoted PHP string literal."""
    return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _prepare(path: str) -> str:
    path = normalize_path(path).rstrip("/") or "/"
    if path[1:2] == ":":
        path = path[0].lower() + path[1:]
    return path


def _is_within(path: str, base: str) -> bool:
    return path == base or path.startswith(base.rstrip("/") + "/")


def _is_root(path: str) -> bool:
    return path in ("/", ".", "") or bool(_DRIVE_ROOT.match(path))


def _common_path(from_path: str, to_path: str) -> str:
    common = to_path
    while not _is_within(from_path, common) and not _is_root(common):
        common = posixpath.dirname(common)
    return common


def find_shortest_path(from_path: str, to_path: str, directories: bool = False) -> str:
    """Return the shortest relative path from ``from_path`` to ``to_path``.

    Args:
        from_path: Absolute source location.
        to_path: Absolute target location.
        directories: Treat ``from_path`` as a directory rather than a file.

    Returns:
        A relative path such as ``../vendor`` or ``./vendor``; the absolute
        ``to_path`` when the two paths only share the filesystem root.

    Raises:
        InvalidArgumentError: If either path is relative.
    """
    if not is_absolute_path(from_path) or not is_absolute_path(to_path):
        raise InvalidArgumentError(f"from ({from_path}) and to ({to_path}) must be absolute paths")

    from_path = _prepare(from_path)
    to_path = _prepare(to_path)
    if directories:
        from_path = from_path.rstrip("/") + "/dummy_file"

    if posixpath.dirname(from_path) == posixpath.dirname(to_path):
        return "./" + posixpath.basename(to_path)

    common = _common_path(from_path, to_path)
    if not _is_within(from_path, common) or _is_root(common):
        return to_path

    common = common.rstrip("/") + "/"
    depth = from_path[len(common):].count("/")
    return ("../" * depth + to_path[len(common):]) or "./"


def find_shortest_path_code(from_path: str, to_path: str, directories: bool = False) -> str:
    """Return a PHP expression evaluating to ``to_path`` from a file in ``from_path``.

    The expression is rooted at ``__DIR__`` (``__FILE__`` for identical file
    paths) whenever the two paths share an ancestor below the filesystem root,
    and is an absolute string literal otherwise.
    """
    if not is_absolute_path(from_path) or not is_absolute_path(to_path):
        raise InvalidArgumentError(f"from ({from_path}) and to ({to_path}) must be absolute paths")

    from_path = _prepare(from_path)
    to_path = _prepare(to_path)

    if from_path == to_path:
        return "__DIR__" if directories else "__FILE__"

    common = _common_path(from_path, to_path)
    if not _is_within(from_path, common) or _is_root(common):
        return export_php_string(to_path)

    if to_path.startswith(from_path + "/"):
        return "__DIR__ . " + export_php_string(to_path[len(from_path):])

    common = common.rstrip("/") + "/"
    depth = from_path[len(common):].count("/") + int(directories)
    code = "dirname(" * depth + "__DIR__" + ")" * depth
    relative = to_path[len(common):]
    return code + (" . " + export_php_string("/" + relative) if relative else "")


def ensure_directory_exists(path: str) -> None:
    """Create ``path`` (and parents) unless it already is a directory.

    Raises:
        FilesystemError: If ``path`` exists as a file or cannot be created.
    """
    if os.path.isdir(path):
        return
    if os.path.exists(path):
        raise FilesystemError(f"{path} exists and is not a directory.", path=path)
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(f"{path} does not exist and could not be created: {exc}", path=path) from exc


def write_file_atomic(path: str, content: str) -> None:
    """Replace ``path`` with ``content`` via a temporary file in the same directory.

    Readers never observe a partially written file.

    Raises:
        FilesystemError: If the directory is not writable.
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix="." + os.path.basename(path) + ".", suffix=".tmp", dir=directory
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as fh:
            fh.write(content)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise FilesystemError(f"Could not write {path}: {exc}", path=path) from exc
    logger.debug("Wrote %s (%d bytes)", path, len(content))


def remove_file(path: str) -> bool:
    """Remove ``path`` if it exists; return True when a file was removed."""
    if not os.path.isfile(path):
        return False
    try:
        os.unlink(path)
    except OSError as exc:
        raise FilesystemError(f"Could not remove {path}: {exc}", path=path) from exc
    return True
