"""Error types raised by the installation and autoload layers."""

from typing import Optional


class VendorkitError(Exception):
    """Base class for all errors raised by vendorkit."""


class InvalidArgumentError(VendorkitError, ValueError):
    """Raised for invalid paths, packages or operations passed by a caller."""


class UnsupportedTypeError(InvalidArgumentError):
    """Raised when no registered installer supports a package type."""

    def __init__(self, package_type: str):
        self.package_type = package_type
        super().__init__(f"Unknown installer type: {package_type}")


class DuplicateClassError(VendorkitError):
    """Raised when two different files declare the same class name."""

    def __init__(self, class_name: str, first_path: str, second_path: str):
        self.class_name = class_name
        self.first_path = first_path
        self.second_path = second_path
        super().__init__(
            f'Ambiguous class resolution, "{class_name}" was found in both '
            f'"{first_path}" and "{second_path}"'
        )


class FilesystemError(VendorkitError, OSError):
    """Raised when a path cannot be created, read or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)
