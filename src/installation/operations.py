"""Install, update and uninstall operations produced by the resolver."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from package.models import Package


class OperationState(Enum):
    """Lifecycle of a single operation instance."""
    PENDING = "pending"
    DISPATCHED = "dispatched"
    COMPLETED = "completed"
    FAILED = "failed"


class Operation:
    """Base class for operations.

    ``job_type`` names the InstallationManager method that runs the operation.
    Each instance is executed at most once; ``state`` tracks its progress.
    """
    job_type = ""
    state: OperationState


@dataclass(eq=False)
class InstallOperation(Operation):
    package: Package
    reason: Optional[str] = None
    state: OperationState = field(default=OperationState.PENDING, init=False)
    job_type = "install"

    def __str__(self) -> str:
        return f"Installing {self.package}"


@dataclass(eq=False)
class UpdateOperation(Operation):
    initial_package: Package
    target_package: Package
    reason: Optional[str] = None
    state: OperationState = field(default=OperationState.PENDING, init=False)
    job_type = "update"

    def __str__(self) -> str:
        return (
            f"Updating {self.initial_package.pretty_name} "
            f"({self.initial_package.pretty_version} => {self.target_package.pretty_version})"
        )


@dataclass(eq=False)
class UninstallOperation(Operation):
    package: Package
    reason: Optional[str] = None
    state: OperationState = field(default=OperationState.PENDING, init=False)
    job_type = "uninstall"

    def __str__(self) -> str:
        return f"Uninstalling {self.package}"
