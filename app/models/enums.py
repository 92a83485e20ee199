"""
Enum type definitions for Account Editor.

Values are stored as plain strings in the database.
"""
from enum import Enum


class TaskName(str, Enum):
    """
    Panel operation an automation task performs.

    - CREATE_ACCOUNT: create a new line on the panel
    - FIND_ACCOUNT: look up lines by username
    - EXTEND_PACKAGE: find a line by username, then renew it
    """
    CREATE_ACCOUNT = "create_account"
    FIND_ACCOUNT = "find_account"
    EXTEND_PACKAGE = "extend_package"

    @property
    def requires_package(self) -> bool:
        """Whether the operation charges a package on the panel."""
        return self in (TaskName.CREATE_ACCOUNT, TaskName.EXTEND_PACKAGE)


class TaskStatus(str, Enum):
    """
    Automation task lifecycle.

    Transitions only go PENDING -> COMPLETED or PENDING -> FAILED.
    """
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PENDING


class PanelPackage(int, Enum):
    """
    Panel package codes and their subscription length.

    The code is 100 + number of months.
    """
    ONE_MONTH = 101
    THREE_MONTHS = 103
    SIX_MONTHS = 106
    TWELVE_MONTHS = 112
    TWENTY_FOUR_MONTHS = 124

    @property
    def months(self) -> int:
        return self.value - 100

    @property
    def price(self) -> float:
        """Transaction amount the simulated panel charges for this package."""
        return {
            PanelPackage.ONE_MONTH: 100.0,
            PanelPackage.THREE_MONTHS: 270.0,
            PanelPackage.SIX_MONTHS: 500.0,
            PanelPackage.TWELVE_MONTHS: 950.0,
            PanelPackage.TWENTY_FOUR_MONTHS: 1800.0,
        }[self]
