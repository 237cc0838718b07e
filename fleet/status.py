"""Enums for record status fields, case stages and PM urgency."""

from enum import Enum


class Status(Enum):
    """PM urgency categories. Lower value = more urgent."""

    OVERDUE = 1
    DUE_SOON = 2
    OK = 3
    UNKNOWN = 4  # Can't calculate (missing odometer or due reading)


class TruckStatus(Enum):
    ACTIVE = "Active"
    SERVICE = "Service"
    REPAIR = "Repair"
    INACTIVE = "Inactive"


class TrailerStatus(Enum):
    ON_ROAD = "On Road"
    YARD = "Yard"
    SERVICE = "Service"
    INACTIVE = "Inactive"


class Priority(Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class LedgerType(Enum):
    EXPENSE = "expense"
    INCOME = "income"


class Stage(Enum):
    """Maintenance case stages, in the order a case moves through them."""

    NEW = "New"
    DIAGNOSE = "Diagnose"
    ESTIMATE = "Estimate"
    APPROVAL = "Approval"
    PARTS = "Parts"
    REPAIR = "Repair"
    QA = "QA"
    CLOSED = "Closed"


STAGES = [s.value for s in Stage]


def next_stage(stage: str) -> str:
    """
    Return the stage after ``stage``.

    Closed stays Closed. A value that is not a known stage restarts at New.
    """
    if stage not in STAGES:
        return Stage.NEW.value
    idx = STAGES.index(stage)
    return STAGES[min(idx + 1, len(STAGES) - 1)]
