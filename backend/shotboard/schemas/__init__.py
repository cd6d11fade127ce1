from .document import (
    ProjectDocument,
    Setup,
    Shot,
    ShotStatus,
    ScheduleDay,
    TeamMember,
    TeamRole,
    Department,
    CrewMember,
    GearItem,
    BudgetItem,
)
from .project import (
    ProjectListItem,
    ProjectFlagsUpdate,
    SaveResult,
    DeleteResult,
    ProjectReport,
    SetupReport,
    BudgetTotals,
)
from .auth import Credentials, CurrentUser, AuthResult

__all__ = [
    "ProjectDocument",
    "Setup",
    "Shot",
    "ShotStatus",
    "ScheduleDay",
    "TeamMember",
    "TeamRole",
    "Department",
    "CrewMember",
    "GearItem",
    "BudgetItem",
    "ProjectListItem",
    "ProjectFlagsUpdate",
    "SaveResult",
    "DeleteResult",
    "ProjectReport",
    "SetupReport",
    "BudgetTotals",
    "Credentials",
    "CurrentUser",
    "AuthResult",
]
