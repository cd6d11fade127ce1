from datetime import datetime
from pydantic import BaseModel
from typing import Optional, List


class ProjectListItem(BaseModel):
    id: str
    title: str
    owner: str
    isFavorite: bool
    isArchived: bool
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ProjectFlagsUpdate(BaseModel):
    isFavorite: Optional[bool] = None
    isArchived: Optional[bool] = None


class SaveResult(BaseModel):
    success: bool = True
    id: str
    # older clients read projectId
    projectId: str
    version: int
    updatedAt: datetime


class DeleteResult(BaseModel):
    success: bool = True


class SetupReport(BaseModel):
    title: str
    shotCount: int
    totalMinutes: int
    label: str


class BudgetTotals(BaseModel):
    estimated: float
    actual: float
    remaining: float


class ProjectReport(BaseModel):
    id: str
    title: str
    shotCount: int
    setups: List[SetupReport]
    scheduleDays: int
    unscheduledShots: List[str]
    budget: BudgetTotals
