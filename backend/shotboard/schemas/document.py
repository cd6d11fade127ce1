"""
Typed records for the project document blob.

The blob is written and read as one unit; these models only gate its shape at
the API boundary. Nested records reject unknown keys, the top-level document
ignores server-stamped keys that clients echo back after a fetch.
"""

import enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

RecordId = Union[int, str]
Amount = Union[int, float, str]


class ShotStatus(str, enum.Enum):
    draft = "draft"
    approved = "approved"
    fix = "fix"


class TeamRole(str, enum.Enum):
    director = "director"
    writer = "writer"
    dp = "dp"
    producer = "producer"
    ad = "ad"
    editor = "editor"
    viewer = "viewer"


class Shot(BaseModel):
    id: RecordId
    type: str = ""
    angle: str = ""
    desc: str = ""
    lens: Union[str, int, float] = ""
    fps: Union[str, int, float] = ""
    time: Optional[Amount] = None  # minutes
    status: ShotStatus = ShotStatus.draft
    image: Optional[str] = None

    class Config:
        extra = "forbid"

    @field_validator("image")
    @classmethod
    def image_is_data_uri(cls, value: Optional[str]) -> Optional[str]:
        if value and not value.startswith("data:image/"):
            raise ValueError("image must be a data:image/ URI")
        return value


class Setup(BaseModel):
    id: Optional[RecordId] = None
    title: str = ""
    shots: List[Shot] = Field(default_factory=list)

    class Config:
        extra = "forbid"


class ScheduleDay(BaseModel):
    id: Optional[RecordId] = None
    title: str = ""
    date: Optional[str] = None
    # references into setups[].shots[].id, never copies
    shots: List[RecordId] = Field(default_factory=list)

    class Config:
        extra = "forbid"


class TeamMember(BaseModel):
    email: str
    role: TeamRole

    class Config:
        extra = "forbid"


class Department(BaseModel):
    id: RecordId
    title: str = ""

    class Config:
        extra = "forbid"


class CrewMember(BaseModel):
    id: RecordId
    name: str
    role: str = ""
    deptId: Optional[RecordId] = None
    department: Optional[str] = None  # legacy boards grouped crew by title
    rate: Optional[Amount] = None
    phone: str = ""
    email: str = ""

    class Config:
        extra = "forbid"


class GearItem(BaseModel):
    id: RecordId
    name: str
    qty: Amount = 1
    category: str = ""
    status: str = ""

    class Config:
        extra = "forbid"


class BudgetItem(BaseModel):
    id: RecordId
    desc: str
    category: str = ""
    estCost: Optional[Amount] = None
    actCost: Optional[Amount] = None

    class Config:
        extra = "forbid"


BLOB_FIELDS = {
    "scriptHtml",
    "setups",
    "schedule",
    "team",
    "production_departments",
    "production_crew",
    "production_gear",
    "production_budget",
}


class ProjectDocument(BaseModel):
    id: Optional[RecordId] = None
    title: str = "Untitled Project"

    scriptHtml: str = ""
    setups: List[Setup] = Field(default_factory=list)
    schedule: List[ScheduleDay] = Field(default_factory=list)
    team: List[TeamMember] = Field(default_factory=list)

    production_departments: List[Department] = Field(default_factory=list)
    production_crew: List[CrewMember] = Field(default_factory=list)
    production_gear: List[GearItem] = Field(default_factory=list)
    production_budget: List[BudgetItem] = Field(default_factory=list)

    isFavorite: Optional[bool] = None
    isArchived: Optional[bool] = None

    # opt-in optimistic concurrency; omitted means last write wins
    expectedVersion: Optional[int] = None

    class Config:
        extra = "ignore"

    @field_validator("id", mode="before")
    @classmethod
    def blank_id_is_none(cls, value: Any) -> Any:
        if value in ("", 0):
            return None
        return value

    @property
    def project_id(self) -> Optional[str]:
        return None if self.id is None else str(self.id)

    def blob(self) -> Dict[str, Any]:
        """The part of the document stored in the data column, as sent."""
        return self.model_dump(mode="json", include=BLOB_FIELDS, exclude_unset=True)
