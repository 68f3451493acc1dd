"""
Pydantic model for a single entry of the run history.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RunStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class HistoryEntry(BaseModel):
    """A snapshot of the options used for one run, plus its outcome."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    config: dict[str, Any] = Field(default_factory=dict)
    status: RunStatus = RunStatus.PENDING
    filename: str = "unknown"
    # First URI, else the input file path. Used to de-duplicate entries.
    source: str = Field("", alias="url")

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
