"""Log record models for queue communication."""

import json
from typing import Any, ClassVar, Dict, Optional, Tuple, Union
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class LogRecord(BaseModel):
    """Base class for records published to a log queue."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # Attribute overwritten with the publish time
    timestamp_field: ClassVar[str]
    # Wire keys dropped from the payload when their value is empty
    omit_when_empty: ClassVar[Tuple[str, ...]] = ()

    def stamped(self, now: datetime) -> "LogRecord":
        """Return a copy of the record with its timestamp set to ``now``."""
        return self.model_copy(update={self.timestamp_field: now})

    @property
    def timestamp(self) -> Optional[datetime]:
        """Timestamp of the record, regardless of its field name."""
        return getattr(self, self.timestamp_field)

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to its wire dictionary."""
        data = self.model_dump(mode="json", by_alias=True)
        for key in self.omit_when_empty:
            if not data.get(key):
                data.pop(key, None)
        return data

    def to_json(self) -> bytes:
        """Encode record as a UTF-8 JSON payload."""
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def from_json(cls, body: Union[bytes, str]) -> "LogRecord":
        """Decode a record from a JSON payload (from queue deserialization)."""
        return cls.model_validate_json(body)


class AuditRecord(LogRecord):
    """A change made to an entity, with before and after snapshots."""

    timestamp_field: ClassVar[str] = "action_time"

    module: str = Field("", description="Module the action belongs to")
    action_type: str = Field("", alias="actionType", description="Kind of action")
    search_key: str = Field(
        "", alias="searchKey", description="Key used to look up the affected entity"
    )
    before: str = Field("", description="Serialized snapshot before the action")
    after: str = Field("", description="Serialized snapshot after the action")
    action_by: str = Field("", alias="actionBy", description="Acting principal")
    action_time: Optional[datetime] = Field(
        None, alias="timestamp", description="Set at publish time"
    )


class ActivityRecord(LogRecord):
    """Something a user did, with optional client context."""

    timestamp_field: ClassVar[str] = "activity_time"
    omit_when_empty: ClassVar[Tuple[str, ...]] = (
        "ip_address",
        "device_info",
        "location",
        "remarks",
    )

    user_id: str = Field("", description="User identifier")
    username: str = Field("", description="User name")
    activity: str = Field("", description="Free-text description of the activity")
    module: str = Field("", description="Module the activity belongs to")
    activity_time: Optional[datetime] = Field(None, description="Set at publish time")
    ip_address: str = ""
    device_info: str = ""
    location: str = ""
    remarks: str = ""
