"""Request bodies accepted by the time entry API."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic import ValidationError as PydanticValidationError

from ..common.validators import issues_from_pydantic
from ..core.constants import NOTES_MAX_LENGTH
from ..core.enums import TimeEntryType
from ..core.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class CreateTimeEntryRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    employee_id: str = Field(alias="employeeId", min_length=1)
    type: TimeEntryType
    timestamp: Optional[datetime] = None
    notes: Optional[str] = Field(default=None, max_length=NOTES_MAX_LENGTH)


class ApprovalRequest(BaseModel):
    # Entries are immutable apart from approval; reject attempts to touch other fields.
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    approved: StrictBool
    approved_by: Optional[str] = Field(default=None, alias="approvedBy", min_length=1, max_length=64)


def parse_payload(schema: Type[SchemaT], payload: Any) -> SchemaT:
    if not isinstance(payload, dict):
        raise ValidationError(
            issues=[{"path": [], "message": "Request body must be a JSON object", "code": "invalid_type"}]
        )
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(issues=issues_from_pydantic(e.errors()))
