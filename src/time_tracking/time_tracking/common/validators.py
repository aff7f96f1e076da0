from __future__ import annotations

from typing import Any, Sequence

from ..core.exceptions import ValidationError


def require_non_empty(value: str | None, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(
            f"{field_name} is required",
            issues=[{"path": [field_name], "message": f"{field_name} is required", "code": "required"}],
        )
    return value.strip()


def parse_bool_param(value: str | None, field_name: str) -> bool | None:
    """Parse a ``true``/``false`` query string flag; absent means no filter."""
    if value is None or value == "":
        return None
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValidationError(
        issues=[{"path": [field_name], "message": "Expected 'true' or 'false'", "code": "invalid_boolean"}]
    )


def issues_from_pydantic(errors: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten pydantic ``ValidationError.errors()`` into JSON-safe issue dicts."""
    return [
        {
            "path": [str(p) for p in err.get("loc", ())],
            "message": err.get("msg", "Invalid value"),
            "code": err.get("type", "invalid"),
        }
        for err in errors
    ]
