# ============================================================================
# RECORD PARSING AND VALIDATION
# ============================================================================
# STATUS: Core - Pure parse/validate of dataset version payloads
# PURPOSE: Opaque request payload -> (PathwayVersion, field errors)
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Record Parsing and Validation.

Turns the opaque `request` section of a workflow envelope (or a direct
registration payload) into a PathwayVersion. Malformed input never raises:
every problem becomes a FieldError so callers can report all of them at
once.

Trusted values (record id, uploader, file path) are applied through
`overrides` after the caller-supplied payload, so they always win.
confidence_level is dropped from caller input.

Exports:
    parse_and_validate: Main entry point
    format_field_errors: Human-readable join of FieldErrors
"""

from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from core.models.pathways import FieldError, PathwayVersion


PolygonValidator = Callable[[Dict[str, Any]], bool]

# Never settable through caller input
_PROTECTED_FIELDS = ("confidence_level",)

# Pydantic error types that mean "required field missing or blank"
_EMPTY_ERROR_TYPES = {"missing", "string_too_short"}


def _to_field_error(error: Dict[str, Any]) -> FieldError:
    loc = error.get("loc") or ()
    field = ".".join(str(part) for part in loc) or "request"
    if error.get("type") in _EMPTY_ERROR_TYPES or error.get("input") is None:
        return FieldError(field=field, message=f"{field} should not be empty")

    return FieldError(field=field, message=f"{field}: {error.get('msg', 'invalid value')}")


def parse_and_validate(
    raw: Any,
    overrides: Optional[Dict[str, Any]] = None,
    polygon_validator: Optional[PolygonValidator] = None
) -> Tuple[Optional[PathwayVersion], List[FieldError]]:
    """
    Parse and validate a dataset version payload.

    Args:
        raw: Opaque payload (expected: JSON object)
        overrides: Trusted values applied on top of the payload
        polygon_validator: Predicate for a present polygon; defaults to
            infrastructure.validators.is_valid_polygon

    Returns:
        (record, []) when valid, (None, errors) otherwise
    """
    if polygon_validator is None:
        from infrastructure.validators import is_valid_polygon
        polygon_validator = is_valid_polygon

    if not isinstance(raw, dict):
        return None, [FieldError(field="request", message="request should be a JSON object")]

    data = {k: v for k, v in raw.items() if k not in _PROTECTED_FIELDS}
    if overrides:
        data.update(overrides)

    errors: List[FieldError] = []
    record: Optional[PathwayVersion] = None

    try:
        record = PathwayVersion.model_validate(data)
    except PydanticValidationError as e:
        errors.extend(_to_field_error(err) for err in e.errors())

    # Polygon is optional; when it is a JSON object it must be one valid polygon
    polygon = data.get("polygon")
    if isinstance(polygon, dict) and not polygon_validator(polygon):
        errors.append(FieldError(field="polygon", message="polygon should be a valid single-polygon feature collection"))

    if errors:
        return None, errors
    return record, []


def format_field_errors(errors: List[FieldError]) -> str:
    return ", ".join(str(e) for e in errors)


__all__ = ['parse_and_validate', 'format_field_errors', 'PolygonValidator']
