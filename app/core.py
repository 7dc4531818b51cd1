# app/core.py
from typing import Any, Dict, List, Set, Tuple, Type

from pydantic import BaseModel, ValidationError

# Payload validation shared by every resource handler.

def _wire_fields(schema: Type[BaseModel]) -> Set[str]:
    return {f.alias or name for name, f in schema.model_fields.items()}

def _describe(err: Dict[str, Any]) -> str:
    field = ".".join(str(p) for p in err.get("loc", ())) or "payload"
    kind = err.get("type", "")
    if kind == "missing":
        return f"{field} is required"
    if kind == "greater_than":
        return f"{field} must be greater than {err['ctx']['gt']:g}"
    if kind == "string_too_short":
        return f"{field} must not be empty"
    if kind.startswith("string"):
        return f"{field} must be a string"
    if kind == "finite_number" or kind.startswith(("float", "int")):
        return f"{field} must be a number"
    if kind.startswith("bool"):
        return f"{field} must be a boolean"
    return f"{field}: {err.get('msg', 'invalid value')}"

def validate_payload(
    schema: Type[BaseModel], payload: Any, partial: bool = False
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Check ``payload`` against ``schema``.

    Returns ``(document, violations)``. ``document`` holds the cleaned values
    keyed by wire name (defaults applied) and is empty when there are
    violations. With ``partial=True`` only the supplied fields are checked and
    returned; unknown fields are always dropped.
    """
    if not isinstance(payload, dict):
        return {}, ["request body must be a JSON object"]

    violations: List[str] = []
    if partial:
        known = _wire_fields(schema)
        violations.extend(
            f"{key} must not be null" for key, value in payload.items()
            if value is None and key in known
        )

    try:
        model = schema.model_validate(payload)
    except ValidationError as e:
        violations.extend(_describe(err) for err in e.errors())
        return {}, violations

    if violations:
        return {}, violations
    return model.model_dump(by_alias=True, exclude_unset=partial), []
