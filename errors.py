from typing import Any, Dict, List, Optional


class StoreError(Exception):
    """Base class for errors raised by the domain store."""


class ValidationError(StoreError):
    """Bad field values on add/update. `errors` holds one dict per failing field."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    @classmethod
    def from_pydantic(cls, entity: str, exc) -> "ValidationError":
        # keep only the json-safe part of pydantic's error dicts
        errors = [
            {"loc": [str(p) for p in e.get("loc", ())], "msg": e.get("msg", ""), "type": e.get("type", "")}
            for e in exc.errors()
        ]
        return cls(f"invalid {entity}", errors)


class InvalidTransitionError(ValidationError):
    def __init__(self, current: str, requested: str):
        super().__init__(
            f"crop status cannot change from '{current}' to '{requested}'",
            [{"loc": ["status"], "msg": f"{current} -> {requested} not allowed", "type": "transition"}],
        )
        self.current = current
        self.requested = requested


class NotFoundError(StoreError):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id
