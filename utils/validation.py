# utils/validation.py
from __future__ import annotations
from typing import Any, Dict, List

from pydantic import ValidationError
from langsmith import traceable

from state import CheckoutPayload


class CheckoutError(ValueError):
    """Client sent something we can't turn into an order."""

    def __init__(self, message: str, errors: List[Dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


@traceable(name="CheckoutValidation", tags=["checkout", "validation"])
def validate_checkout(raw: Any) -> CheckoutPayload:
    """
    Coerce a decoded JSON body into a CheckoutPayload.
      - body must be a JSON object
      - `total` must be a real number >= 0 (no strings, no booleans)
    Raises CheckoutError; nothing is mutated here.
    """
    if not isinstance(raw, dict):
        raise CheckoutError(f"payload must be an object, got {type(raw).__name__}")
    try:
        return CheckoutPayload.model_validate(raw)
    except ValidationError as ve:
        # keep the details for server-side logs only
        errors = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in ve.errors()]
        raise CheckoutError("invalid checkout payload", errors) from ve
