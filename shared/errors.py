"""
Failure taxonomy for order intake.

Every failure is an ``OrderError`` subclass carrying its HTTP status and a
machine readable ``code``. A single exception handler in ``main.py`` turns
them into JSON responses, so a failed order can never be mistaken for a
successful one by inspecting the payload shape.
"""
from typing import Any


class OrderError(Exception):
    status_code = 400
    code = "order_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def extra(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.extra()}


class OrderValidationError(OrderError):
    """Malformed input. Raised before the store is touched."""

    code = "validation_error"

    def __init__(self, violations: list[dict[str, str]]):
        # violations: [{"loc": "products[1].amount", "msg": "..."}], in field order
        self.violations = violations
        first = violations[0] if violations else {"loc": "body", "msg": "Invalid request"}
        super().__init__(f"{first['loc']}: {first['msg']}")

    def extra(self) -> dict[str, Any]:
        return {"errors": self.violations}


class UnknownReferenceError(OrderError):
    """The order points at a user or product that does not exist (or is inactive)."""

    code = "unknown_reference"

    def __init__(self, entity: str, key: Any = None):
        self.entity = entity
        self.key = key
        label = entity.capitalize()
        message = f"{label} does not exist" if key is None else f"{label} {key} does not exist"
        super().__init__(message)

    def extra(self) -> dict[str, Any]:
        return {"entity": self.entity, "key": self.key}


class InsufficientStockError(OrderError):
    code = "insufficient_stock"

    def __init__(self, product_id: int, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Not enough stock for product {product_id}: "
            f"available {available}, requested {requested}"
        )

    def extra(self) -> dict[str, Any]:
        return {
            "productId": self.product_id,
            "available": self.available,
            "requested": self.requested,
        }


class ConflictError(OrderError):
    """The store kept rejecting the unit of work because of concurrent writers."""

    status_code = 409
    code = "conflict"


class StoreError(OrderError):
    status_code = 500
    code = "store_error"

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)


def format_loc(loc: tuple) -> str:
    """('body', 'products', 1, 'amount') -> 'products[1].amount'"""
    parts = list(loc[1:] if loc and loc[0] == "body" else loc)
    text = ""
    for part in parts:
        if isinstance(part, int):
            text += f"[{part}]"
        else:
            text += f".{part}" if text else str(part)
    return text or "body"


def violations_from_errors(errors: list[dict]) -> list[dict[str, str]]:
    """Flatten pydantic/FastAPI error dicts into ``{"loc", "msg"}`` pairs, order preserved."""
    return [{"loc": format_loc(tuple(err.get("loc", ()))), "msg": err.get("msg", "")} for err in errors]
