"""Parsing of raw store rows into typed records and closed-tag handling."""

from __future__ import annotations

from typing import Any, Iterable, TypeVar

from pydantic import BaseModel, ValidationError

from stockdesk.domain.enums import MovementType, UserRole
from stockdesk.services.exceptions import DomainValidationError, InvalidTagError

M = TypeVar("M", bound=BaseModel)


def parse_movement_type(value: Any) -> MovementType:
    if isinstance(value, MovementType):
        return value
    try:
        return MovementType(value)
    except ValueError as exc:
        raise InvalidTagError("movement type", value, [m.value for m in MovementType]) from exc


def parse_user_role(value: Any) -> UserRole:
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(value)
    except ValueError as exc:
        raise InvalidTagError("user role", value, [r.value for r in UserRole]) from exc


_TAG_PARSERS = {
    MovementType: parse_movement_type,
    UserRole: parse_user_role,
}


def parse_record(model: type[M], row: Any) -> M:
    """Validate a single row, turning pydantic errors into domain errors."""
    if isinstance(row, model):
        return row
    if isinstance(row, dict):
        for name, field in model.model_fields.items():
            parser = _TAG_PARSERS.get(field.annotation)
            if parser is not None and row.get(name) is not None:
                parser(row[name])
    try:
        return model.model_validate(row)
    except ValidationError as exc:
        raise DomainValidationError(f"Invalid {model.__name__} record: {exc.errors()[0]['msg']}") from exc


def parse_records(model: type[M], rows: Iterable[Any] | None) -> list[M]:
    return [parse_record(model, row) for row in rows or []]


def stock_delta(movement_type: MovementType, quantity: int) -> int:
    """Signed change a movement applies to a product's stock."""
    if movement_type is MovementType.IN:
        return quantity
    if movement_type is MovementType.OUT:
        return -quantity
    raise InvalidTagError("movement type", movement_type, [m.value for m in MovementType])


def reverse_type(movement_type: MovementType) -> MovementType:
    if movement_type is MovementType.IN:
        return MovementType.OUT
    if movement_type is MovementType.OUT:
        return MovementType.IN
    raise InvalidTagError("movement type", movement_type, [m.value for m in MovementType])
