"""
Work order use cases: validate input, then delegate to the JSON repository.

Not-found is reported as None/False, never as an exception, so routers can
map it to 404 without guessing. Unexpected repository failures are wrapped in
StorageFailureError with the operation name and the original cause attached.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional
import logging

from api.domain.work_orders import (
    FILTER_ALL,
    STATUSES,
    WorkOrder,
    filter_work_orders,
    is_valid_id,
    validate_fields,
)
from api.repositories.json_storage import JsonWorkOrderRepository

logger = logging.getLogger(__name__)


class WorkOrderError(Exception):
    """Base class for work order errors."""

    code = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidIdentifierError(WorkOrderError):
    code = "invalid_id"

    def __init__(self, value: Any):
        super().__init__("Invalid work order ID: must be a valid UUID")
        self.value = value


class ValidationFailedError(WorkOrderError):
    code = "validation_failed"

    def __init__(self, errors: list[tuple[str, str]]):
        detail = ", ".join(f"{field}: {message}" for field, message in errors)
        super().__init__(f"Validation failed: {detail}")
        self.errors = errors

    @property
    def fields(self) -> list[str]:
        return [field for field, _ in self.errors]


class StorageFailureError(WorkOrderError):
    code = "storage_failure"
    status_code = 500

    def __init__(self, operation: str, cause: BaseException):
        super().__init__(f"Failed to {operation}: {cause}")
        self.operation = operation
        self.cause = cause


_STORAGE_ERRORS = (OSError, ValueError, TypeError, KeyError)


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except _STORAGE_ERRORS as exc:
        raise StorageFailureError(operation, exc) from exc


class WorkOrderService:
    """The five-operation contract consumed by the HTTP boundary, plus search."""

    def __init__(self, repository: JsonWorkOrderRepository | None = None) -> None:
        self.repository = repository or JsonWorkOrderRepository()

    def _check_id(self, record_id: Any) -> str:
        if not is_valid_id(record_id):
            raise InvalidIdentifierError(record_id)
        return record_id

    def _find(self, record_id: str) -> Optional[WorkOrder]:
        record = self.repository.find_by_id(record_id)
        return WorkOrder.from_dict(record) if record is not None else None

    def list(self) -> list[WorkOrder]:
        with _storage_errors("list work orders"):
            return [WorkOrder.from_dict(item) for item in self.repository.load_all()]

    def search(self, query: str | None = None, status: str | None = None) -> list[WorkOrder]:
        wanted = (status or "").strip()
        if wanted and wanted != FILTER_ALL and wanted not in STATUSES:
            raise ValidationFailedError([("status", f"must be one of: {FILTER_ALL}, {', '.join(STATUSES)}")])
        return filter_work_orders(self.list(), query=query, status=wanted)

    def get(self, record_id: Any) -> Optional[WorkOrder]:
        record_id = self._check_id(record_id)
        with _storage_errors("get work order"):
            return self._find(record_id)

    def create(self, fields: Mapping[str, Any]) -> WorkOrder:
        cleaned, errors = validate_fields(fields)
        if errors:
            raise ValidationFailedError(errors)
        with _storage_errors("create work order"):
            order = WorkOrder.from_dict(self.repository.insert(cleaned))
        logger.debug("Created work order %s", order.id)
        return order

    def update(self, record_id: Any, fields: Mapping[str, Any]) -> Optional[WorkOrder]:
        record_id = self._check_id(record_id)
        cleaned, errors = validate_fields(fields, partial=True)
        if errors:
            raise ValidationFailedError(errors)
        with _storage_errors("update work order"):
            if self._find(record_id) is None:
                return None
            record = self.repository.replace(record_id, cleaned)
            order = WorkOrder.from_dict(record) if record is not None else None
        if order is not None:
            logger.debug("Updated work order %s (%s)", record_id, ", ".join(sorted(cleaned)))
        return order

    def remove(self, record_id: Any) -> bool:
        record_id = self._check_id(record_id)
        with _storage_errors("delete work order"):
            if self._find(record_id) is None:
                return False
            deleted = self.repository.delete_by_id(record_id)
        if deleted:
            logger.debug("Deleted work order %s", record_id)
        return deleted
