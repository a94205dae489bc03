from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from api.services.work_order_service import (
    ValidationFailedError,
    WorkOrderError,
    WorkOrderService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/work-orders", tags=["work-orders"])

NO_STORE = {"Cache-Control": "no-store"}


def _get_service(request: Request) -> WorkOrderService:
    svc = getattr(getattr(request.app, "state", None), "work_order_service", None)
    if not svc:
        raise RuntimeError("WorkOrderService not configured")
    return svc


def _ok_response(payload: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(payload, status_code=status_code, headers=NO_STORE)


def _error_response(err: WorkOrderError) -> JSONResponse:
    body = {"error": err.code, "message": err.message}
    if isinstance(err, ValidationFailedError):
        body["details"] = [{"field": field, "message": message} for field, message in err.errors]
    if err.status_code >= 500:
        logger.exception("Work order storage failure: %s", err.message)
    return JSONResponse(body, status_code=err.status_code)


def _not_found(record_id: str) -> JSONResponse:
    return JSONResponse(
        {"error": "not_found", "message": f"Work order with ID {record_id} does not exist"},
        status_code=404,
    )


@router.get("")
def list_work_orders(request: Request, q: Optional[str] = None, status: Optional[str] = None):
    svc = _get_service(request)
    try:
        if q or status:
            orders = svc.search(q, status)
        else:
            orders = svc.list()
    except WorkOrderError as exc:
        return _error_response(exc)
    return _ok_response({"data": [order.to_dict() for order in orders]})


@router.post("")
def create_work_order(request: Request, payload: dict = Body(...)):
    svc = _get_service(request)
    try:
        order = svc.create(payload)
    except WorkOrderError as exc:
        return _error_response(exc)
    return _ok_response({"data": order.to_dict()}, status_code=201)


@router.get("/{record_id}")
def get_work_order(record_id: str, request: Request):
    svc = _get_service(request)
    try:
        order = svc.get(record_id)
    except WorkOrderError as exc:
        return _error_response(exc)
    if order is None:
        return _not_found(record_id)
    return _ok_response({"data": order.to_dict()})


@router.put("/{record_id}")
def update_work_order(record_id: str, request: Request, payload: dict = Body(...)):
    svc = _get_service(request)
    try:
        order = svc.update(record_id, payload)
    except WorkOrderError as exc:
        return _error_response(exc)
    if order is None:
        return _not_found(record_id)
    return _ok_response({"data": order.to_dict()})


@router.delete("/{record_id}")
def delete_work_order(record_id: str, request: Request):
    svc = _get_service(request)
    try:
        deleted = svc.remove(record_id)
    except WorkOrderError as exc:
        return _error_response(exc)
    if not deleted:
        return _not_found(record_id)
    return _ok_response({"message": "Work order deleted successfully"})
