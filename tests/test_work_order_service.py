from __future__ import annotations

import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Make the api package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api.domain.work_orders import WorkOrder  # noqa: E402
from api.repositories.json_storage import JsonWorkOrderRepository, parse_timestamp  # noqa: E402
from api.services.work_order_service import (  # noqa: E402
    InvalidIdentifierError,
    StorageFailureError,
    ValidationFailedError,
    WorkOrderService,
)

MISSING_ID = "6253242b-78ee-4dbf-8461-a600fece75ca"

VALID = {
    "title": "Fix HVAC",
    "description": "Repair the air conditioning unit thoroughly",
    "priority": "High",
    "status": "Open",
}


@pytest.fixture()
def data_file(tmp_path):
    return tmp_path / "work_orders.json"


@pytest.fixture()
def svc(data_file):
    return WorkOrderService(JsonWorkOrderRepository(data_file))


# -------------------------- list / get --------------------------
def test_list_on_missing_store_returns_empty_and_heals(svc, data_file):
    assert svc.list() == []
    assert json.loads(data_file.read_text(encoding="utf-8")) == []


def test_list_returns_records_in_insertion_order(svc):
    a = svc.create(dict(VALID, title="Alpha"))
    b = svc.create(dict(VALID, title="Beta"))
    assert [o.id for o in svc.list()] == [a.id, b.id]


def test_get_after_create_returns_equal_record(svc):
    created = svc.create(VALID)
    assert svc.get(created.id) == created


def test_get_unknown_id_returns_none(svc):
    assert svc.get(MISSING_ID) is None


@pytest.mark.parametrize("bad_id", ["", "123", "not-a-uuid", None, 42, MISSING_ID + "0"])
def test_get_rejects_malformed_ids(svc, bad_id):
    with pytest.raises(InvalidIdentifierError):
        svc.get(bad_id)


# -------------------------- create --------------------------
def test_create_generates_id_and_timestamp(svc):
    start = datetime.now(timezone.utc).replace(microsecond=0)
    order = svc.create(VALID)

    assert isinstance(order, WorkOrder)
    assert order.id
    assert parse_timestamp(order.updated_at) >= start
    assert (order.title, order.description, order.priority, order.status) == (
        VALID["title"],
        VALID["description"],
        VALID["priority"],
        VALID["status"],
    )


def test_create_ids_are_unique(svc):
    ids = {svc.create(VALID).id for _ in range(5)}
    assert len(ids) == 5


def test_create_trims_text_fields(svc):
    order = svc.create(dict(VALID, title="  Fix HVAC  ", description="  Repair the air conditioning unit  "))
    assert order.title == "Fix HVAC"
    assert order.description == "Repair the air conditioning unit"


def test_create_ignores_caller_id_and_timestamp(svc):
    order = svc.create(dict(VALID, id=MISSING_ID, updatedAt="1999-01-01T00:00:00.000Z"))
    assert order.id != MISSING_ID
    assert order.updated_at != "1999-01-01T00:00:00.000Z"


@pytest.mark.parametrize("title", ["ab", "x" * 80])
def test_create_accepts_title_boundaries(svc, title):
    assert svc.create(dict(VALID, title=title)).title == title


@pytest.mark.parametrize("title", ["a", "x" * 81])
def test_create_rejects_title_out_of_bounds(svc, title):
    with pytest.raises(ValidationFailedError) as info:
        svc.create(dict(VALID, title=title))
    assert info.value.fields == ["title"]


@pytest.mark.parametrize("description", ["d" * 10, "d" * 500])
def test_create_accepts_description_boundaries(svc, description):
    assert svc.create(dict(VALID, description=description)).description == description


@pytest.mark.parametrize("description", ["d" * 9, "d" * 501])
def test_create_rejects_description_out_of_bounds(svc, description):
    with pytest.raises(ValidationFailedError) as info:
        svc.create(dict(VALID, description=description))
    assert info.value.fields == ["description"]


@pytest.mark.parametrize("field,value", [("priority", "Urgent"), ("priority", "high"), ("status", "Closed"), ("status", None)])
def test_create_rejects_enum_values(svc, field, value):
    with pytest.raises(ValidationFailedError) as info:
        svc.create(dict(VALID, **{field: value}))
    assert info.value.fields == [field]


def test_create_reports_every_violated_field(svc, data_file):
    with pytest.raises(ValidationFailedError) as info:
        svc.create({"title": "a", "priority": "Urgent"})
    assert info.value.fields == ["title", "description", "priority", "status"]
    assert info.value.message.startswith("Validation failed: title:")
    # validation happens before any store access
    assert not data_file.exists()


# -------------------------- update --------------------------
def test_update_changes_only_given_field(svc):
    created = svc.create(VALID)
    updated = svc.update(created.id, {"status": "Done"})

    assert updated.status == "Done"
    assert (updated.id, updated.title, updated.description, updated.priority) == (
        created.id,
        created.title,
        created.description,
        created.priority,
    )
    assert parse_timestamp(updated.updated_at) > parse_timestamp(created.updated_at)
    assert svc.get(created.id) == updated


def test_update_never_changes_id_or_trusts_timestamp(svc):
    created = svc.create(VALID)
    updated = svc.update(created.id, {"id": MISSING_ID, "updatedAt": "1999-01-01T00:00:00.000Z", "priority": "Low"})
    assert updated.id == created.id
    assert updated.priority == "Low"
    assert updated.updated_at != "1999-01-01T00:00:00.000Z"
    assert svc.get(MISSING_ID) is None


def test_update_none_values_are_left_untouched(svc):
    created = svc.create(VALID)
    updated = svc.update(created.id, {"title": None, "status": "In Progress"})
    assert updated.title == created.title
    assert updated.status == "In Progress"


def test_update_unknown_id_returns_none_without_writing(svc, data_file):
    svc.create(VALID)
    before = data_file.read_bytes()
    mtime = data_file.stat().st_mtime_ns

    assert svc.update(MISSING_ID, {"status": "Done"}) is None
    assert data_file.read_bytes() == before
    assert data_file.stat().st_mtime_ns == mtime


@pytest.mark.parametrize("payload", [{}, {"id": MISSING_ID}, {"updatedAt": "2024-01-01T00:00:00.000Z"}, {"title": None}])
def test_update_requires_at_least_one_field(svc, payload):
    created = svc.create(VALID)
    with pytest.raises(ValidationFailedError) as info:
        svc.update(created.id, payload)
    assert info.value.fields == ["fields"]


def test_update_rejects_unknown_fields(svc):
    created = svc.create(VALID)
    with pytest.raises(ValidationFailedError) as info:
        svc.update(created.id, {"status": "Done", "assignee": "bob"})
    assert info.value.fields == ["assignee"]
    assert svc.get(created.id).status == "Open"


def test_update_validates_provided_fields(svc):
    created = svc.create(VALID)
    with pytest.raises(ValidationFailedError) as info:
        svc.update(created.id, {"title": "x" * 81, "status": "Closed"})
    assert info.value.fields == ["title", "status"]


def test_update_validates_id_before_payload(svc):
    with pytest.raises(InvalidIdentifierError):
        svc.update("nope", {})


# -------------------------- remove --------------------------
def test_remove_existing_then_missing(svc):
    created = svc.create(VALID)
    assert svc.remove(created.id) is True
    assert svc.get(created.id) is None
    assert svc.remove(created.id) is False


def test_remove_unknown_id_does_not_write(svc, data_file):
    svc.create(VALID)
    mtime = data_file.stat().st_mtime_ns
    assert svc.remove(MISSING_ID) is False
    assert data_file.stat().st_mtime_ns == mtime


def test_remove_rejects_malformed_id(svc):
    with pytest.raises(InvalidIdentifierError):
        svc.remove("123")


# -------------------------- search --------------------------
def test_search_filters_by_title_and_status(svc):
    svc.create(dict(VALID, title="HVAC filter swap", status="Open"))
    svc.create(dict(VALID, title="Elevator inspection", status="Done"))
    svc.create(dict(VALID, title="hvac duct cleaning", status="Done"))

    assert [o.title for o in svc.search("hvac")] == ["HVAC filter swap", "hvac duct cleaning"]
    assert [o.title for o in svc.search("hvac", "Done")] == ["hvac duct cleaning"]
    assert len(svc.search(None, "All")) == 3


def test_search_rejects_unknown_status(svc):
    with pytest.raises(ValidationFailedError) as info:
        svc.search(status="Closed")
    assert info.value.fields == ["status"]


# -------------------------- storage failures --------------------------
def test_malformed_entry_is_a_storage_failure(svc, data_file):
    data_file.write_text(json.dumps([{"id": MISSING_ID, "title": "only a title"}]), encoding="utf-8")
    with pytest.raises(StorageFailureError) as info:
        svc.list()
    assert info.value.operation == "list work orders"
    assert isinstance(info.value.cause, KeyError)
    assert info.value.__cause__ is info.value.cause


def test_io_error_is_wrapped_with_operation(tmp_path):
    path = tmp_path / "work_orders.json"
    path.mkdir()
    svc = WorkOrderService(JsonWorkOrderRepository(path))
    with pytest.raises(StorageFailureError) as info:
        svc.create(VALID)
    assert info.value.operation == "create work order"
    assert isinstance(info.value.cause, OSError)
    assert info.value.message.startswith("Failed to create work order:")


def test_end_to_end_scenario(svc):
    created = svc.create(
        {
            "title": "Fix HVAC",
            "description": "Repair the air conditioning unit thoroughly",
            "priority": "High",
            "status": "Open",
        }
    )
    assert created.id and created.updated_at

    updated = svc.update(created.id, {"status": "Done"})
    assert updated.status == "Done"
    assert (updated.title, updated.description, updated.priority) == (
        created.title,
        created.description,
        created.priority,
    )
    assert parse_timestamp(updated.updated_at) > parse_timestamp(created.updated_at)

    assert svc.remove(created.id) is True
    assert svc.get(created.id) is None


def _store_raw(data_file, **overrides):
    record = {"id": MISSING_ID, **VALID, "updatedAt": "2024-01-15T10:30:00.000Z", **overrides}
    data_file.write_text(json.dumps([record]), encoding="utf-8")


def test_wrong_typed_timestamp_fails_update_as_storage_failure(svc, data_file):
    _store_raw(data_file, updatedAt=5)
    with pytest.raises(StorageFailureError) as info:
        svc.update(MISSING_ID, {"status": "Done"})
    assert info.value.operation == "update work order"
    assert isinstance(info.value.cause, TypeError)


def test_wrong_typed_title_fails_search_as_storage_failure(svc, data_file):
    _store_raw(data_file, title=5)
    with pytest.raises(StorageFailureError) as info:
        svc.search("x")
    assert info.value.operation == "list work orders"
    assert isinstance(info.value.cause, TypeError)


def test_existence_check_failures_carry_the_calling_operation(svc, data_file):
    _store_raw(data_file, description=None)
    with pytest.raises(StorageFailureError) as info:
        svc.remove(MISSING_ID)
    assert info.value.operation == "delete work order"
    with pytest.raises(StorageFailureError) as info:
        svc.update(MISSING_ID, {"priority": "Low"})
    assert info.value.operation == "update work order"
