#!/usr/bin/env python3
"""
Populate the work orders JSON file with sample data.

Usage:
  python scripts/seed_work_orders.py [--file api/data/work_orders.json] [--force]
"""
from __future__ import annotations

import argparse
import sys
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path

from api.domain.work_orders import validate_fields
from api.repositories.json_storage import JsonWorkOrderRepository, format_timestamp

SAMPLES = [
    (
        "HVAC System Maintenance - Building A",
        "Perform routine maintenance on the central air conditioning unit in Building A. "
        "Check filters, inspect refrigerant levels, and test thermostat functionality.",
        "High",
        "Open",
        2,
    ),
    (
        "Electrical Panel Inspection - Warehouse",
        "Complete quarterly inspection of the main electrical panel in the warehouse. "
        "Verify all connections are secure and check for signs of overheating or corrosion.",
        "Medium",
        "In Progress",
        5,
    ),
    (
        "Plumbing Leak Repair - Restroom 3rd Floor",
        "Fix leaking faucet in the restroom on the 3rd floor. Replace the worn-out washer "
        "and confirm water pressure after the repair.",
        "Low",
        "Done",
        24,
    ),
    (
        "Elevator Safety Inspection",
        "Conduct the monthly safety inspection for Elevator #2. Test the emergency stop, "
        "verify door sensors, and check cable tension.",
        "High",
        "Open",
        1,
    ),
    (
        "Fire Alarm System Testing",
        "Test the fire alarm system across all floors, including smoke detectors, heat sensors "
        "and emergency notification systems.",
        "High",
        "In Progress",
        3,
    ),
    (
        "Generator Fuel Filter Replacement",
        "Replace the fuel filter on the backup generator and test startup and power output afterwards.",
        "Medium",
        "Open",
        8,
    ),
    (
        "Parking Lot Lighting Repair",
        "Replace burned-out LED fixtures in the north parking lot. Make sure fixtures are secured "
        "and wired according to code.",
        "Low",
        "Done",
        48,
    ),
    (
        "Roof Drain Cleaning",
        "Clear debris from all roof drains before the rainy season and check for standing water.",
        "Medium",
        "Open",
        12,
    ),
    (
        "Loading Dock Door Adjustment",
        "Adjust the spring tension on loading dock door 4, which no longer stays open on its own.",
        "Low",
        "In Progress",
        30,
    ),
    (
        "Water Heater Flush",
        "Flush sediment from the basement water heater and inspect the anode rod for corrosion.",
        "Medium",
        "Done",
        72,
    ),
]


def build_records(now: datetime) -> list[dict]:
    records = []
    for title, description, priority, status, hours_ago in SAMPLES:
        fields, errors = validate_fields(
            {"title": title, "description": description, "priority": priority, "status": status}
        )
        if errors:
            raise ValueError(f"Sample '{title}' is invalid: {errors}")
        fields["id"] = str(uuid.uuid4())
        fields["updatedAt"] = format_timestamp(now - timedelta(hours=hours_ago))
        records.append(fields)
    return records


def main() -> None:
    ap = argparse.ArgumentParser(description="Seed the work orders JSON file")
    ap.add_argument("--file", help="Path to the JSON file (default: WORK_ORDERS_FILE or api/data/work_orders.json)")
    ap.add_argument("--force", action="store_true", help="Overwrite existing work orders")
    args = ap.parse_args()

    repo = JsonWorkOrderRepository(Path(args.file) if args.file else None)
    existing = repo.load_all()
    if existing and not args.force:
        raise SystemExit(f"{repo.path} already holds {len(existing)} work order(s); use --force to overwrite")

    records = build_records(datetime.now(timezone.utc))
    repo.save_all(records)
    print(f"OK: {len(records)} work orders written to {repo.path}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
