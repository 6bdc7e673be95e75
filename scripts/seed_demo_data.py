"""
Seed the local database with demo employees, teams, plates and jobs.

Usage:
  python scripts/seed_demo_data.py

This script is idempotent: documents are written under fixed ids, so running
it again overwrites nothing that already exists.
"""

import os
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from fieldops.config import settings
from fieldops.db import SessionLocal, Base, engine
from fieldops.models import models  # noqa: F401
from fieldops.services.fleet import PLATES
from fieldops.services.jobs import JOBS
from fieldops.services.people import EMPLOYEES, TEAMS
from fieldops.services.time_rules import local_date_string
from fieldops.storage.sql_provider import SqlDocumentStore


def ensure_document(store: SqlDocumentStore, collection: str, doc_id: str, data: dict) -> bool:
    if store.get(collection, doc_id) is not None:
        return False
    store.add(collection, data, doc_id=doc_id)
    return True


def main():
    if settings.database_url.startswith("sqlite:///./"):
        os.makedirs("var", exist_ok=True)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    store = SqlDocumentStore(session)
    now = datetime.now(timezone.utc)
    today = local_date_string(now, settings.tz_default)
    tomorrow = local_date_string(now + timedelta(days=1), settings.tz_default)

    created = 0
    try:
        employees = [
            ("emp-alice", "Alice Moreau", "installer"),
            ("emp-bruno", "Bruno Silva", "installer"),
            ("emp-chen", "Chen Wei", "driver"),
            ("emp-admin", "Dana Admin", "admin"),
        ]
        for eid, name, role in employees:
            created += ensure_document(store, EMPLOYEES, eid, {
                "name": name,
                "role": role,
                "status": "active",
                "createdAt": now,
            })

        created += ensure_document(store, TEAMS, "team-north", {
            "name": "North Crew",
            "leaderId": "emp-bruno",
            "leaderName": "Bruno Silva",
            "members": [
                {"employeeId": "emp-bruno", "employeeName": "Bruno Silva", "employeeRole": "lead"},
                {"employeeId": "emp-chen", "employeeName": "Chen Wei"},
            ],
            "createdAt": now,
            "updatedAt": now,
        })

        for plate_id, plate_num in [("plate-1", "QS-101"), ("plate-2", "QS-102"), ("plate-3", "QS-103")]:
            created += ensure_document(store, PLATES, plate_id, {
                "plateNum": plate_num,
                "available": True,
                "createdAt": now,
            })

        created += ensure_document(store, JOBS, "job-1001", {
            "jobNumber": "1001",
            "customerName": "R. Patel",
            "clientAddress": "12 Main St",
            "phoneNumber": "555-0100",
            "storeCompany": "Best Buy",
            "installType": "TV Install",
            "items": ["65in TV", "Wall mount"],
            "status": "scheduled",
            "timeFrame": "08:00 - 12:00",
            "assignments": [
                {"type": "team-member", "employeeId": "emp-alice", "employeeName": "Alice Moreau", "date": today},
            ],
            "createdAt": now,
        })
        created += ensure_document(store, JOBS, "job-1002", {
            "jobNumber": "1002",
            "customerName": "J. Okafor",
            "address": "48 Harbour Rd",
            "pickUpAddress": "Costco Warehouse 3",
            "installType": "Appliance Install",
            "items": "Washer, Dryer",
            "requests": {"status": "Picking Up", "timeFrame": "12:00 - 16:00"},
            "assignments": [
                {
                    "type": "team",
                    "teamId": "team-north",
                    "teamName": "North Crew",
                    "teamMembers": ["Bruno Silva", "Chen Wei"],
                    "date": today,
                },
            ],
            "createdAt": now,
        })
        created += ensure_document(store, JOBS, "job-1003", {
            "jobNumber": "1003",
            "customerName": "M. Rossi",
            "installDate": tomorrow,
            "status": "scheduled",
            "assignments": [
                {"type": "team-member", "employeeId": "emp-alice", "employeeName": "Alice Moreau", "date": tomorrow},
            ],
            "requests": {
                "reschedule": {
                    "requestedBy": "Alice Moreau",
                    "requestedDate": now,
                    "reason": "Customer unavailable",
                },
            },
            "createdAt": now,
        })
        print(f"Seeded {created} new document(s)")
    finally:
        session.close()


if __name__ == "__main__":
    main()
