"""
Seed Script - Loads sample students into the platform via the API.

Sends each sample record to the create endpoint. Records whose student_id
already exists are reported and skipped, so the script can be re-run.

Usage:
    python seed_data.py                              # Uses API_URL or default URL
    python seed_data.py http://localhost:8000         # Custom API URL
    python seed_data.py http://backend:8000           # Inside Docker network
"""

import os
import sys

from app.client.api_client import ApiError, StudentApiClient
from app.logging_config import setup_logging

SEED_STUDENTS = [
    {
        "name": "John Doe",
        "student_id": "ST001",
        "address": "123 Main St, City",
        "email": "john.doe@example.com",
        "phone": "123-456-7890",
    },
    {
        "name": "Jane Smith",
        "student_id": "ST002",
        "address": "456 Oak Ave, Town",
        "email": "jane.smith@example.com",
        "phone": "987-654-3210",
    },
    {
        "name": "Alice Johnson",
        "student_id": "ST003",
        "address": "789 Pine Rd, Village",
        "email": "alice.johnson@example.com",
        "phone": "555-555-5555",
    },
]


def seed(client: StudentApiClient, students=SEED_STUDENTS) -> dict:
    """Create each student; returns counts of created, skipped and failed records."""
    summary = {"created": 0, "skipped": 0, "failed": 0}
    for data in students:
        try:
            created = client.create(data)
        except ApiError as e:
            if e.status_code == 409:
                summary["skipped"] += 1
                print(f"  ⏭  {data['student_id']}: already exists")
            else:
                summary["failed"] += 1
                print(f"  ❌ {data['student_id']}: {e.message}")
            continue
        summary["created"] += 1
        print(f"  ✅ {created.student_id}: created with id {created.id}")
    return summary


def main():
    setup_logging()
    api_url = sys.argv[1] if len(sys.argv) > 1 else os.getenv("API_URL", "http://localhost:8000")

    print(f"Seeding {len(SEED_STUDENTS)} students into {api_url}")
    client = StudentApiClient.from_url(api_url)
    try:
        summary = seed(client)
    finally:
        client.close()

    print("=" * 60)
    print(f"  Created: {summary['created']}  Skipped: {summary['skipped']}  Failed: {summary['failed']}")
    print("=" * 60)

    if summary["failed"]:
        sys.exit(1)


if __name__ == "__main__":
    main()
