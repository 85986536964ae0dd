#!/usr/bin/env python3
"""
Booking lifecycle flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Usage:
    python scripts/flow_book_and_confirm.py --days-ahead 30
    python scripts/flow_book_and_confirm.py --days-ahead 10 --cancel

Flow:
    1. Request a booking (as client)
    2. Show the confirmation countdown
    3. Confirm the booking (as DJ)
    4. Show the cancellation countdown
    5. Cancel the booking (as client, optional)
    6. List the client's notifications
"""

import argparse
import json
import sys
import uuid
from datetime import UTC, datetime, timedelta

import httpx

BASE_URL = "http://localhost:8000"


def api_request(actor_id: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make an API request on behalf of an actor."""
    headers = {"X-Actor-Id": actor_id}
    url = f"{BASE_URL}{endpoint}"

    if method == "GET":
        response = httpx.get(url, headers=headers, timeout=10.0, follow_redirects=True)
    elif method == "POST":
        response = httpx.post(url, headers=headers, json=data or {}, timeout=10.0, follow_redirects=True)
    else:
        raise ValueError(f"Unknown method: {method}")

    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    if fields:
        filtered = {k: result["data"].get(k) for k in fields if k in result["data"]}
        print(json.dumps(filtered, indent=2))
    else:
        print(json.dumps(result["data"], indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Request, confirm and optionally cancel a booking")
    parser.add_argument("--client-id", default=str(uuid.uuid4()), help="Client (requester) UUID")
    parser.add_argument("--dj-id", default=str(uuid.uuid4()), help="DJ (provider) UUID")
    parser.add_argument("--days-ahead", type=int, default=30, help="Days until the event starts")
    parser.add_argument("--cancel", action="store_true", help="Cancel after confirming")
    args = parser.parse_args()

    event_start = datetime.now(UTC) + timedelta(days=args.days_ahead)

    # Step 1: Request booking
    print_step(1, "Request booking (as client)")
    booking_result = api_request(args.client_id, "POST", "/api/v1/bookings/", {
        "provider_id": args.dj_id,
        "event_start": event_start.isoformat(),
        "event_end": (event_start + timedelta(hours=6)).isoformat(),
        "location": "Community hall",
        "address": "Main Street 1",
        "city": "Krakow",
        "postal_code": "30-001",
        "party_type": "Birthday",
        "guests": "50-100",
        "age_range": "18-30",
        "music_genres": ["house", "pop"],
    })
    if not print_result(booking_result, ["id", "status", "event_start"]):
        sys.exit(1)
    booking_id = booking_result["data"]["id"]

    # Step 2: Confirmation countdown
    print_step(2, "Confirmation countdown")
    print_result(api_request(args.client_id, "GET", f"/api/v1/bookings/{booking_id}/countdown"))

    # Step 3: Confirm
    print_step(3, "Confirm booking (as DJ)")
    confirm_result = api_request(args.dj_id, "POST", f"/api/v1/bookings/{booking_id}/status", {
        "status": "confirmed",
    })
    if not print_result(confirm_result, ["id", "status", "version"]):
        sys.exit(1)

    # Step 4: Cancellation countdown
    print_step(4, "Cancellation countdown")
    print_result(api_request(args.client_id, "GET", f"/api/v1/bookings/{booking_id}/countdown"))

    # Step 5: Cancel
    if args.cancel:
        print_step(5, "Cancel booking (as client)")
        cancel_result = api_request(args.client_id, "POST", f"/api/v1/bookings/{booking_id}/status", {
            "status": "cancelled",
            "reason": "Plans changed",
        })
        print_result(cancel_result, ["id", "status", "cancellation_reason", "code", "detail"])

    # Step 6: Notifications
    print_step(6, "Client notifications")
    print_result(api_request(args.client_id, "GET", "/api/v1/notifications/"))

    print(f"\nBooking {booking_id} flow finished")


if __name__ == "__main__":
    main()
