#!/usr/bin/env python3
# ================================
# SIMPLE API TEST RUNNER
# ================================

import requests
import time
import sys
from datetime import datetime, timedelta, timezone

from tests.config import TEST_CONFIG, get_auth_headers

BASE_URL = TEST_CONFIG["base_url"]
TIMEOUT = TEST_CONFIG["timeout"]

def test_server_running():
    """Test if server is running."""
    try:
        response = requests.get(f"{BASE_URL}/health", timeout=5)
        assert response.status_code == 200
        print("✅ Server is running")
        return True
    except (requests.exceptions.RequestException, AssertionError):
        print("❌ Server is not running. Start with: uvicorn app.main:app --reload")
        return False

def test_properties_list(headers):
    """Test properties list endpoint."""
    start_time = time.time()
    response = requests.get(f"{BASE_URL}/api/v1/properties", headers=headers, timeout=TIMEOUT)
    end_time = time.time()

    if response.status_code == 200:
        data = response.json()
        print(f"✅ Properties list: {len(data)} properties in {end_time-start_time:.3f}s")
        return data
    else:
        print(f"❌ Properties list failed: {response.status_code}")
        return None

def test_create_property(admin_headers):
    """Create a two-unit property for the lifecycle run."""
    response = requests.post(
        f"{BASE_URL}/api/v1/properties",
        headers=admin_headers,
        json={"name": f"Smoke Test Loft {int(time.time())}", "units_total": 2},
        timeout=TIMEOUT
    )

    if response.status_code == 201:
        print(f"✅ Property created: {response.json()['id']}")
        return response.json()
    else:
        print(f"❌ Property creation failed: {response.status_code} - {response.text}")
        return None

def test_request_reservation(customer_headers, property_id):
    """Request a viewing as customer."""
    response = requests.post(
        f"{BASE_URL}/api/v1/reservations",
        headers=customer_headers,
        json={
            "property_id": property_id,
            "reservation_time": (datetime.now(timezone.utc) + timedelta(days=2)).isoformat()
        },
        timeout=TIMEOUT
    )

    if response.status_code == 201:
        print(f"✅ Reservation requested: {response.json()['reservation_id']}")
        return response.json()["reservation_id"]
    else:
        print(f"❌ Reservation request failed: {response.status_code} - {response.text}")
        return None

def test_transition(headers, reservation_id, status, expected_units):
    """Move a reservation and check the inventory it reports."""
    start_time = time.time()
    response = requests.put(
        f"{BASE_URL}/api/v1/reservations/{reservation_id}/status",
        headers=headers,
        json={"status": status},
        timeout=TIMEOUT
    )
    end_time = time.time()

    if response.status_code != 200:
        print(f"❌ Transition to {status} failed: {response.status_code} - {response.text}")
        return False

    inventory = response.json()["inventory"] or {}
    if inventory.get("units_available") != expected_units:
        print(f"❌ Transition to {status}: expected {expected_units} units, got {inventory.get('units_available')}")
        return False

    print(f"✅ Transition to {status}: {expected_units} units left in {end_time-start_time:.3f}s")
    return True

def test_report(admin_headers):
    """Test the admin reservation report."""
    response = requests.get(f"{BASE_URL}/api/v1/reservations/report", headers=admin_headers, timeout=TIMEOUT)

    if response.status_code == 200:
        print(f"✅ Reservation report: {len(response.json())} resolved reservations")
        return True
    else:
        print(f"❌ Reservation report failed: {response.status_code}")
        return False

def main():
    """Run all API tests."""
    print("🔄 Starting API Tests...")
    print(f"Target: {BASE_URL}")
    print("-" * 50)

    # Test server
    if not test_server_running():
        sys.exit(1)

    # Get authentication
    try:
        admin_headers = get_auth_headers("admin")
        customer_headers = get_auth_headers("customer")
        print("✅ Authentication headers loaded")
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(1)

    # Run tests
    tests_passed = 0
    tests_total = 0

    # Test 1: Properties list
    tests_total += 1
    if test_properties_list(admin_headers) is not None:
        tests_passed += 1

    # Test 2: Create property
    tests_total += 1
    property_data = test_create_property(admin_headers)
    if property_data:
        tests_passed += 1

        # Test 3: Request viewing
        tests_total += 1
        reservation_id = test_request_reservation(customer_headers, property_data["id"])
        if reservation_id:
            tests_passed += 1

            # Test 4/5: Confirm and cancel round trip (admin may act on any reservation)
            tests_total += 2
            if test_transition(admin_headers, reservation_id, "confirmed", 1):
                tests_passed += 1
            if test_transition(admin_headers, reservation_id, "cancelled", 2):
                tests_passed += 1

    # Test 6: Report
    tests_total += 1
    if test_report(admin_headers):
        tests_passed += 1

    # Summary
    print("-" * 50)
    print(f"📊 Test Results: {tests_passed}/{tests_total} passed")

    if tests_passed == tests_total:
        print("🎉 All tests passed!")
    else:
        print("⚠️  Some tests failed. Check the output above.")
        sys.exit(1)

if __name__ == "__main__":
    main()
