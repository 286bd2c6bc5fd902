from datetime import date, timedelta

OWNER = "owner@example.com"
RENTER = "renter@example.com"
OTHER_RENTER = "second@example.com"
STRANGER = "stranger@example.com"


def booked_dates(client, item_id):
    response = client.get(f"/api/items/{item_id}/booked-dates")
    assert response.status_code == 200
    return response.json()["bookedDates"]


# --------
# Creating requests
# --------


def test_request_booking(client, item, book):
    response = book(item["id"], RENTER, "2024-03-10", "2024-03-12")
    assert response.status_code == 201
    booking = response.json()["booking"]
    assert booking["status"] == "pending"
    assert booking["total_days"] == 3
    assert booking["total_amount"] == 75
    assert booking["owner_email"] == OWNER

    # pending requests do not take dates
    assert booked_dates(client, item["id"]) == []


def test_overlapping_pending_requests_are_allowed(client, item, book):
    assert book(item["id"], RENTER, "2024-03-10", "2024-03-12").status_code == 201
    assert book(item["id"], OTHER_RENTER, "2024-03-11", "2024-03-13").status_code == 201


def test_request_with_end_before_start_is_rejected(client, item, book):
    response = book(item["id"], RENTER, "2024-03-12", "2024-03-10")
    assert response.status_code == 400


def test_request_with_wrong_owner_is_rejected(client, item, book):
    response = book(item["id"], RENTER, "2024-03-10", "2024-03-12", owner=STRANGER)
    assert response.status_code == 400


def test_request_missing_fields(client, item):
    response = client.post(f"/api/items/{item['id']}/bookings", json={"userEmail": RENTER})
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"


def test_request_for_unknown_item(client, book):
    response = book(999, RENTER, "2024-03-10", "2024-03-12")
    assert response.status_code == 404
    assert response.json() == {"error": "Item not found"}


def test_request_over_confirmed_dates_reports_conflicts(client, item, book, set_status):
    first = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]
    assert set_status(item["id"], first["id"], "confirmed", owner_email=OWNER).status_code == 200

    response = book(item["id"], OTHER_RENTER, "2024-03-11", "2024-03-13")
    assert response.status_code == 400
    assert response.json()["conflictDates"] == ["2024-03-11", "2024-03-12"]


def test_request_over_owner_blocked_dates(client, item, book):
    client.post(
        f"/api/items/{item['id']}/unavailable",
        json={"ownerEmail": OWNER, "dates": ["2024-03-11"]},
    )
    response = book(item["id"], RENTER, "2024-03-10", "2024-03-12")
    assert response.status_code == 400
    assert response.json()["conflictDates"] == ["2024-03-11"]


# --------
# Status changes
# --------


def test_confirm_takes_dates(client, item, book, set_status):
    booking = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]
    response = set_status(item["id"], booking["id"], "confirmed", owner_email=OWNER)
    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "confirmed"
    assert booked_dates(client, item["id"]) == ["2024-03-10", "2024-03-11", "2024-03-12"]


def test_first_confirmation_wins(client, item, book, set_status):
    first = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]
    second = book(item["id"], OTHER_RENTER, "2024-03-12", "2024-03-14").json()["booking"]

    assert set_status(item["id"], first["id"], "confirmed", owner_email=OWNER).status_code == 200

    response = set_status(item["id"], second["id"], "confirmed", owner_email=OWNER)
    assert response.status_code == 400
    assert response.json()["conflictDates"] == ["2024-03-12"]

    # the losing request is still pending and can be rejected
    response = set_status(item["id"], second["id"], "rejected", owner_email=OWNER)
    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "rejected"


def test_confirm_over_blocked_date_fails(client, item, book, set_status):
    booking = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]
    client.post(
        f"/api/items/{item['id']}/unavailable",
        json={"ownerEmail": OWNER, "dates": ["2024-03-12"]},
    )
    response = set_status(item["id"], booking["id"], "confirmed", owner_email=OWNER)
    assert response.status_code == 400
    assert response.json()["conflictDates"] == ["2024-03-12"]


def test_cancel_confirmed_frees_exactly_its_dates(client, item, book, set_status):
    a = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]
    b = book(item["id"], OTHER_RENTER, "2024-03-14", "2024-03-15").json()["booking"]
    set_status(item["id"], a["id"], "confirmed", owner_email=OWNER)
    set_status(item["id"], b["id"], "confirmed", owner_email=OWNER)

    response = set_status(item["id"], a["id"], "cancelled", user_email=RENTER)
    assert response.status_code == 200
    assert response.json()["booking"]["status"] == "cancelled"
    assert booked_dates(client, item["id"]) == ["2024-03-14", "2024-03-15"]

    assert book(item["id"], STRANGER, "2024-03-11", "2024-03-13").status_code == 201


def test_owner_can_cancel(client, item, book, set_status):
    booking = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]
    response = set_status(item["id"], booking["id"], "cancelled", owner_email=OWNER)
    assert response.status_code == 200


def test_only_owner_confirms(client, item, book, set_status):
    booking = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]

    response = set_status(item["id"], booking["id"], "confirmed", owner_email=STRANGER)
    assert response.status_code == 403

    response = set_status(item["id"], booking["id"], "confirmed", user_email=RENTER)
    assert response.status_code == 403


def test_stranger_cannot_cancel(client, item, book, set_status):
    booking = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]
    response = set_status(item["id"], booking["id"], "cancelled", user_email=STRANGER)
    assert response.status_code == 403


def test_invalid_transitions(client, item, book, set_status):
    booking = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]
    set_status(item["id"], booking["id"], "confirmed", owner_email=OWNER)

    response = set_status(item["id"], booking["id"], "rejected", owner_email=OWNER)
    assert response.status_code == 400

    set_status(item["id"], booking["id"], "cancelled", user_email=RENTER)
    response = set_status(item["id"], booking["id"], "cancelled", user_email=RENTER)
    assert response.status_code == 400


def test_unknown_status(client, item, book, set_status):
    booking = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]
    response = set_status(item["id"], booking["id"], "approved", owner_email=OWNER)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid status"


def test_unknown_booking(client, item, set_status):
    response = set_status(item["id"], 999, "confirmed", owner_email=OWNER)
    assert response.status_code == 404


# --------
# Listing
# --------


def test_item_bookings_filtered_by_viewer(client, item, book, set_status):
    mine = book(item["id"], RENTER, "2024-03-10", "2024-03-12").json()["booking"]
    other = book(item["id"], OTHER_RENTER, "2024-03-20", "2024-03-21").json()["booking"]
    set_status(item["id"], other["id"], "confirmed", owner_email=OWNER)

    def ids(params):
        response = client.get(f"/api/items/{item['id']}/bookings", params=params)
        assert response.status_code == 200
        return sorted(b["id"] for b in response.json()["bookings"])

    assert ids({"userEmail": OWNER, "ownerEmail": OWNER}) == sorted([mine["id"], other["id"]])
    assert ids({"userEmail": RENTER}) == sorted([mine["id"], other["id"]])
    assert ids({"userEmail": STRANGER}) == [other["id"]]
    assert ids({}) == [other["id"]]

    # claiming to be the owner of someone else's item does not reveal anything
    assert ids({"userEmail": STRANGER, "ownerEmail": STRANGER}) == [other["id"]]


def test_item_bookings_lists_unavailable_dates(client, item, book, set_status):
    booking = book(item["id"], RENTER, "2024-03-10", "2024-03-11").json()["booking"]
    set_status(item["id"], booking["id"], "confirmed", owner_email=OWNER)
    client.post(
        f"/api/items/{item['id']}/unavailable",
        json={"ownerEmail": OWNER, "dates": ["2024-03-20"]},
    )

    entries = client.get(f"/api/items/{item['id']}/bookings").json()["unavailableDates"]
    assert [(e["unavailable_date"], e["source"]) for e in entries] == [
        ("2024-03-20", "owner"),
        ("2024-03-10", "booking"),
        ("2024-03-11", "booking"),
    ]


def test_bookings_for_user(client, item, book):
    book(item["id"], RENTER, "2024-03-10", "2024-03-12")
    book(item["id"], OTHER_RENTER, "2024-03-14", "2024-03-15")

    response = client.get("/api/bookings", params={"userEmail": RENTER})
    bookings = response.json()["bookings"]
    assert len(bookings) == 1
    assert bookings[0]["item"]["title"] == "Camping tent"

    response = client.get("/api/bookings", params={"userEmail": OWNER})
    assert len(response.json()["bookings"]) == 2


def test_booking_history(client, item, book):
    book(item["id"], RENTER, "2024-03-10", "2024-03-12")

    data = client.get("/api/bookings/history", params={"userEmail": RENTER}).json()
    assert len(data["userBookings"]) == 1
    assert data["ownerBookings"] == []

    data = client.get("/api/bookings/history", params={"userEmail": OWNER}).json()
    assert data["userBookings"] == []
    assert len(data["ownerBookings"]) == 1

    assert client.get("/api/bookings/history").status_code == 400


# --------
# Calendar
# --------


def test_calendar_per_viewer(client, item, book, set_status):
    start = date.today() + timedelta(days=10)
    pending = book(item["id"], RENTER, start, start).json()["booking"]
    confirmed = book(item["id"], OTHER_RENTER, start + timedelta(days=1), start + timedelta(days=1)).json()["booking"]
    set_status(item["id"], confirmed["id"], "confirmed", owner_email=OWNER)
    client.post(
        f"/api/items/{item['id']}/unavailable",
        json={"ownerEmail": OWNER, "dates": [str(start + timedelta(days=2))]},
    )

    def statuses(user_email=None):
        params = {"start": str(start), "end": str(start + timedelta(days=3))}
        if user_email:
            params["userEmail"] = user_email
        response = client.get(f"/api/items/{item['id']}/calendar", params=params)
        assert response.status_code == 200
        return [d["status"] for d in response.json()["days"]]

    assert statuses(STRANGER) == ["available", "booked", "owner-blocked", "available"]
    assert statuses(RENTER) == ["pending", "booked", "owner-blocked", "available"]
    assert statuses(OWNER) == ["pending", "booked", "owner-blocked", "available"]
    assert statuses() == ["available", "booked", "owner-blocked", "available"]
    assert pending["status"] == "pending"


def test_calendar_marks_past_dates(client, item):
    yesterday = date.today() - timedelta(days=1)
    response = client.get(
        f"/api/items/{item['id']}/calendar",
        params={"start": str(yesterday), "end": str(date.today())},
    )
    assert [d["status"] for d in response.json()["days"]] == ["past", "available"]


def test_calendar_rejects_bad_range(client, item):
    response = client.get(
        f"/api/items/{item['id']}/calendar",
        params={"start": "2030-01-10", "end": "2030-01-01"},
    )
    assert response.status_code == 400

    response = client.get(
        f"/api/items/{item['id']}/calendar",
        params={"start": "2030-01-01", "end": "2031-06-01"},
    )
    assert response.status_code == 400
