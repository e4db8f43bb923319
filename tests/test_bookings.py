"""Booking API tests: create, slot guard, cancel, admin management."""

from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from reelbook.core.config import settings
from reelbook.models import Booking, BookingStatus, PaymentStatus
from reelbook.services import email


async def _create(client, payload, headers=None) -> dict:
    resp = await client.post("/api/bookings", json=payload, headers=headers or {})
    assert resp.status_code == 201, resp.text
    return resp.json()["booking"]


async def _set_status(client, booking_id, admin_key_headers, **fields):
    resp = await client.put(f"/api/bookings/admin/{booking_id}/status", json=fields, headers=admin_key_headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["booking"]


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_booking_as_guest(client, services, booking_payload, mock_send_email):
    resp = await client.post("/api/bookings", json=booking_payload)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Booking created successfully"

    booking = body["booking"]
    assert booking["booking_status"] == "pending"
    assert booking["payment_status"] == "pending"
    assert booking["total_amount"] == 25000
    assert booking["service_id"] == services["wedding-basic"].id
    assert booking["service_name"] == "Basic Wedding Package"
    assert booking["user_id"] is None
    assert booking["event_time"] == "10:00"

    # Customer confirmation plus studio copy
    assert mock_send_email.await_count == 2
    recipients = {call.args[0] for call in mock_send_email.await_args_list}
    assert recipients == {"priya.sharma@gmail.com", settings.admin_email}


@pytest.mark.asyncio
async def test_create_booking_links_logged_in_user(client, services, booking_payload, customer, customer_headers):
    booking = await _create(client, booking_payload, customer_headers)
    assert booking["user_id"] == customer.id


@pytest.mark.asyncio
async def test_service_resolved_by_display_name_or_id(client, services, booking_payload):
    booking = await _create(client, {**booking_payload, "service": "Basic Wedding Package"})
    assert booking["service_id"] == services["wedding-basic"].id

    booking = await _create(client, {**booking_payload, "service": services["birthday-party"].id, "time": "18:00"})
    assert booking["service_id"] == services["birthday-party"].id


@pytest.mark.asyncio
async def test_time_is_normalised(client, services, booking_payload):
    booking = await _create(client, {**booking_payload, "time": "9:30"})
    assert booking["event_time"] == "09:30"


@pytest.mark.asyncio
async def test_optional_fields(client, services, booking_payload):
    payload = {**booking_payload, "altPhone": "", "specialRequirements": "Drone shots please"}
    booking = await _create(client, payload)
    assert booking["alt_phone"] is None
    assert booking["special_requirements"] == "Drone shots please"


@pytest.mark.asyncio
async def test_create_booking_validation_errors(client, services, booking_payload):
    payload = {**booking_payload, "name": "A", "phone": "12345", "location": "abc", "time": "25:00"}
    resp = await client.post("/api/bookings", json=payload)
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    fields = {e["field"] for e in body["errors"]}
    assert {"name", "phone", "location", "time"} <= fields


@pytest.mark.asyncio
async def test_create_booking_missing_fields(client, services):
    resp = await client.post("/api/bookings", json={"name": "Priya Sharma"})
    assert resp.status_code == 400
    fields = {e["field"] for e in resp.json()["errors"]}
    assert {"email", "phone", "service", "date", "time", "location"} <= fields


@pytest.mark.asyncio
async def test_create_booking_unknown_service(client, services, booking_payload):
    resp = await client.post("/api/bookings", json={**booking_payload, "service": "underwater-shoot"})
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("Invalid service selected")


@pytest.mark.asyncio
async def test_email_failure_does_not_fail_booking(client, session_factory, services, booking_payload, mock_send_email):
    mock_send_email.side_effect = aiosmtplib.SMTPException("connection refused")

    resp = await client.post("/api/bookings", json=booking_payload)
    assert resp.status_code == 201

    async with session_factory() as db:
        booking = await db.get(Booking, resp.json()["booking"]["id"])
        assert booking is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [ValueError("bad header"), RuntimeError("template exploded")])
async def test_unexpected_email_error_keeps_booking(
    client, session_factory, services, booking_payload, mock_send_email, error
):
    mock_send_email.side_effect = error

    resp = await client.post("/api/bookings", json=booking_payload)
    assert resp.status_code == 201

    async with session_factory() as db:
        booking = await db.get(Booking, resp.json()["booking"]["id"])
        assert booking is not None
        assert booking.booking_status == BookingStatus.PENDING


@pytest.mark.asyncio
async def test_multiline_name_keeps_booking(client, session_factory, services, booking_payload, mock_send_email):
    # The real sender refuses a Subject with a line break in it
    mock_send_email.side_effect = email.send_email

    with patch("reelbook.services.email.aiosmtplib.send", new_callable=AsyncMock) as smtp_send:
        resp = await client.post("/api/bookings", json={**booking_payload, "name": "Priya\nSharma"})

    assert resp.status_code == 201
    # Customer copy goes out, the studio copy with the name in its subject does not
    assert smtp_send.await_count == 1

    async with session_factory() as db:
        assert await db.get(Booking, resp.json()["booking"]["id"]) is not None


# ---------------------------------------------------------------------------
# Slot guard
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_confirmed_booking_blocks_slot(client, services, booking_payload, admin_key_headers):
    first = await _create(client, booking_payload)
    await _set_status(client, first["id"], admin_key_headers, booking_status="confirmed")

    resp = await client.post("/api/bookings", json={**booking_payload, "name": "Rahul Verma"})
    assert resp.status_code == 409
    assert resp.json()["message"] == "This time slot is already booked. Please choose a different time."

    # Same day, different time is fine
    await _create(client, {**booking_payload, "time": "16:00"})


@pytest.mark.asyncio
async def test_in_progress_booking_blocks_slot(client, services, booking_payload, admin_key_headers):
    first = await _create(client, booking_payload)
    await _set_status(client, first["id"], admin_key_headers, booking_status="in_progress")

    resp = await client.post("/api/bookings", json=booking_payload)
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_pending_booking_does_not_block_slot(client, services, booking_payload):
    await _create(client, booking_payload)
    await _create(client, booking_payload)


@pytest.mark.asyncio
async def test_cancelled_booking_releases_slot(client, services, booking_payload, admin_key_headers):
    first = await _create(client, booking_payload)
    await _set_status(client, first["id"], admin_key_headers, booking_status="confirmed")
    await _set_status(client, first["id"], admin_key_headers, booking_status="cancelled")

    await _create(client, booking_payload)


# ---------------------------------------------------------------------------
# Cancel
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_owner_cancels_with_reason(client, session_factory, services, booking_payload, customer_headers):
    booking = await _create(client, booking_payload, customer_headers)

    resp = await client.put(
        f"/api/bookings/{booking['id']}/cancel", json={"reason": "Date changed"}, headers=customer_headers
    )
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Booking cancelled successfully"}

    async with session_factory() as db:
        row = await db.get(Booking, booking["id"])
        assert row.booking_status == BookingStatus.CANCELLED
        assert row.special_requirements == "Cancellation reason: Date changed"


@pytest.mark.asyncio
async def test_cancel_without_reason_keeps_notes(client, session_factory, services, booking_payload, customer_headers):
    payload = {**booking_payload, "specialRequirements": "Drone shots please"}
    booking = await _create(client, payload, customer_headers)

    resp = await client.put(f"/api/bookings/{booking['id']}/cancel", headers=customer_headers)
    assert resp.status_code == 200

    async with session_factory() as db:
        row = await db.get(Booking, booking["id"])
        assert row.special_requirements == "Drone shots please | Cancellation reason: No reason provided"


@pytest.mark.asyncio
async def test_cancel_twice(client, services, booking_payload, customer_headers):
    booking = await _create(client, booking_payload, customer_headers)
    url = f"/api/bookings/{booking['id']}/cancel"

    assert (await client.put(url, headers=customer_headers)).status_code == 200
    resp = await client.put(url, headers=customer_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Booking is already cancelled"


@pytest.mark.asyncio
async def test_cancel_completed_booking(client, services, booking_payload, customer_headers, admin_key_headers):
    booking = await _create(client, booking_payload, customer_headers)
    await _set_status(client, booking["id"], admin_key_headers, booking_status="completed")

    resp = await client.put(f"/api/bookings/{booking['id']}/cancel", headers=customer_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot cancel completed booking"


@pytest.mark.asyncio
async def test_cannot_cancel_someone_elses_booking(
    client, session_factory, services, booking_payload, customer_headers, other_headers
):
    booking = await _create(client, booking_payload, customer_headers)

    resp = await client.put(f"/api/bookings/{booking['id']}/cancel", headers=other_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "Booking not found or access denied"

    async with session_factory() as db:
        row = await db.get(Booking, booking["id"])
        assert row.booking_status == BookingStatus.PENDING


@pytest.mark.asyncio
async def test_cancel_requires_auth(client, services, booking_payload):
    booking = await _create(client, booking_payload)
    resp = await client.put(f"/api/bookings/{booking['id']}/cancel")
    assert resp.status_code == 401
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_admin_cancels_any_booking(client, services, booking_payload, customer_headers, admin_headers):
    booking = await _create(client, booking_payload, customer_headers)
    resp = await client.put(f"/api/bookings/{booking['id']}/cancel", headers=admin_headers)
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# My bookings
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_my_bookings_only_own(client, services, booking_payload, customer_headers, other_headers):
    mine = await _create(client, booking_payload, customer_headers)
    await _create(client, {**booking_payload, "time": "15:00"}, other_headers)

    resp = await client.get("/api/bookings/my-bookings", headers=customer_headers)
    assert resp.status_code == 200
    bookings = resp.json()["bookings"]
    assert [b["id"] for b in bookings] == [mine["id"]]
    assert bookings[0]["service_features"] == ["6 hours coverage", "300+ edited photos"]


@pytest.mark.asyncio
async def test_my_bookings_status_filter(client, services, booking_payload, customer_headers):
    first = await _create(client, booking_payload, customer_headers)
    await _create(client, {**booking_payload, "time": "15:00"}, customer_headers)
    await client.put(f"/api/bookings/{first['id']}/cancel", headers=customer_headers)

    resp = await client.get("/api/bookings/my-bookings?status=cancelled", headers=customer_headers)
    assert [b["id"] for b in resp.json()["bookings"]] == [first["id"]]


@pytest.mark.asyncio
async def test_my_bookings_requires_login(client):
    resp = await client.get("/api/bookings/my-bookings")
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_admin_list_requires_admin(client, customer_headers):
    assert (await client.get("/api/bookings/admin/all")).status_code == 401
    assert (await client.get("/api/bookings/admin/all", headers=customer_headers)).status_code == 401
    resp = await client.get("/api/bookings/admin/all", headers={"admin-key": "wrong-key"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Admin access required"


@pytest.mark.asyncio
async def test_admin_list_pagination(client, services, booking_payload, admin_headers):
    for time in ("09:00", "12:00", "15:00"):
        await _create(client, {**booking_payload, "time": time})

    resp = await client.get("/api/bookings/admin/all?limit=2", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["bookings"]) == 2
    assert body["pagination"] == {"total": 3, "limit": 2, "offset": 0, "hasMore": True}

    resp = await client.get("/api/bookings/admin/all?limit=2&offset=2", headers=admin_headers)
    assert resp.json()["pagination"]["hasMore"] is False


@pytest.mark.asyncio
async def test_admin_list_filters(client, services, booking_payload, event_date, admin_key_headers):
    first = await _create(client, booking_payload)
    await _create(client, {**booking_payload, "time": "15:00"})
    await _set_status(client, first["id"], admin_key_headers, booking_status="confirmed")

    resp = await client.get("/api/bookings/admin/all?status=confirmed", headers=admin_key_headers)
    assert [b["id"] for b in resp.json()["bookings"]] == [first["id"]]

    resp = await client.get(f"/api/bookings/admin/all?date_from={event_date.isoformat()}", headers=admin_key_headers)
    assert resp.json()["pagination"]["total"] == 2

    resp = await client.get("/api/bookings/admin/all?status=bogus", headers=admin_key_headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_admin_partial_update(client, services, booking_payload, admin_key_headers):
    booking = await _create(client, booking_payload)

    updated = await _set_status(client, booking["id"], admin_key_headers, payment_status="partial")
    assert updated["payment_status"] == "partial"
    assert updated["booking_status"] == "pending"

    updated = await _set_status(client, booking["id"], admin_key_headers, notes="Photographer: Arjun")
    assert updated["special_requirements"] == "Photographer: Arjun"
    assert updated["payment_status"] == "partial"


@pytest.mark.asyncio
async def test_admin_update_invalid_status(client, session_factory, services, booking_payload, admin_key_headers):
    booking = await _create(client, booking_payload)

    resp = await client.put(
        f"/api/bookings/admin/{booking['id']}/status",
        json={"booking_status": "shipped", "payment_status": "paid"},
        headers=admin_key_headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid booking status"

    async with session_factory() as db:
        row = await db.get(Booking, booking["id"])
        assert row.booking_status == BookingStatus.PENDING
        assert row.payment_status == PaymentStatus.PENDING


@pytest.mark.asyncio
async def test_admin_update_missing_booking(client, admin_key_headers):
    resp = await client.put("/api/bookings/admin/9999/status", json={"booking_status": "confirmed"}, headers=admin_key_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_admin_may_force_status_by_default(client, services, booking_payload, admin_key_headers):
    booking = await _create(client, booking_payload)
    updated = await _set_status(client, booking["id"], admin_key_headers, booking_status="completed")
    assert updated["booking_status"] == "completed"


@pytest.mark.asyncio
async def test_enforced_transitions(client, services, booking_payload, admin_key_headers, monkeypatch):
    monkeypatch.setattr(settings, "admin_enforce_transitions", True)
    booking = await _create(client, booking_payload)

    resp = await client.put(
        f"/api/bookings/admin/{booking['id']}/status", json={"booking_status": "completed"}, headers=admin_key_headers
    )
    assert resp.status_code == 400

    updated = await _set_status(client, booking["id"], admin_key_headers, booking_status="confirmed")
    assert updated["booking_status"] == "confirmed"


@pytest.mark.asyncio
async def test_update_requires_admin(client, services, booking_payload, customer_headers):
    booking = await _create(client, booking_payload, customer_headers)
    resp = await client.put(
        f"/api/bookings/admin/{booking['id']}/status", json={"booking_status": "confirmed"}, headers=customer_headers
    )
    assert resp.status_code == 401
