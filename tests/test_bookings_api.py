"""End-to-end tests for the availability and booking endpoints."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

import pytest
from httpx import AsyncClient

from booking_engine.api import deps
from booking_engine.core.security import create_access_token
from booking_engine.services.errors import (
    AuthorizationError,
    BookingEngineError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    NotSchedulableError,
)

API = "/api/v1"


def _auth(user_id: object) -> dict[str, str]:
    token = create_access_token(str(user_id))
    return {"Authorization": f"Bearer {token}"}


def _week(**overrides: dict[str, Any]) -> dict[str, Any]:
    days: dict[str, Any] = {
        day: {"is_active": False, "slots": []}
        for day in (
            "monday",
            "tuesday",
            "wednesday",
            "thursday",
            "friday",
            "saturday",
            "sunday",
        )
    }
    days.update(overrides)
    return days


def _parse(value: str) -> datetime:
    moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


async def _open_monday(client: AsyncClient, provider_id: object) -> None:
    response = await client.put(
        f"{API}/providers/{provider_id}/availability",
        json={
            "days": _week(
                monday={"is_active": True, "slots": [{"start": "09:00", "end": "10:00"}]}
            )
        },
        headers=_auth(provider_id),
    )
    assert response.status_code == 200, response.text


@pytest.mark.asyncio
async def test_booking_workflow(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    provider_id = app_context["provider_id"]
    customer_id = app_context["customer_id"]
    service_id = app_context["service_id"]

    await _open_monday(client, provider_id)

    slots_resp = await client.get(
        f"{API}/services/{service_id}/slots",
        params={"date": "2025-01-06"},
        headers=_auth(customer_id),
    )
    assert slots_resp.status_code == 200, slots_resp.text
    body = slots_resp.json()
    assert body["duration_minutes"] == 30
    assert body["provider_id"] == str(provider_id)
    assert [_parse(item) for item in body["slots"]] == [
        datetime(2025, 1, 6, 9, 0, tzinfo=UTC),
        datetime(2025, 1, 6, 9, 30, tzinfo=UTC),
    ]

    create_resp = await client.post(
        f"{API}/bookings",
        json={
            "service_id": str(service_id),
            "start_at": "2025-01-06T09:00:00Z",
            "address": "12 Elm Street",
        },
        headers=_auth(customer_id),
    )
    assert create_resp.status_code == 201, create_resp.text
    booking = create_resp.json()
    assert booking["status"] == "pending"
    assert _parse(booking["end_at"]) == datetime(2025, 1, 6, 9, 30, tzinfo=UTC)

    conflict_resp = await client.post(
        f"{API}/bookings",
        json={"service_id": str(service_id), "start_at": "2025-01-06T09:00:00Z"},
        headers=_auth(app_context["other_customer_id"]),
    )
    assert conflict_resp.status_code == 409

    after_resp = await client.get(
        f"{API}/services/{service_id}/slots",
        params={"date": "2025-01-06"},
        headers=_auth(customer_id),
    )
    assert [_parse(item) for item in after_resp.json()["slots"]] == [
        datetime(2025, 1, 6, 9, 30, tzinfo=UTC),
    ]

    forbidden_resp = await client.post(
        f"{API}/bookings/{booking['id']}/status",
        json={"status": "accepted"},
        headers=_auth(customer_id),
    )
    assert forbidden_resp.status_code == 403

    accept_resp = await client.post(
        f"{API}/bookings/{booking['id']}/status",
        json={"status": "accepted"},
        headers=_auth(provider_id),
    )
    assert accept_resp.status_code == 200, accept_resp.text
    assert accept_resp.json()["status"] == "accepted"

    invalid_resp = await client.post(
        f"{API}/bookings/{booking['id']}/status",
        json={"status": "pending"},
        headers=_auth(provider_id),
    )
    assert invalid_resp.status_code == 400

    mine_resp = await client.get(f"{API}/bookings", headers=_auth(customer_id))
    assert mine_resp.status_code == 200
    assert [item["id"] for item in mine_resp.json()] == [booking["id"]]

    provider_list = await client.get(
        f"{API}/bookings",
        params={"provider_id": str(provider_id)},
        headers=_auth(provider_id),
    )
    assert provider_list.status_code == 200
    assert len(provider_list.json()) == 1

    snooping = await client.get(
        f"{API}/bookings",
        params={"user_id": str(customer_id)},
        headers=_auth(app_context["other_customer_id"]),
    )
    assert snooping.status_code == 403


@pytest.mark.asyncio
async def test_availability_defaults_and_permissions(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    provider_id = app_context["provider_id"]

    read_resp = await client.get(
        f"{API}/providers/{provider_id}/availability",
        headers=_auth(app_context["customer_id"]),
    )
    assert read_resp.status_code == 200
    days = read_resp.json()["days"]
    assert len(days) == 7
    assert days["monday"]["is_active"] is False

    put_resp = await client.put(
        f"{API}/providers/{provider_id}/availability",
        json={"days": _week()},
        headers=_auth(app_context["other_provider_id"]),
    )
    assert put_resp.status_code == 403

    bad_resp = await client.put(
        f"{API}/providers/{provider_id}/availability",
        json={
            "days": _week(
                monday={
                    "is_active": True,
                    "slots": [
                        {"start": "09:00", "end": "11:00"},
                        {"start": "10:00", "end": "12:00"},
                    ],
                }
            )
        },
        headers=_auth(provider_id),
    )
    assert bad_resp.status_code == 422

    missing_resp = await client.get(
        f"{API}/providers/{app_context['customer_id']}/availability",
        headers=_auth(provider_id),
    )
    assert missing_resp.status_code == 404


@pytest.mark.asyncio
async def test_error_mapping_for_services(app_context: dict[str, Any]) -> None:
    client: AsyncClient = app_context["client"]
    headers = _auth(app_context["customer_id"])

    product_resp = await client.get(
        f"{API}/services/{app_context['product_id']}/slots",
        params={"date": "2025-01-06"},
        headers=headers,
    )
    assert product_resp.status_code == 422

    unknown_resp = await client.post(
        f"{API}/bookings",
        json={"service_id": str(uuid.uuid4()), "start_at": "2025-01-06T09:00:00Z"},
        headers=headers,
    )
    assert unknown_resp.status_code == 404

    no_schedule_resp = await client.get(
        f"{API}/services/{app_context['service_id']}/slots",
        params={"date": "2025-01-06"},
        headers=headers,
    )
    assert no_schedule_resp.status_code == 200
    assert no_schedule_resp.json()["slots"] == []


@pytest.mark.asyncio
async def test_requests_without_valid_token_are_rejected(
    app_context: dict[str, Any],
) -> None:
    client: AsyncClient = app_context["client"]

    anonymous = await client.get(f"{API}/bookings")
    assert anonymous.status_code == 401

    unknown_user = await client.get(f"{API}/bookings", headers=_auth(uuid.uuid4()))
    assert unknown_user.status_code == 401

    garbage = await client.get(
        f"{API}/bookings", headers={"Authorization": "Bearer not-a-token"}
    )
    assert garbage.status_code == 401


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (NotFoundError("missing"), 404),
        (NotSchedulableError("not bookable"), 422),
        (InvalidRequestError("bad"), 400),
        (ConflictError("taken"), 409),
        (AuthorizationError("nope"), 403),
        (BookingEngineError("generic"), 400),
    ],
)
def test_service_errors_map_to_http_status(
    error: BookingEngineError, status_code: int
) -> None:
    http_error = deps.to_http_error(error)

    assert http_error.status_code == status_code
    assert http_error.detail == str(error)
