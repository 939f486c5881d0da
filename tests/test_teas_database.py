"""Integration tests for /teas against a real database session.

These go through SqlTeaRepository and the session dependency's
commit/rollback handling, unlike test_teas.py which uses the in-memory
repository.
"""

import json

import pytest
from httpx import AsyncClient, Response
from structlog.testing import capture_logs

from tests.factories import READ_HEADERS, WRITE_HEADERS

FIXED_ID = "65f1c0de00000000000000aa"


def _tea_body(name: str, category: str) -> str:
    return json.dumps({"data": {"name": name, "category": category}})


def _error_id(resp: Response) -> str:
    return resp.json()["errors"][0]["id"]


@pytest.mark.asyncio
async def test_list_empty_table(db_client: AsyncClient) -> None:
    resp = await db_client.get("/teas", headers=READ_HEADERS)
    assert resp.status_code == 200
    assert resp.json() == {"data": []}


@pytest.mark.asyncio
async def test_crud_round_trip(db_client: AsyncClient) -> None:
    resp = await db_client.post(
        "/teas", content=_tea_body("Green", "Unoxidized"), headers=WRITE_HEADERS
    )
    assert resp.status_code == 201
    tea_id = resp.json()["data"]["id"]

    resp = await db_client.get(f"/teas/{tea_id}", headers=READ_HEADERS)
    assert resp.json() == {"data": {"id": tea_id, "name": "Green", "category": "Unoxidized"}}

    resp = await db_client.put(
        f"/teas/{tea_id}", content=_tea_body("Gyokuro", "Shaded"), headers=WRITE_HEADERS
    )
    assert resp.status_code == 204

    resp = await db_client.get("/teas", headers=READ_HEADERS)
    assert resp.json() == {"data": [{"id": tea_id, "name": "Gyokuro", "category": "Shaded"}]}

    resp = await db_client.delete(f"/teas/{tea_id}", headers=READ_HEADERS)
    assert resp.status_code == 204

    resp = await db_client.get(f"/teas/{tea_id}", headers=READ_HEADERS)
    assert resp.status_code == 404
    assert _error_id(resp) == "not_found"


@pytest.mark.asyncio
async def test_update_and_delete_unknown_id_return_404(db_client: AsyncClient) -> None:
    resp = await db_client.put(
        f"/teas/{FIXED_ID}", content=_tea_body("Matcha", "Powdered"), headers=WRITE_HEADERS
    )
    assert resp.status_code == 404

    resp = await db_client.delete(f"/teas/{FIXED_ID}", headers=READ_HEADERS)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_failed_flush_rolls_back_instead_of_committing(
    db_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr("teapot.repositories.tea.new_object_id", lambda: FIXED_ID)

    resp = await db_client.post(
        "/teas", content=_tea_body("Green", "Unoxidized"), headers=WRITE_HEADERS
    )
    assert resp.status_code == 201

    # Same id again: the INSERT violates the primary key during flush
    with capture_logs() as logs:
        resp = await db_client.post(
            "/teas", content=_tea_body("Assam", "Oxidized"), headers=WRITE_HEADERS
        )
    assert resp.status_code == 500
    assert _error_id(resp) == "internal_server_error"
    assert "UNIQUE" not in resp.text
    # Handled once by the pipeline; nothing reached the app-level handler
    assert [e["event"] for e in logs].count("unhandled_exception") == 1

    resp = await db_client.get("/teas", headers=READ_HEADERS)
    assert resp.json() == {"data": [{"id": FIXED_ID, "name": "Green", "category": "Unoxidized"}]}


@pytest.mark.asyncio
async def test_health_checks_database(db_client: AsyncClient) -> None:
    resp = await db_client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
