"""
HomeStock Backend — Middleware Tests
=======================================

What:  Request ID handling and access log levels.
"""

import logging

import pytest

from homestock.middleware.logging import level_for_status


@pytest.mark.parametrize(
    "status, level",
    [(200, logging.INFO), (201, logging.INFO), (404, logging.WARNING), (500, logging.ERROR)],
)
def test_level_for_status(status, level):
    assert level_for_status(status) == level


@pytest.mark.asyncio
async def test_malformed_client_request_id_replaced(test_client):
    response = await test_client.get("/", headers={"X-Request-ID": "bad id with spaces"})
    rid = response.headers["X-Request-ID"]
    assert rid != "bad id with spaces"
    assert len(rid) == 8


@pytest.mark.asyncio
async def test_access_log_line(test_client, apple_fields, caplog):
    with caplog.at_level(logging.INFO, logger="homestock.access"):
        await test_client.post("/api/v1/stock", data=apple_fields)

    records = [r for r in caplog.records if r.name == "homestock.access"]
    assert len(records) == 1
    assert records[0].status == 201
    assert records[0].method == "POST"
    assert "POST /api/v1/stock -> 201" in records[0].getMessage()


@pytest.mark.asyncio
async def test_health_not_logged(test_client, caplog):
    with caplog.at_level(logging.INFO, logger="homestock.access"):
        await test_client.get("/health")
    assert not [r for r in caplog.records if r.name == "homestock.access"]
