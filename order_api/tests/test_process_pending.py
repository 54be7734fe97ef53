from __future__ import annotations

from decimal import Decimal

import pytest

from order_api.app.domain import ConcurrentUpdateError, OrderStatus
from order_api.app.models import OrderItem

pytestmark = pytest.mark.anyio


async def _create(service, name="Customer"):
    return await service.create_order(
        name,
        "customer@example.com",
        [OrderItem(product_name="Widget", quantity=1, price=Decimal("5.00"))],
    )


async def test_empty_store_processes_nothing(service):
    assert await service.process_pending_orders() == 0


async def test_promotes_every_pending_order_once(service):
    orders = [await _create(service, f"User {i}") for i in range(3)]
    shipped = await _create(service, "Shipped")
    await service.update_order_status(shipped.id, OrderStatus.PROCESSING)
    await service.update_order_status(shipped.id, OrderStatus.SHIPPED)
    cancelled = await _create(service, "Cancelled")
    await service.cancel_order(cancelled.id)

    assert await service.process_pending_orders() == 3
    for order in orders:
        stored = await service.get_order_by_id(order.id)
        assert stored.status == OrderStatus.PROCESSING
    assert (await service.get_order_by_id(shipped.id)).status == OrderStatus.SHIPPED
    assert (await service.get_order_by_id(cancelled.id)).status == OrderStatus.CANCELLED

    # nothing new is PENDING, so a second run is a no-op
    assert await service.process_pending_orders() == 0


async def test_failure_on_one_order_does_not_stop_the_batch(service, monkeypatch, caplog):
    orders = [await _create(service, f"User {i}") for i in range(3)]
    failing_id = orders[1].id
    original = service._promote

    async def flaky_promote(order_id):
        if order_id == failing_id:
            raise ConcurrentUpdateError(order_id)
        return await original(order_id)

    monkeypatch.setattr(service, "_promote", flaky_promote)

    assert await service.process_pending_orders() == 2
    assert (await service.get_order_by_id(failing_id)).status == OrderStatus.PENDING
    assert f"Could not promote order {failing_id}" in caplog.text

    monkeypatch.setattr(service, "_promote", original)
    assert await service.process_pending_orders() == 1


async def test_order_changed_after_listing_is_skipped(service, monkeypatch):
    order = await _create(service)
    original = service._promote

    async def cancel_first(order_id):
        await service.cancel_order(order_id)
        return await original(order_id)

    monkeypatch.setattr(service, "_promote", cancel_first)

    assert await service.process_pending_orders() == 0
    assert (await service.get_order_by_id(order.id)).status == OrderStatus.CANCELLED
