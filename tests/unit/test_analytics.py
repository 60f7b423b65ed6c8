import json
import logging
import time
from decimal import Decimal

import httpx
import pytest

from storefront.core import deps
from storefront.core.enums import AnalyticsEvent
from storefront.core.exceptions import AnalyticsDeliveryError
from storefront.services.analytics.analytics_service import AnalyticsEmitter, build_emitter
from storefront.services.analytics.base import AnalyticsChannel
from storefront.services.analytics.datalayer import DataLayer
from storefront.services.analytics.log_channel import LogAnalytics
from storefront.services.analytics.webhook import WebhookAnalytics
from storefront.services.cart_actions import CartActions


class BrokenChannel(AnalyticsChannel):
    def emit(self, event_name, payload):
        raise RuntimeError("collector down")


def test_emitter_fans_out_and_normalises_payload(datalayer):
    other = DataLayer()
    emitter = AnalyticsEmitter([datalayer, other])

    emitter.emit(AnalyticsEvent.ADD_TO_CART, {"totalPrice": Decimal("12.50")})

    assert datalayer.events == [{"event": "addToCart", "totalPrice": "12.50"}]
    assert other.events == datalayer.events


def test_failing_channel_is_isolated(datalayer, caplog):
    emitter = AnalyticsEmitter([BrokenChannel(), datalayer])

    with caplog.at_level(logging.ERROR):
        emitter.emit("goToCheckout", {"location": "cart"})

    assert datalayer.names() == ["goToCheckout"]
    assert "BrokenChannel" in caplog.text


def test_webhook_posts_event():
    received = []

    def handler(request):
        received.append(json.loads(request.content))
        return httpx.Response(204)

    channel = WebhookAnalytics(
        "https://collector.test/events",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    channel.emit("addToCart", {"location": "home"})

    assert received == [{"event": "addToCart", "location": "home"}]


def test_webhook_failure_raises_delivery_error():
    channel = WebhookAnalytics(
        "https://collector.test/events",
        client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(503))),
    )

    with pytest.raises(AnalyticsDeliveryError):
        channel.emit("addToCart", {})

    # Through the emitter the failure is swallowed
    AnalyticsEmitter([channel]).emit("addToCart", {})


def test_log_channel_attaches_event(caplog):
    with caplog.at_level(logging.INFO, logger="storefront.analytics"):
        LogAnalytics().emit("removeCartItem", {"quantity": -2})

    record = caplog.records[-1]
    assert record.event == {"event": "removeCartItem", "quantity": -2}


def test_build_emitter_skips_unknown_channels(datalayer):
    emitter = build_emitter(["log", "datalayer", "carrier-pigeon"], datalayer=datalayer)

    assert [type(c) for c in emitter.channels] == [LogAnalytics, DataLayer]
    assert emitter.channels[1] is datalayer


# CART ACTIONS
def test_add_to_cart_event(actions, datalayer, robot):
    actions.add_to_cart(robot, location="home")

    assert datalayer.events == [
        {"event": "addToCart", "item": {"id": "A", "name": "Robot", "price": "10"}, "location": "home"}
    ]


def test_remove_cart_item_reports_negative_quantity(actions, store, datalayer, robot):
    store.add(robot)
    store.add(robot)

    actions.remove_cart_item("A")

    event = datalayer.events[-1]
    assert event["event"] == "removeCartItem"
    assert event["quantity"] == -2
    assert event["location"] == "cart"


def test_unknown_ids_emit_nothing(actions, datalayer):
    assert actions.remove_cart_item("ghost") is None
    assert actions.remove_one_from_cart("ghost") is False
    assert datalayer.events == []


def test_remove_one_from_cart_event(actions, store, datalayer, robot):
    store.add(robot)

    assert actions.remove_one_from_cart("A") is True
    assert store.list() == ()
    assert datalayer.names() == ["removeOneFromCart"]


def test_checkout_reports_then_clears(actions, store, datalayer, robot):
    store.add(robot)
    store.add(robot)
    store.add({"id": "B", "name": "Ball", "unitPrice": "1.5"})

    summary = actions.checkout()

    event = datalayer.events[-1]
    assert event["event"] == "goToCheckout"
    assert event["totalPrice"] == "21.5"
    assert event["totalQuantity"] == 3
    assert [line["id"] for line in event["cart"]] == ["A", "B"]
    assert summary["total_quantity"] == 3
    assert store.list() == ()


def test_contact_form_event(actions, datalayer):
    actions.contact_form_submit({"name": "Ada", "email": "ada@example.com", "message": "Hi"})

    assert datalayer.events[-1]["contact"]["name"] == "Ada"
    assert datalayer.events[-1]["location"] == "contact"


def test_actions_work_without_analytics(store, robot):
    actions = CartActions(store)

    actions.add_to_cart(robot)
    actions.checkout()

    assert store.list() == ()


def test_raising_emitter_does_not_break_cart(store, robot):
    class ExplodingEmitter:
        def emit(self, event_name, payload):
            raise RuntimeError("boom")

    actions = CartActions(store, ExplodingEmitter())
    actions.add_to_cart(robot)

    assert store.get("A").quantity == 1


def test_scheduled_delivery_does_not_block_cart(store, robot):
    def slow_collector(request):
        time.sleep(1.0)
        return httpx.Response(204)

    webhook = WebhookAnalytics(
        "https://collector.test/events",
        client=httpx.Client(transport=httpx.MockTransport(slow_collector)),
    )
    pending = []
    actions = CartActions(
        store,
        AnalyticsEmitter([webhook]),
        schedule=lambda fn, *args: pending.append((fn, args)),
    )

    started = time.monotonic()
    actions.add_to_cart(robot)

    assert time.monotonic() - started < 0.5
    assert store.get("A").quantity == 1
    assert len(pending) == 1


def test_scheduled_delivery_runs_later(store, datalayer, robot):
    pending = []
    actions = CartActions(
        store,
        AnalyticsEmitter([datalayer]),
        schedule=lambda fn, *args: pending.append((fn, args)),
    )

    actions.add_to_cart(robot)
    assert datalayer.events == []

    for fn, args in pending:
        fn(*args)
    assert datalayer.names() == ["addToCart"]


def test_scheduled_delivery_swallows_emitter_errors(store, robot):
    class ExplodingEmitter:
        def emit(self, event_name, payload):
            raise RuntimeError("boom")

    pending = []
    actions = CartActions(store, ExplodingEmitter(), schedule=lambda fn, *args: pending.append((fn, args)))
    actions.add_to_cart(robot)

    fn, args = pending[0]
    fn(*args)


def test_emitter_close_releases_webhook_client(datalayer):
    client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(204)))
    emitter = AnalyticsEmitter([datalayer, WebhookAnalytics("https://collector.test/events", client=client)])

    emitter.close()

    assert client.is_closed


def test_shutdown_closes_cached_emitter(monkeypatch):
    closed = []
    monkeypatch.setattr(AnalyticsEmitter, "close", lambda self: closed.append(self))
    deps.get_analytics.cache_clear()

    emitter = deps.get_analytics()
    deps.shutdown_analytics()
    deps.shutdown_analytics()

    assert closed == [emitter]
    assert deps.get_analytics.cache_info().currsize == 0
