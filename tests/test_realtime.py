# tests/test_realtime.py

from __future__ import annotations

from taskhub.core.realtime import ChangeFeed, InvalidationQueue

from .fakes import FakeAsyncClient


async def test_subscribe_registers_filtered_binding() -> None:
    client = FakeAsyncClient()
    feed = ChangeFeed(client)

    await feed.subscribe("chat-t1", "task_chat_messages", lambda p: None, filter="task_id=eq.t1", event="INSERT")

    channel = client.channels["chat-t1"]
    assert channel.subscribed
    assert channel.bindings[0]["table"] == "task_chat_messages"
    assert channel.bindings[0]["filter"] == "task_id=eq.t1"
    assert channel.bindings[0]["event"] == "INSERT"


async def test_changes_become_invalidation_signals() -> None:
    client = FakeAsyncClient()
    feed = ChangeFeed(client)
    queue = InvalidationQueue()
    await feed.subscribe("notifications-u1", "notifications", queue.signal("notifications"), filter="user_id=eq.u1")

    client.channels["notifications-u1"].fire({"data": {"type": "INSERT", "record": {"id": "n1"}}})

    name, payload = await queue.get()
    assert name == "notifications"
    assert payload["data"]["record"]["id"] == "n1"
    assert queue.empty()


async def test_failing_handler_does_not_break_feed() -> None:
    client = FakeAsyncClient()
    feed = ChangeFeed(client)

    def broken(payload):
        raise RuntimeError("handler bug")

    await feed.subscribe("x", "tasks", broken)
    client.channels["x"].fire({})


async def test_unsubscribe_is_idempotent() -> None:
    client = FakeAsyncClient()
    subscription = await ChangeFeed(client).subscribe("x", "tasks", lambda p: None)

    await subscription.unsubscribe()
    await subscription.unsubscribe()

    assert client.removed == ["x"]


async def test_listen_unsubscribes_on_scope_exit() -> None:
    client = FakeAsyncClient()
    feed = ChangeFeed(client)

    async with feed.listen("scoped", "messages", lambda p: None, filter="receiver_id=eq.u1") as subscription:
        assert not subscription.closed

    assert subscription.closed
    assert client.removed == ["scoped"]


async def test_close_tears_down_every_subscription() -> None:
    client = FakeAsyncClient()
    feed = ChangeFeed(client)
    await feed.subscribe("a", "messages", lambda p: None, filter="sender_id=eq.u1")
    await feed.subscribe("b", "messages", lambda p: None, filter="receiver_id=eq.u1")

    await feed.close()
    await feed.close()

    assert client.removed == ["a", "b"]
