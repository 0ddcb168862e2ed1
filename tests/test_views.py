# tests/test_views.py

from __future__ import annotations

from taskhub.core.views import ChatView, ListView, NotificationListView


def test_list_view_keeps_stale_items_on_error() -> None:
    responses = [[1, 2], RuntimeError("offline")]

    def fetch():
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    view = ListView(fetch, "Failed to load tasks")
    assert view.refresh() == [1, 2]
    assert view.error is None

    assert view.refresh() == [1, 2]
    assert view.error == "Failed to load tasks"
    assert view.loading is False


def test_mutate_refetches_whole_list() -> None:
    store = ["a"]
    view = ListView(lambda: list(store))
    view.refresh()

    view.mutate(store.append, "b")

    assert view.items == ["a", "b"]


def test_failed_mutation_sets_banner_without_refetch() -> None:
    fetches = {"n": 0}

    def fetch():
        fetches["n"] += 1
        return []

    def fail():
        raise RuntimeError("denied")

    view = ListView(fetch)
    view.refresh()
    assert view.mutate(fail, error_message="Failed to delete task") is None
    assert view.error == "Failed to delete task"
    assert fetches["n"] == 1


def test_notification_mark_read_flips_exactly_one() -> None:
    items = [
        {"id": "n1", "read": False},
        {"id": "n2", "read": False},
        {"id": "n3", "read": True},
    ]
    view = NotificationListView(lambda: items)
    view.refresh()

    view.mark_read("n2")

    assert [i["read"] for i in view.items] == [False, True, True]
    assert [i["id"] for i in view.items] == ["n1", "n2", "n3"]


def test_notification_mark_all_and_remove() -> None:
    view = NotificationListView(lambda: [{"id": "n1", "read": False}, {"id": "n2", "read": False}])
    view.refresh()

    view.mark_all_read()
    view.remove("n1")

    assert view.items == [{"id": "n2", "read": True}]


def test_chat_append_orders_and_ignores_duplicates() -> None:
    view = ChatView(lambda: [
        {"id": "m1", "created_at": "2025-01-01T10:00:00+00:00"},
        {"id": "m3", "created_at": "2025-01-01T10:02:00+00:00"},
    ])
    view.refresh()

    assert view.append({"id": "m2", "created_at": "2025-01-01T10:01:00+00:00"}) is True
    assert view.append({"id": "m2", "created_at": "2025-01-01T10:01:00+00:00"}) is False
    assert [m["id"] for m in view.items] == ["m1", "m2", "m3"]
