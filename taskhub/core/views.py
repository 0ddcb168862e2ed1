"""Cached list state behind the live websocket views.

Most lists are re-fetched in full after every mutation. Notifications and
task chat patch the cached list in place so the client keeps its position.
"""
import logging
from typing import Any, Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ListView(Generic[T]):
    def __init__(self, fetcher: Callable[[], List[T]], error_message: str = "Failed to load data"):
        self.fetcher = fetcher
        self.error_message = error_message
        self.items: List[T] = []
        self.error: Optional[str] = None
        self.loading = False

    def refresh(self) -> List[T]:
        """Replace the cached items; on failure keep the stale list and set the banner."""
        self.loading = True
        self.error = None
        try:
            self.items = list(self.fetcher() or [])
        except Exception as e:
            logger.error(f"{self.error_message}: {e}")
            self.error = self.error_message
        finally:
            self.loading = False
        return self.items

    def mutate(self, operation: Callable[..., Any], *args, error_message: str = "Operation failed", **kwargs) -> Any:
        """Run a write, then re-fetch the whole list."""
        try:
            result = operation(*args, **kwargs)
        except Exception as e:
            logger.error(f"{error_message}: {e}")
            self.error = error_message
            return None
        self.refresh()
        return result


def _item_id(item: Any) -> Any:
    return item["id"] if isinstance(item, dict) else getattr(item, "id", None)


def _with_read(item: Any) -> Any:
    if isinstance(item, dict):
        return {**item, "read": True}
    return item.model_copy(update={"read": True})


class NotificationListView(ListView):
    def mark_read(self, notification_id: str) -> None:
        self.items = [
            _with_read(item) if _item_id(item) == notification_id else item
            for item in self.items
        ]

    def mark_all_read(self) -> None:
        self.items = [_with_read(item) for item in self.items]

    def remove(self, notification_id: str) -> None:
        self.items = [item for item in self.items if _item_id(item) != notification_id]


class ChatView(ListView):
    def append(self, message: Any) -> bool:
        """Insert a new message in created_at order; duplicates (by id) are ignored."""
        message_id = _item_id(message)
        if any(_item_id(item) == message_id for item in self.items):
            return False
        self.items = sorted([*self.items, message], key=_created_at)
        return True


def _created_at(item: Any):
    return item["created_at"] if isinstance(item, dict) else item.created_at
