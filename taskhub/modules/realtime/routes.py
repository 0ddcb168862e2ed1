"""
WebSocket endpoints that keep client views in sync with database changes.

Every socket authenticates with the ``token`` query parameter, subscribes to
the relevant postgres_changes feeds and re-reads (or patches) its cached view
whenever a change signal arrives. Subscriptions, debounce timers and the
signal pump are torn down when the socket closes.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from supabase import Client

from taskhub.core.debounce import Debouncer
from taskhub.core.dependencies import resolve_user
from taskhub.core.realtime import ChangeFeed, InvalidationQueue
from taskhub.core.views import ListView, NotificationListView, ChatView
from taskhub.database.supabase_client import SupabaseClient
from taskhub.modules.auth.service import SessionManager
from taskhub.modules.chat.service import TaskChatService
from taskhub.modules.messages.service import MessageService
from taskhub.modules.notifications.service import NotificationService
from taskhub.modules.profiles.schemas import Profile
from taskhub.modules.profiles.service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ws", tags=["realtime"])


async def open_change_feed(token: str) -> ChangeFeed:
    client = await SupabaseClient.get_realtime_client(token)
    return ChangeFeed(client)


async def authenticate(websocket: WebSocket, token: Optional[str]) -> Optional[Tuple[Profile, Client]]:
    """Resolve the caller from the token query parameter, or close the socket."""
    profile = None
    supabase = None
    if token:
        try:
            supabase = SupabaseClient.get_user_client(token)
            profile = await run_in_threadpool(resolve_user, token, SessionManager(supabase))
        except Exception as e:
            logger.error(f"WebSocket authentication failed: {e}")
            profile = None
    if not profile:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return None
    await websocket.accept()
    return profile, supabase


def _record(payload: Dict[str, Any]) -> Dict[str, Any]:
    """New row of a postgres_changes payload."""
    data = payload.get("data", payload) if isinstance(payload, dict) else {}
    return data.get("record") or data.get("new") or {}


async def _pump(queue: InvalidationQueue, handle: Callable[[str, Dict[str, Any]], Awaitable[None]]) -> None:
    while True:
        name, payload = await queue.get()
        try:
            await handle(name, payload)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error handling {name} change: {e}")


async def _receive_frame(websocket: WebSocket) -> Optional[Dict[str, Any]]:
    """Next JSON object sent by the client; None for malformed or non-object frames."""
    try:
        frame = await websocket.receive_json()
    except (ValueError, KeyError):
        # KeyError: binary frame on a text socket
        logger.debug("Ignoring malformed websocket frame")
        return None
    return frame if isinstance(frame, dict) else None


async def _send_view(websocket: WebSocket, kind: str, view: ListView, **extra) -> None:
    await websocket.send_json(jsonable_encoder({
        "type": kind,
        "items": view.items,
        "error": view.error,
        **extra,
    }))


async def _teardown(feed: Optional[ChangeFeed], pump: Optional[asyncio.Task], debouncer: Optional[Debouncer] = None) -> None:
    if debouncer:
        debouncer.cancel()
    if pump:
        pump.cancel()
        try:
            await pump
        except asyncio.CancelledError:
            pass
    if feed:
        await feed.close()


@router.websocket("/notifications")
async def notifications_socket(websocket: WebSocket, token: Optional[str] = None):
    """Navbar badges and the notifications dropdown."""
    auth = await authenticate(websocket, token)
    if not auth:
        return
    user, supabase = auth
    notifications = NotificationService(supabase)
    messages = MessageService(supabase)
    view = NotificationListView(
        lambda: notifications.list_notifications(user.id), "Failed to load notifications"
    )

    async def send_counts() -> None:
        unread_notifications = await run_in_threadpool(notifications.unread_count, user.id)
        unread_messages = await run_in_threadpool(messages.unread_count, user.id)
        await websocket.send_json({
            "type": "counts",
            "notifications": unread_notifications,
            "messages": unread_messages,
        })

    async def on_change(name: str, payload: Dict[str, Any]) -> None:
        if name == "notifications":
            await run_in_threadpool(view.refresh)
            await _send_view(websocket, "notifications", view)
        await send_counts()

    feed = pump = None
    try:
        queue = InvalidationQueue()
        feed = await open_change_feed(token)
        await feed.subscribe(
            f"notifications-{user.id}", "notifications",
            queue.signal("notifications"), filter=f"user_id=eq.{user.id}",
        )
        await feed.subscribe(
            f"unread-messages-{user.id}", "messages",
            queue.signal("messages"), filter=f"receiver_id=eq.{user.id}",
        )
        pump = asyncio.create_task(_pump(queue, on_change))
        await send_counts()

        while True:
            frame = await _receive_frame(websocket)
            if frame is None:
                continue
            action = frame.get("action")
            notification_id = frame.get("id")

            if action == "open":
                await run_in_threadpool(view.refresh)
            elif action in ("mark_read", "mark_all_read", "delete"):
                try:
                    if action == "mark_read":
                        await run_in_threadpool(notifications.mark_as_read, notification_id)
                        view.mark_read(notification_id)
                    elif action == "mark_all_read":
                        await run_in_threadpool(notifications.mark_all_as_read, user.id)
                        view.mark_all_read()
                    else:
                        await run_in_threadpool(notifications.delete_notification, notification_id)
                        view.remove(notification_id)
                    view.error = None
                except Exception as e:
                    logger.error(f"Notification {action} failed: {e}")
                    view.error = "Failed to update notifications"
                await send_counts()
            else:
                continue
            await _send_view(websocket, "notifications", view)
    except WebSocketDisconnect:
        logger.debug(f"Notifications socket closed for {user.id}")
    finally:
        await _teardown(feed, pump)


@router.websocket("/tasks/{task_id}/chat")
async def task_chat_socket(websocket: WebSocket, task_id: str, token: Optional[str] = None):
    """Live task chat; inserts are appended in created_at order."""
    auth = await authenticate(websocket, token)
    if not auth:
        return
    user, supabase = auth
    chat = TaskChatService(supabase)
    view = ChatView(lambda: chat.list_messages(task_id), "Failed to load chat messages")

    async def on_change(name: str, payload: Dict[str, Any]) -> None:
        message_id = _record(payload).get("id")
        if not message_id:
            return
        message = await run_in_threadpool(chat.get_message_with_sender, message_id)
        if view.append(message):
            await websocket.send_json(jsonable_encoder({"type": "message", "item": message}))

    feed = pump = None
    try:
        queue = InvalidationQueue()
        feed = await open_change_feed(token)
        await feed.subscribe(
            f"task-chat-{task_id}", "task_chat_messages",
            queue.signal("chat"), filter=f"task_id=eq.{task_id}", event="INSERT",
        )
        pump = asyncio.create_task(_pump(queue, on_change))
        await run_in_threadpool(view.refresh)
        await _send_view(websocket, "messages", view)

        while True:
            frame = await _receive_frame(websocket)
            if frame is None:
                continue
            if frame.get("action") != "send":
                continue
            try:
                await run_in_threadpool(chat.send_message, task_id, user.id, frame.get("content", ""))
            except Exception as e:
                logger.error(f"Error sending chat message to task {task_id}: {e}")
                await websocket.send_json({"type": "error", "error": "Failed to send message"})
    except WebSocketDisconnect:
        logger.debug(f"Chat socket for task {task_id} closed")
    finally:
        await _teardown(feed, pump)


@router.websocket("/messages")
async def messages_socket(websocket: WebSocket, token: Optional[str] = None, contact_id: Optional[str] = None):
    """Contact list and the open conversation of the messages page."""
    auth = await authenticate(websocket, token)
    if not auth:
        return
    user, supabase = auth
    service = MessageService(supabase)
    state = {"contact_id": contact_id}
    contacts = ListView(lambda: service.list_contacts(user.id), "Failed to load contacts")
    conversation = ListView(
        lambda: service.get_conversation(user.id, state["contact_id"]) if state["contact_id"] else [],
        "Failed to load messages",
    )

    async def refresh_all() -> None:
        await run_in_threadpool(contacts.refresh)
        await run_in_threadpool(conversation.refresh)
        await _send_view(websocket, "contacts", contacts)
        await _send_view(websocket, "conversation", conversation, contact_id=state["contact_id"])

    async def on_change(name: str, payload: Dict[str, Any]) -> None:
        await refresh_all()

    feed = pump = None
    try:
        queue = InvalidationQueue()
        feed = await open_change_feed(token)
        # Realtime filters take a single condition, so each direction gets its own channel
        await feed.subscribe(
            f"messages-sent-{user.id}", "messages",
            queue.signal("sent"), filter=f"sender_id=eq.{user.id}",
        )
        await feed.subscribe(
            f"messages-received-{user.id}", "messages",
            queue.signal("received"), filter=f"receiver_id=eq.{user.id}",
        )
        pump = asyncio.create_task(_pump(queue, on_change))
        await refresh_all()

        while True:
            frame = await _receive_frame(websocket)
            if frame is None:
                continue
            action = frame.get("action")
            if action == "open":
                state["contact_id"] = frame.get("contact_id")
                await run_in_threadpool(conversation.refresh)
                await _send_view(websocket, "conversation", conversation, contact_id=state["contact_id"])
            elif action == "send" and state["contact_id"]:
                await run_in_threadpool(
                    conversation.mutate, service.send_message,
                    user.id, state["contact_id"], frame.get("content", ""),
                    error_message="Failed to send message",
                )
                await _send_view(websocket, "conversation", conversation, contact_id=state["contact_id"])
    except WebSocketDisconnect:
        logger.debug(f"Messages socket closed for {user.id}")
    finally:
        await _teardown(feed, pump)


@router.websocket("/search")
async def search_socket(websocket: WebSocket, token: Optional[str] = None):
    """Debounced user search for assignee, team member and contact pickers."""
    auth = await authenticate(websocket, token)
    if not auth:
        return
    user, supabase = auth
    profiles = ProfileService(supabase)

    async def run_search(frame: Dict[str, Any]) -> None:
        query = frame.get("query", "")
        exclude = set(frame.get("exclude") or [])
        exclude_id = user.id if frame.get("exclude_self") else None
        try:
            results = await run_in_threadpool(profiles.search_profiles, query, exclude_id)
            error = None
        except Exception as e:
            logger.error(f"Error searching users: {e}")
            results, error = [], "Failed to search users"
        await websocket.send_json(jsonable_encoder({
            "type": "results",
            "query": query,
            "items": [p for p in results if p.id not in exclude],
            "error": error,
        }))

    debouncer = Debouncer(run_search)
    try:
        while True:
            frame = await _receive_frame(websocket)
            if frame is None:
                continue
            debouncer.push(frame)
    except WebSocketDisconnect:
        logger.debug(f"Search socket closed for {user.id}")
    finally:
        await _teardown(None, None, debouncer)
