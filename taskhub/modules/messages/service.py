import logging
from typing import Dict, List

from fastapi import HTTPException
from supabase import Client

from taskhub.modules.messages.schemas import MessageResponse
from taskhub.modules.profiles.schemas import Profile

logger = logging.getLogger(__name__)

MESSAGE_SELECT = """
    *,
    sender_profile:profiles!messages_sender_id_fkey(*),
    receiver_profile:profiles!messages_receiver_id_fkey(*)
"""


def conversation_filter(user_id: str, contact_id: str) -> str:
    """PostgREST or() filter matching both directions of a conversation."""
    return (
        f"and(sender_id.eq.{user_id},receiver_id.eq.{contact_id}),"
        f"and(sender_id.eq.{contact_id},receiver_id.eq.{user_id})"
    )


class MessageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_contacts(self, user_id: str) -> List[Profile]:
        """Everyone the user has exchanged messages with, most recent first.

        Sent counterparts are merged before received ones; the first
        occurrence of a profile wins.
        """
        try:
            sent = self.supabase.table("messages")\
                .select("receiver_id, receiver_profile:profiles!messages_receiver_id_fkey(*)")\
                .eq("sender_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            received = self.supabase.table("messages")\
                .select("sender_id, sender_profile:profiles!messages_sender_id_fkey(*)")\
                .eq("receiver_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching contacts for {user_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load contacts")

        contacts: Dict[str, Profile] = {}
        for rows, id_key, profile_key in (
            (sent.data or [], "receiver_id", "receiver_profile"),
            (received.data or [], "sender_id", "sender_profile"),
        ):
            for row in rows:
                profile = row.get(profile_key)
                if profile and row[id_key] not in contacts:
                    contacts[row[id_key]] = Profile(**profile)
        return list(contacts.values())

    def get_conversation(self, user_id: str, contact_id: str) -> List[MessageResponse]:
        """Messages between two users in send order; marks the contact's unread messages read."""
        try:
            result = self.supabase.table("messages")\
                .select(MESSAGE_SELECT)\
                .or_(conversation_filter(user_id, contact_id))\
                .order("created_at")\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching conversation {user_id}/{contact_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to load messages")

        try:
            self.supabase.table("messages")\
                .update({"read": True})\
                .eq("receiver_id", user_id)\
                .eq("sender_id", contact_id)\
                .eq("read", False)\
                .execute()
        except Exception as e:
            logger.error(f"Error marking messages from {contact_id} as read: {e}")

        return [MessageResponse(**row) for row in result.data or []]

    def send_message(self, sender_id: str, receiver_id: str, content: str) -> MessageResponse:
        """Send a direct message"""
        content = (content or "").strip()
        if not content:
            raise HTTPException(status_code=400, detail="Message cannot be empty")
        try:
            result = self.supabase.table("messages").insert({
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "content": content,
            }).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to send message")

            return MessageResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error sending message to {receiver_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to send message")

    def unread_count(self, user_id: str) -> int:
        """Unread messages addressed to the user (navbar badge)"""
        try:
            result = self.supabase.table("messages")\
                .select("*", count="exact", head=True)\
                .eq("receiver_id", user_id)\
                .eq("read", False)\
                .execute()
            return result.count or 0
        except Exception as e:
            logger.error(f"Error fetching unread messages count: {e}")
            raise HTTPException(status_code=500, detail="Failed to load unread messages")
