# Supabase table: messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

messages:
- id: uuid (primary key, default: gen_random_uuid())
- sender_id: uuid (foreign key messages_sender_id_fkey -> profiles.id)
- receiver_id: uuid (foreign key messages_receiver_id_fkey -> profiles.id)
- content: text (not null)
- read: boolean (default: false)
- created_at: timestamptz (default: now())

RLS: rows are visible to their sender and receiver; only the receiver may
flip read. A trigger inserts a "message" notification for the receiver.
"""
