# Supabase table: task_chat_messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

task_chat_messages:
- id: uuid (primary key, default: gen_random_uuid())
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- sender_id: uuid (foreign key to profiles.id)
- content: text (not null)
- created_at: timestamptz (default: now())

Published to supabase_realtime; clients subscribe to INSERTs filtered by task_id.
"""
