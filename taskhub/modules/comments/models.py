# Supabase table: comments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

comments:
- id: uuid (primary key, default: gen_random_uuid())
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- user_id: uuid (foreign key to profiles.id)
- content: text (not null)
- created_at: timestamptz (default: now())

A trigger inserts a "comment" notification for the task's other participant.
"""
