# Supabase table: notifications
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

notifications (inserted by database triggers):
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (foreign key to profiles.id) - recipient
- task_id: uuid (foreign key to tasks.id, nullable)
- message_id: uuid (foreign key to messages.id, nullable)
- type: text - values: comment, status, priority, assignment, message
- content: text
- read: boolean (default: false)
- created_at: timestamptz (default: now())

RLS: users see and update only their own rows.
"""
