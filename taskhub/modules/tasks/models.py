# Supabase tables: tasks, task_history
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

tasks:
- id: uuid (primary key, default: gen_random_uuid())
- title: text (not null)
- description: text (nullable)
- status: text (not null) - values: pending, in_progress, completed
- priority: text (not null) - values: low, medium, high
- created_by: uuid (foreign key tasks_created_by_fkey -> profiles.id, not null)
- assigned_to: uuid (foreign key tasks_assigned_to_fkey -> profiles.id, nullable)
- team_id: uuid (foreign key to teams.id, nullable)
- due_date: timestamptz (nullable)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now(), bumped by trigger on update)

task_history (written by database triggers, read-only here):
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- user_id: uuid (foreign key to profiles.id)
- field_changed: text
- old_value: text (nullable)
- new_value: text (nullable)
- created_at: timestamptz (default: now())

RLS: a task is visible to its creator, its assignee, and admins/managers.
Updates are allowed to the creator, assignee (status) and admins/managers;
deletes to the creator and admins/managers. Assignment and comment
notifications are inserted by triggers.
"""
