# Supabase table: attachments, storage bucket: attachments
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

attachments:
- id: uuid (primary key)
- task_id: uuid (foreign key to tasks.id, on delete cascade)
- user_id: uuid (foreign key to profiles.id) - uploader
- file_name: text (not null) - original file name
- file_type: text (not null) - MIME type
- file_url: text (not null) - public URL in the attachments bucket
- file_size: bigint (nullable)
- created_at: timestamptz (default: now())

Storage bucket "attachments": objects live under {task_id}/{random}.{ext}.
Rows and objects are written independently; a failed file in a batch does
not remove the files or rows written by its siblings.
"""
