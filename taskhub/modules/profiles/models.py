# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- full_name: text (not null)
- role: text (not null, default: 'worker') - values: admin, manager, worker
- avatar_url: text (nullable)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())

Storage bucket "avatars" holds profile pictures under avatars/{user_id}-{random}.{ext}.

Note: the application-level profile is distinct from the auth identity in
auth.users. Role only decides which views are offered; row access is
enforced by RLS policies.
"""
