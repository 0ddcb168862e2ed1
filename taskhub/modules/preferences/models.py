# Supabase table: app_settings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

app_settings (zero or one row):
- id: uuid (primary key, default: gen_random_uuid())
- app_name: text (default: 'TaskManager')
- primary_color: text (default: '#3b82f6')
- logo_url: text (nullable)

When the table is empty the defaults above are served.

Theme preference is not stored in Supabase: the per-user darkMode flag
lives in the local key/value store (taskhub.core.local_storage).
"""
