# Supabase tables: teams, team_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

teams:
- id: uuid (primary key, default: gen_random_uuid())
- name: text (not null)
- description: text (nullable)
- created_by: uuid (foreign key teams_created_by_fkey -> profiles.id)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())

team_members:
- id: uuid (primary key, default: gen_random_uuid())
- team_id: uuid (foreign key to teams.id, on delete cascade)
- user_id: uuid (foreign key to profiles.id)
- role: text - values: admin, member
- created_at: timestamptz (default: now())
- unique(team_id, user_id)
"""
