# Supabase table: profiles
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id)
- username: text (unique, not null)
- email: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Rows are inserted by the handle_new_user() trigger on auth.users. Rows
created before the username constraint existed may still carry a NULL
username; ProfileService.ensure_username and scripts/backfill_usernames.py
fill those in.
"""
