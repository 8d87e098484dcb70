# Supabase table: prompts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

prompts:
- id: uuid (primary key)
- repository_id: uuid (foreign key to repositories.id, not null)
- name: text (not null)
- content: text (not null) - may contain {{PLACEHOLDER}} variables
- description: text (not null, default: '')
- file_path: text (not null), e.g. "welcome-email.md"
- size: integer (not null) - UTF-8 byte length of content
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Only the owner of the parent repository may insert, update or delete rows.
"""
