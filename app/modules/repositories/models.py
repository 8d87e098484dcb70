# Supabase tables: repositories, stars
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

repositories:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- owner_id: uuid (foreign key to profiles.id, not null)
- is_private: boolean (not null, default: false)
- tags: text[] (not null, default: '{}')
- license: text (nullable) - display label, e.g. "MIT License"
- category: text (nullable) - slug, e.g. "content-creation"
- stars_count: integer (not null, default: 0)
- forks_count: integer (not null, default: 0)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
- unique constraint on (owner_id, name)

stars:
- id: uuid (primary key)
- user_id: uuid (foreign key to profiles.id, not null)
- repository_id: uuid (foreign key to repositories.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (user_id, repository_id)

RPC functions:
- increment_stars_count(repository_id uuid)
- decrement_stars_count(repository_id uuid)

stars_count is only changed through the two RPCs, called after a star row
is inserted or deleted. The calls are not transactional with the star row.
"""
