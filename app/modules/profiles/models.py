# Supabase tables: profiles, user_settings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structures:

profiles:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users, unique)
- name: text
- email: text
- phone: text
- title: text
- company: text
- address: text
- role: text (admin, inspector, viewer; default inspector)
- created_at: timestamp
- updated_at: timestamp

user_settings:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users, unique)
- preferences: jsonb (free-form UI preferences, plus backup_schedule)
- created_at: timestamp
- updated_at: timestamp
"""
