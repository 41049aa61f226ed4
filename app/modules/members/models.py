# Supabase table: members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

members (project team directory: contractors, architects, engineers, ...):
- id: uuid (primary key)
- name: text
- email: text
- phone: text
- company: text
- role: text (free text, e.g. "Lead Architect")
- type: text (contractor, architect, engineer, inspector, owner, other)
- status: text (active, inactive, pending)
- license_number: text
- created_at: timestamp
"""
