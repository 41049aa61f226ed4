# Supabase table: projects
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

projects:
- id: uuid (primary key) - shared with vba_projects.id for mirrored VBA projects
- organization_id: uuid (not null)
- project_name: text (not null)
- project_number, permit_number: text (nullable)
- address, city, state: text (nullable)
- status: text (default: 'active') - values: active, on_hold, completed, cancelled
- encrypted_budget: text (nullable) - Fernet token, exposed as "budget" in the API
- encrypted_notes: text (nullable) - Fernet token, exposed as "sensitive_notes" in the API
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
