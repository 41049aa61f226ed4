# Supabase table: activity_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

activity_logs:
- id: uuid (primary key)
- user_id: text (nullable) - auth user id, or 'system' for background jobs
- action: text (not null) - e.g. created_report, bulk_delete_vba_projects, backup_created, global_search
- entity_type: text (nullable) - e.g. inspection_report, vba_project, backup
- entity_id: text (nullable)
- metadata: jsonb (nullable)
- created_at: timestamp (default: now())
"""
