# Supabase tables: field_reports and child tables
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

field_reports:
- id: uuid (primary key)
- organization_id: uuid (not null)
- project_id: uuid (foreign key to projects.id, nullable)
- report_number: text (nullable)
- report_date: date (nullable)
- weather: text (nullable) - e.g. "Clear, 80°F"
- summary: text (nullable)
- status: text (default: 'draft') - values: draft, submitted, approved, rejected
- created_by: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Child tables, each with id, field_report_id (foreign key to field_reports.id) and created_at:
- field_report_work_completed: description, location, quantity
- field_report_issues: description, severity, resolved
- field_report_safety_observations: observation, action_taken
- field_report_personnel: name, company, role, hours
- field_report_photos: url, caption
"""
