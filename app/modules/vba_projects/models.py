# Supabase tables: vba_projects, inspections, inspection_photos
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

vba_projects:
- id: uuid (primary key)
- organization_id: uuid (not null, default organization when omitted)
- project_name: text (not null)
- project_number: text (nullable)
- permit_number: text (nullable)
- address, city, state: text (nullable)
- status: text (default: 'scheduled') - values: scheduled, active, in_progress, completed, on_hold, cancelled
- inspection_type: text (nullable)
- selected_inspections: text[] (nullable) - ordered inspection sequence
- start_date, completion_date: date (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Every VBA project is mirrored into projects with the same id
(status 'scheduled' becomes 'active', permit_number falls back to project_number).

inspections:
- id: uuid (primary key)
- project_id: uuid (foreign key to vba_projects.id, not null)
- inspection_type: text (not null)
- scheduled_date: timestamp (nullable)
- inspector: text (nullable)
- status: text (default: 'scheduled') - values: scheduled, in_progress, passed, failed, cancelled
- result, notes: text (nullable)
- completed_at: timestamp (nullable)
- created_at, updated_at: timestamp

inspection_photos:
- id: uuid (primary key)
- project_id: uuid (foreign key to vba_projects.id, not null)
- inspection_id: uuid (nullable)
- category: text (nullable) - inspection type the photo documents
- url: text (not null)
- caption: text (nullable)
- created_at: timestamp (default: now())
"""
