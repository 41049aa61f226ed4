# Supabase tables: inspection_reports, project_information
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# PDF rendering lives in the generator package and needs no tables.

"""
Expected Supabase table structure:

inspection_reports:
- id: uuid (primary key)
- project_id: uuid (foreign key to vba_projects.id, not null)
- report_type: text (not null) - values: inspection, compliance, safety_incident, material_defect, engineering
- report_title: text (nullable)
- report_sequence: text (nullable) - zero padded to 3 in file names
- report_date: date (nullable)
- status: text (not null, default: 'draft') - values: draft, final
- generated_by: text (nullable) - auth user id
- file_url: text (nullable)
- data: jsonb (nullable) - form payload used to render the PDF
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

project_information:
- id: uuid (primary key)
- project_id: uuid (unique, foreign key to vba_projects.id)
- owner_name, contractor_name, architect_name, engineer_name: text (nullable)
- permit_number, job_number: text (nullable)
- details: jsonb (nullable)
- updated_at: timestamp (nullable)
"""
