# Supabase tables: permits, portal_credentials, permit_portal_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py / portal.py

"""
Expected Supabase table structures:

permits (permit records synchronized from jurisdiction portals):
- id: uuid (primary key)
- permit_number: text
- jurisdiction: text
- status: text (submitted, under_review, approved, rejected, issued, closed, on_hold)
- portal_status: text (status text as reported by the portal)
- last_synced: timestamp
- data: jsonb (full PermitData document)
- unique (jurisdiction, permit_number)

portal_credentials:
- id: uuid (primary key)
- jurisdiction: text
- provider: text (tyler, accela, cityview, citizenserve, viewpoint, custom)
- api_url: text
- api_key, client_id, client_secret, username, password: text
- sandbox: boolean
- active: boolean
- created_at, updated_at: timestamp

permit_portal_logs:
- id: uuid (primary key)
- jurisdiction: text
- provider: text
- action: text (authentication, permit_submission, inspection_scheduled, document_uploaded)
- details: jsonb
- timestamp: timestamp
"""
