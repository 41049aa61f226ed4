# Supabase table: documents
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

documents:
- id: uuid (primary key)
- project_id: uuid (nullable)
- name: text (original file name)
- file_url: text (s3:// URL or Supabase Storage public URL)
- storage_key: text (object key inside the storage bucket)
- file_type: text (extension, e.g. pdf)
- content_type: text
- file_size: integer (bytes)
- category: text (permit, plan, report, photo, other)
- uploaded_by: uuid
- created_at: timestamp
- updated_at: timestamp
"""
