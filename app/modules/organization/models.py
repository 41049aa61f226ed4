# Supabase table: organizations
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (single row per deployment):

organizations:
- id: uuid (primary key)
- company_name, legal_name, tax_id, license_number: text
- founded_year: integer
- company_type, logo_url: text
- main_phone, main_email, support_email, website: text
- street_address, suite, city, state, zip_code, country: text
- number_of_employees: text
- annual_revenue: text
- primary_industry: text
- secondary_industries: text[]
- certifications: text[]
- billing_address, billing_city, billing_state, billing_zip, payment_method, billing_email: text
- timezone, date_format, currency, language: text
- created_at, updated_at: timestamp

The API accepts and returns camelCase keys for the settings form (companyName, zipCode, ...).
"""
