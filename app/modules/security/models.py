# Supabase table: security_events
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

security_events:
- id: uuid (primary key)
- event_type: text (not null) - failed_login, successful_login, brute_force_detected
- severity: text (not null) - low, medium, high, critical
- description: text (nullable)
- user_id: text (nullable) - auth user id when known
- email: text (nullable) - login email for authentication events
- source_ip: text (nullable)
- user_agent: text (nullable)
- endpoint: text (nullable)
- metadata: jsonb (nullable)
- status: text (default: 'active') - active, investigating, resolved, false_positive
- created_at: timestamp (default: now())
"""
