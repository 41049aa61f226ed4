# Supabase tables: permissions, roles, role_permissions
# This file documents the expected database schema
# Rows are seeded from app/config/permissions_config.py by app/scripts/seed_permissions_roles.py

"""
Expected Supabase table structure:

permissions:
- id: uuid (primary key)
- name: text (not null, unique) - e.g., "vba_projects:bulk", "inspection_reports:generate"
- resource: text (not null) - e.g., "vba_projects", "backups", "permits"
- action: text (not null) - e.g., "read", "create", "restore", "sync"
- description: text (nullable)
- created_at: timestamp (default: now())

roles (module roles, e.g. "projects_admin", "projects_viewer"):
- id: uuid (primary key)
- name: text (not null, unique)
- description: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

role_permissions:
- id: uuid (primary key)
- role_id: uuid (foreign key to roles.id, not null)
- permission_id: uuid (foreign key to permissions.id, not null)
- created_at: timestamp (default: now())
- unique constraint on (role_id, permission_id)

The application role on profiles.role (admin, inspector, viewer) is a bundle of
module roles, see APP_ROLES.
"""
