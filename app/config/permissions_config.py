"""
Permissions and Roles Configuration
This config defines the permission matrix for all modules and their associated roles.
Used by the seed script to populate/update roles and permissions, and by
get_role_permissions() to resolve application roles (admin, inspector, viewer).
"""

# Define modules and their CRUD actions
MODULES = {
    "profiles": {
        "resource": "profiles",
        "actions": ["create", "read", "update", "delete"],
        "description": "User profile and settings management"
    },
    "organization": {
        "resource": "organization",
        "actions": ["read", "update"],
        "description": "Organization details"
    },
    "members": {
        "resource": "members",
        "actions": ["create", "read", "update", "delete"],
        "description": "Team member directory"
    },
    "projects": {
        "resource": "projects",
        "actions": ["create", "read", "update", "delete"],
        "description": "Construction project management"
    },
    "vba_projects": {
        "resource": "vba_projects",
        "actions": ["create", "read", "update", "delete", "bulk"],
        "description": "Virtual Building Authority inspection projects"
    },
    "inspections": {
        "resource": "inspections",
        "actions": ["create", "read", "update", "delete"],
        "description": "Inspection scheduling and photos"
    },
    "field_reports": {
        "resource": "field_reports",
        "actions": ["create", "read", "update", "delete"],
        "description": "Daily field reports"
    },
    "inspection_reports": {
        "resource": "inspection_reports",
        "actions": ["create", "read", "update", "delete", "generate"],
        "description": "Inspection, compliance and engineering reports"
    },
    "documents": {
        "resource": "documents",
        "actions": ["create", "read", "delete", "upload"],
        "description": "Project documents"
    },
    "permits": {
        "resource": "permits",
        "actions": ["read", "submit", "sync"],
        "description": "Permit portal integrations and jurisdiction submittals"
    },
    "activity_logs": {
        "resource": "activity_logs",
        "actions": ["create", "read"],
        "description": "Activity audit trail"
    },
    "backups": {
        "resource": "backups",
        "actions": ["create", "read", "restore", "schedule"],
        "description": "Database backup, restore and export"
    },
    "roles": {
        "resource": "roles",
        "actions": ["read", "assign"],
        "description": "Role and permission management"
    },
    "security": {
        "resource": "security",
        "actions": ["read"],
        "description": "Security event monitoring"
    }
}

# Role definitions per module
ROLE_TYPES = {
    "ADMIN": {
        "permissions": ["create", "read", "update", "delete"],
        "description": "Full administrative access to the module"
    },
    "VIEWER": {
        "permissions": ["read"],
        "description": "Read-only access to the module"
    }
}

# Additional permissions for specific modules
MODULE_SPECIFIC_PERMISSIONS = {
    "vba_projects": {
        "bulk": "Bulk update and delete VBA projects"
    },
    "inspection_reports": {
        "generate": "Generate PDF reports"
    },
    "documents": {
        "upload": "Upload document files"
    },
    "permits": {
        "submit": "Submit permit applications to jurisdictions",
        "sync": "Synchronize permits from portal integrations"
    },
    "backups": {
        "restore": "Restore database from a backup file",
        "schedule": "Schedule automatic backups"
    },
    "roles": {
        "assign": "Assign application roles to users"
    }
}

# Application roles stored on profiles.role, expressed as bundles of module roles
APP_ROLES = {
    "admin": [f"{name}_admin" for name in MODULES],
    "inspector": [
        "projects_admin", "vba_projects_admin", "inspections_admin",
        "field_reports_admin", "inspection_reports_admin", "documents_admin",
        "permits_admin", "activity_logs_admin",
        "profiles_viewer", "organization_viewer", "members_viewer",
    ],
    # security events stay with administrators
    "viewer": [f"{name}_viewer" for name in MODULES if name != "security"],
}

DEFAULT_APP_ROLE = "inspector"


# Generate permission matrix
def get_permission_matrix():
    """
    Returns a dictionary with all permissions and their associated roles
    Format: {
        "permissions": [
            {"name": "projects:create", "resource": "projects", "action": "create", "description": "..."},
            ...
        ],
        "roles": [
            {
                "name": "projects_admin",
                "description": "...",
                "permissions": ["projects:create", "projects:read", ...]
            },
            ...
        ]
    }
    """
    permissions = []
    roles = []

    for module_name, module_config in MODULES.items():
        resource = module_config["resource"]

        for action in module_config["actions"]:
            description = f"{action.capitalize()} {resource}"
            if module_name in MODULE_SPECIFIC_PERMISSIONS and action in MODULE_SPECIFIC_PERMISSIONS[module_name]:
                description = MODULE_SPECIFIC_PERMISSIONS[module_name][action]

            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "description": description
            })

    for module_name, module_config in MODULES.items():
        resource = module_config["resource"]

        for role_type, role_config in ROLE_TYPES.items():
            role_permissions = [
                f"{resource}:{action}"
                for action in role_config["permissions"]
                if action in module_config["actions"]
            ]

            # ADMIN also gets the module-specific actions
            if role_type == "ADMIN":
                for action in module_config["actions"]:
                    if action not in role_config["permissions"]:
                        role_permissions.append(f"{resource}:{action}")

            roles.append({
                "name": f"{resource}_{role_type.lower()}",
                "description": f"{role_config['description']} for {module_config['description']}",
                "permissions": sorted(role_permissions)
            })

    return {
        "permissions": permissions,
        "roles": roles
    }


def get_role_permissions(app_role: str) -> list:
    """Flatten an application role into its permission names."""
    module_roles = set(APP_ROLES.get(app_role) or APP_ROLES[DEFAULT_APP_ROLE])
    names = set()
    for role in PERMISSION_MATRIX["roles"]:
        if role["name"] in module_roles:
            names.update(role["permissions"])
    return sorted(names)


# Export the matrix for use in seed scripts
PERMISSION_MATRIX = get_permission_matrix()
