"""
Built-in role ladder and module catalogue.

Ranks leave gaps so deployments can insert roles without renumbering.
"""
from shepherd.features.roles.table import RoleTable, build_role_table


# Module → actions understood by the application layer
MODULES: dict[str, tuple[str, ...]] = {
    "users": ("create", "read", "update", "delete", "manage_roles"),
    "attendance": ("create", "read", "update", "delete", "mark_others"),
    "ministry": ("create", "read", "update", "delete", "mark_others"),
    "tasks": ("create", "read", "update", "delete", "assign"),
    "events": ("create", "read", "update", "delete", "manage"),
    "prayers": ("create", "read", "update", "delete"),
    "announcements": ("create", "read", "update", "delete"),
    "departments": ("create", "read", "update", "delete"),
    "finances": ("create", "read", "update", "delete", "approve"),
    "reports": ("create", "read", "update", "delete", "export"),
    "analytics": ("read",),
    "audit": ("read",),
    "settings": ("read", "update", "church_settings", "user_settings"),
}


DEFAULT_ROLES = {
    "pastor": {
        "rank": 50,
        "display_name": "Pastor (Root)",
        "description": "Highest level authority with full system access",
        "permissions": {"all": True},
    },
    "admin": {
        "rank": 40,
        "display_name": "Administrator",
        "description": "Administrative privileges with user and content management",
        "permissions": {
            "users": True,
            "reports": True,
            "settings": True,
            "analytics": True,
            "audit": ["read"],
            "attendance": True,
            "ministry": True,
            "events": True,
            "announcements": True,
            "departments": True,
            "finances": ["read", "create"],
        },
    },
    "worker": {
        "rank": 30,
        "display_name": "Worker/Leader",
        "description": "Staff level access with department and task management",
        "permissions": {
            "attendance": True,
            "ministry": ["read", "create"],
            "tasks": True,
            "events": True,
            "prayers": ["read", "create"],
            "departments": ["read"],
            "reports": ["read", "create"],
        },
    },
    "member": {
        "rank": 20,
        "display_name": "Member",
        "description": "Regular member access with personal features",
        "permissions": {
            "attendance": ["read", "create"],
            "ministry": ["read", "create"],
            "events": ["read"],
            "prayers": ["read", "create"],
            "tasks_read": True,
        },
    },
    "newcomer": {
        "rank": 10,
        "display_name": "Newcomer",
        "description": "New visitor with limited access",
        "permissions": {
            "events": ["read"],
            "prayers": ["read", "create"],
        },
    },
}


def default_role_table() -> RoleTable:
    return build_role_table(DEFAULT_ROLES, version="default")
