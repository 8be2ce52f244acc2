"""
Permissions and Roles Configuration
Defines the permission matrix for every module and which profile role holds
which permission. Profiles carry a single role (student or admin); routes
declare the permission they need and the dependency layer resolves it here.
"""

# Define modules and their actions
MODULES = {
    "profiles": {
        "resource": "profiles",
        "actions": ["read", "update", "list"],
        "description": "Student profile management"
    },
    "coins": {
        "resource": "coins",
        "actions": ["read", "grant"],
        "description": "Coin ledger"
    },
    "books": {
        "resource": "books",
        "actions": ["read", "create", "update", "delete"],
        "description": "Book catalog and inventory"
    },
    "borrows": {
        "resource": "borrows",
        "actions": ["request", "read", "approve", "issue", "return"],
        "description": "Borrow requests, issues and returns"
    },
    "addition_requests": {
        "resource": "addition_requests",
        "actions": ["create", "read", "approve"],
        "description": "Suggestions for new catalog books"
    },
    "reviews": {
        "resource": "reviews",
        "actions": ["create", "read", "approve"],
        "description": "Book reviews and summaries"
    },
    "reading_goals": {
        "resource": "reading_goals",
        "actions": ["read", "update"],
        "description": "Monthly reading goals"
    },
    "analytics": {
        "resource": "analytics",
        "actions": ["student", "admin"],
        "description": "Dashboard statistics"
    }
}

# Actions a student holds per module; admins hold every action
STUDENT_ACTIONS = {
    "profiles": ["read", "update"],
    "coins": ["read"],
    "books": ["read"],
    "borrows": ["request", "read", "return"],
    "addition_requests": ["create", "read"],
    "reviews": ["create", "read"],
    "reading_goals": ["read", "update"],
    "analytics": ["student"],
}

# Descriptions that read better than the generated "<Action> <resource>"
MODULE_SPECIFIC_PERMISSIONS = {
    "coins": {
        "grant": "Grant bonuses or apply penalties to a student's coins"
    },
    "borrows": {
        "request": "Request to borrow a book",
        "approve": "Approve or reject borrow and return requests",
        "issue": "Issue a book directly to a student",
        "return": "Request the return of a borrowed book"
    },
    "addition_requests": {
        "approve": "Approve or reject book addition requests"
    },
    "reviews": {
        "approve": "Approve reviews and award coins"
    },
    "analytics": {
        "student": "View personal reading statistics",
        "admin": "View library-wide analytics"
    }
}

ROLES = ["admin", "student"]


def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the permissions per role
    Format: {
        "permissions": [
            {"name": "books:create", "resource": "books", "action": "create", "description": "..."},
            ...
        ],
        "roles": {
            "admin": ["books:create", "books:read", ...],
            "student": ["books:read", ...]
        }
    }
    """
    permissions = []
    student_permissions = []

    for module_name, module_config in MODULES.items():
        resource = module_config["resource"]

        for action in module_config["actions"]:
            permission_name = f"{resource}:{action}"
            description = f"{action.capitalize()} {resource}"

            if module_name in MODULE_SPECIFIC_PERMISSIONS and action in MODULE_SPECIFIC_PERMISSIONS[module_name]:
                description = MODULE_SPECIFIC_PERMISSIONS[module_name][action]

            permissions.append({
                "name": permission_name,
                "resource": resource,
                "action": action,
                "description": description
            })

            if action in STUDENT_ACTIONS.get(module_name, []):
                student_permissions.append(permission_name)

    return {
        "permissions": permissions,
        "roles": {
            "admin": [p["name"] for p in permissions],
            "student": student_permissions
        }
    }


PERMISSION_MATRIX = get_permission_matrix()


def get_role_permissions(role: str):
    """Permission names held by a role; unknown roles hold none."""
    return PERMISSION_MATRIX["roles"].get(role, [])


def describe_role_permissions(role: str):
    """Full permission entries (with descriptions) held by a role."""
    held = set(get_role_permissions(role))
    return [p for p in PERMISSION_MATRIX["permissions"] if p["name"] in held]
