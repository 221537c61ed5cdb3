# Overview: Role names and their descriptions, used by the CLI bootstrap.

ROLE_USER = "ROLE_USER"  # Implicit; every user holds it, never stored
ROLE_SUPER_ADMIN = "ROLE_SUPER_ADMIN"
ROLE_RESTAURANT_OWNER = "ROLE_RESTAURANT_OWNER"
ROLE_EDITOR = "ROLE_EDITOR"

# (name, description)
ROLE_DEFINITIONS = [
    (ROLE_SUPER_ADMIN, "Full system administrator"),
    (ROLE_RESTAURANT_OWNER, "Restaurant owner with tenant-scoped access"),
    (ROLE_EDITOR, "Menu editor with tenant-scoped access"),
]

# Roles allowed to submit products for approval
MENU_EDITOR_ROLES = frozenset({ROLE_RESTAURANT_OWNER, ROLE_EDITOR})
