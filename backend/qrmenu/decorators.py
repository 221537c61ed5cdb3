# Overview: Request and capability decorators for API routes.

from functools import wraps

from .errors import AccessDenied, AuthenticationFailed
from .request_context import get_request_context
from .services import permission_service


def require_auth(f):
    """
    Require an authenticated principal.

    The principal itself is resolved by the before_request pipeline
    (request_context.py); this only refuses anonymous callers.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not get_request_context().is_authenticated:
            raise AuthenticationFailed("Authentication required.")
        return f(*args, **kwargs)

    return decorated_function


def require_capability(action):
    """
    Require a subject-less capability (the SuperAdminAction family).

    Use after @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            permission_service.deny_access_unless_granted(action, None, get_request_context().principal)
            return f(*args, **kwargs)

        return decorated_function

    return decorator


def require_restaurant(f):
    """
    Require a selected restaurant for tenant-owned routes.

    Super-admins pass without one. Anyone else without a restaurant would
    get an unrestricted scope, so they are refused here.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        principal = get_request_context().principal
        if principal is None:
            raise AuthenticationFailed("Authentication required.")
        if not principal.is_super_admin and principal.restaurant_id is None:
            raise AccessDenied("No restaurant selected.")
        return f(*args, **kwargs)

    return decorated_function
