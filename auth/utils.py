from functools import wraps

from flask import g
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from auth.models import CustomerRole
from common.errors import NotAuthenticatedError, AuthorizationError


def _load_session():
    """Verify the session token and expose identity and role on `g`."""
    try:
        verify_jwt_in_request()
    except (JWTExtendedException, PyJWTError) as e:
        raise NotAuthenticatedError("You must log in to access this resource") from e

    g.customer_id = int(get_jwt_identity())
    g.customer_role = get_jwt().get('role')
    return g.customer_id, g.customer_role


def role_required(required_roles):
    """Decorator to check the session role before the view runs."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            _, role = _load_session()
            if role not in required_roles:
                raise AuthorizationError("Insufficient permissions")
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def session_required(fn):
    """Decorator for endpoints open to any authenticated identity."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        _load_session()
        return fn(*args, **kwargs)
    return wrapper


def admin_required(fn):
    """Decorator for endpoints that require the admin role."""
    return role_required([CustomerRole.ADMIN.value])(fn)


def customer_required(fn):
    """Decorator for endpoints open to customers and admins."""
    return role_required([CustomerRole.CUSTOMER.value, CustomerRole.ADMIN.value])(fn)
