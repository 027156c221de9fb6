# common/errors.py
"""
Error taxonomy for the bakery backend.

Controllers raise these; the application factory turns them into JSON
responses with the status code each class carries.
"""
from flask import jsonify

# Error code constants
VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
FORBIDDEN = "FORBIDDEN"
CONFLICT = "CONFLICT"
INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
PRODUCT_INACTIVE = "PRODUCT_INACTIVE"
INFRASTRUCTURE_ERROR = "INFRASTRUCTURE_ERROR"


class BakeryError(Exception):
    """Base class for every expected, caller-recoverable failure."""
    code = VALIDATION_ERROR
    status_code = 400

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(BakeryError):
    code = VALIDATION_ERROR
    status_code = 400


class NotFoundError(BakeryError):
    code = NOT_FOUND
    status_code = 404


class AuthenticationError(BakeryError):
    code = AUTHENTICATION_FAILED
    status_code = 401


class NotAuthenticatedError(AuthenticationError):
    """No valid session is attached to the request."""
    code = NOT_AUTHENTICATED


class AuthorizationError(BakeryError):
    code = FORBIDDEN
    status_code = 403


class ConflictError(BakeryError):
    code = CONFLICT
    status_code = 409


class InsufficientStockError(BakeryError):
    code = INSUFFICIENT_STOCK
    status_code = 409

    def __init__(self, available, message=None):
        super().__init__(
            message or f"Insufficient stock. Only {available} units available",
            details={'available': available}
        )
        self.available = available


class ProductInactiveError(BakeryError):
    code = PRODUCT_INACTIVE
    status_code = 400


class InfrastructureError(BakeryError):
    """Persistence gateway unavailable or schema mismatch. Message stays generic."""
    code = INFRASTRUCTURE_ERROR
    status_code = 500


def create_error_response(error):
    """
    Create a structured error response from a BakeryError.

    Args:
        error: BakeryError instance

    Returns:
        tuple: (jsonify response, status_code)
    """
    response = {
        'error': error.message,
        'code': error.code
    }

    if error.details:
        response['details'] = error.details

    return jsonify(response), error.status_code
