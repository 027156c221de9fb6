from common.errors import ValidationError


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def require_positive(quantity, message="A valid quantity greater than zero is required"):
    """Reject anything that is not an integer greater than zero."""
    if not _is_int(quantity) or quantity <= 0:
        raise ValidationError(message)
    return quantity


def require_non_negative(quantity, message="Invalid quantity"):
    """Reject anything that is not an integer of zero or more."""
    if not _is_int(quantity) or quantity < 0:
        raise ValidationError(message)
    return quantity
