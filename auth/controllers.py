from datetime import datetime, timezone
import logging

from flask import current_app
from flask_jwt_extended import create_access_token, get_jti
from sqlalchemy.exc import IntegrityError

from common.database import db, transaction
from common.errors import ValidationError, ConflictError, AuthenticationError, NotFoundError
from auth.models import Customer, CustomerSession, CustomerRole

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


def register_customer(data):
    """Register a new customer account."""
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    if not username or not password:
        raise ValidationError("Username and password are required")

    min_length = current_app.config.get('MIN_PASSWORD_LENGTH', 6)
    if len(password) < min_length:
        raise ValidationError(f"Password must be at least {min_length} characters long")

    if Customer.get_by_username(username):
        raise ConflictError("Username already exists")

    with transaction("register customer"):
        customer = Customer(
            username=username,
            full_name=data.get('full_name'),
            email=data.get('email'),
            role=CustomerRole.CUSTOMER
        )
        customer.set_password(password)
        db.session.add(customer)
        try:
            db.session.flush()
        except IntegrityError as e:
            raise ConflictError("Username already exists") from e

    logger.info(f"Customer registered: id={customer.id} username={username}")
    return {"id": customer.id}


def login_customer(username, password):
    """
    Check credentials and open a session.

    Unknown usernames and wrong passwords fail with the same error.

    Returns:
        tuple: (access token, customer dict)
    """
    if not username or not password:
        raise ValidationError("Username and password are required")

    customer = Customer.get_by_username(username)
    if customer is None:
        Customer.burn_password_check(password)
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not customer.check_password(password):
        raise AuthenticationError(INVALID_CREDENTIALS)

    access_token = create_access_token(
        identity=str(customer.id),
        additional_claims={"role": customer.role.value, "username": customer.username}
    )
    expires_at = datetime.now(timezone.utc).replace(tzinfo=None) + current_app.config['JWT_ACCESS_TOKEN_EXPIRES']

    with transaction("open session"):
        db.session.add(CustomerSession(
            jti=get_jti(access_token),
            customer_id=customer.id,
            expires_at=expires_at
        ))
        customer.update_last_login()

    logger.info(f"Customer logged in: id={customer.id}")
    return access_token, customer.serialize()


def logout_customer(jti):
    """Revoke the session identified by `jti`. Unknown or already revoked sessions are a no-op."""
    if not jti:
        return
    with transaction("close session"):
        session = CustomerSession.get_by_jti(jti)
        if session:
            session.revoke()


def is_session_revoked(jti):
    """Used by the JWT blocklist loader: anything without a live session row is rejected."""
    session = CustomerSession.get_by_jti(jti)
    return session is None or not session.is_valid()


def get_profile(customer_id):
    customer = Customer.get_by_id(int(customer_id))
    if not customer:
        raise NotFoundError("User not found")
    return customer.serialize()


def check_session(claims):
    """Describe the session behind already-verified JWT claims, or the lack of one."""
    if not claims:
        return {"authenticated": False}
    return {
        "authenticated": True,
        "user_id": int(claims['sub']),
        "username": claims.get('username'),
        "role": claims.get('role')
    }
