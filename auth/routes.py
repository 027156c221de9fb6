from flask import Blueprint, request, jsonify
from flask_jwt_extended import (
    verify_jwt_in_request, get_jwt, get_jwt_identity, set_access_cookies, unset_jwt_cookies
)
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from auth.controllers import register_customer, login_customer, logout_customer, check_session, get_profile
from auth.utils import session_required
from common.response import success_response
from schemas.auth_schemas import RegisterCustomerSchema, LoginSchema

# Create auth blueprint
auth_bp = Blueprint('auth', __name__)


def _optional_session():
    """Return the current JWT claims, or None when no valid session is attached."""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return None
    return get_jwt() or None


@auth_bp.route('/register', methods=['POST'])
def register():
    """
    Register a new customer
    ---
    tags:
      - Authentication
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - username
            - password
          properties:
            username:
              type: string
            password:
              type: string
              minLength: 6
            full_name:
              type: string
            email:
              type: string
    responses:
      201:
        description: Customer registered
      400:
        description: Missing username or password, or password too short
      409:
        description: Username already exists
    """
    data = RegisterCustomerSchema().load(request.get_json(silent=True) or {})
    result = register_customer(data)
    return success_response("User registered successfully", result, 201)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Log in and open a session
    ---
    tags:
      - Authentication
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required:
            - username
            - password
          properties:
            username:
              type: string
            password:
              type: string
    responses:
      200:
        description: Session opened; the session cookie is set on the response
      401:
        description: Invalid username or password
    """
    data = LoginSchema().load(request.get_json(silent=True) or {})
    access_token, user = login_customer(data['username'], data['password'])

    response, status_code = success_response("Login successful", {"user": user, "access_token": access_token})
    set_access_cookies(response, access_token)
    return response, status_code


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """
    Close the current session (idempotent)
    ---
    tags:
      - Authentication
    responses:
      200:
        description: Session closed, or there was none
    """
    claims = _optional_session()
    logout_customer(claims.get('jti') if claims else None)

    response, status_code = success_response("Logout successful")
    unset_jwt_cookies(response)
    return response, status_code


@auth_bp.route('/check', methods=['GET'])
def check():
    """
    Report whether the request carries a valid session
    ---
    tags:
      - Authentication
    responses:
      200:
        description: Session status
    """
    return jsonify(check_session(_optional_session()))


@auth_bp.route('/profile', methods=['GET'])
@session_required
def profile():
    """
    Get the logged-in customer's profile
    ---
    tags:
      - Authentication
    responses:
      200:
        description: Profile
      401:
        description: Not authenticated
    """
    return success_response("Profile retrieved", get_profile(get_jwt_identity()))
