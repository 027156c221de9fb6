import logging

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flasgger import Swagger
from marshmallow import ValidationError as SchemaValidationError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from config import get_config
from common.database import db
from common.errors import BakeryError, VALIDATION_ERROR, create_error_response
from common.response import error_response
from auth.controllers import is_session_revoked
from auth.routes import auth_bp
from models import *  # Import all models so metadata and migrations see them

from routes.product_routes import product_bp
from routes.category_routes import category_bp
from routes.cart_routes import cart_bp
from routes.inventory_routes import inventory_bp

logger = logging.getLogger(__name__)


def register_jwt_callbacks(jwt):
    """Tie JWT verification to the server-side session table."""

    @jwt.token_in_blocklist_loader
    def check_if_token_revoked(jwt_header, jwt_payload):
        return is_session_revoked(jwt_payload['jti'])


def register_error_handlers(app):
    """Map the error taxonomy onto JSON responses."""

    @app.errorhandler(BakeryError)
    def handle_bakery_error(error):
        return create_error_response(error)

    @app.errorhandler(SchemaValidationError)
    def handle_schema_error(error):
        return jsonify({
            'error': 'Invalid request data',
            'code': VALIDATION_ERROR,
            'details': error.messages
        }), 400

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.exception("Unhandled database error")
        return error_response('Internal server error', 500, 'INFRASTRUCTURE_ERROR')

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Not found', 404, 'NOT_FOUND')

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', 405, 'METHOD_NOT_ALLOWED')

    @app.errorhandler(Exception)
    def handle_error(error):
        if isinstance(error, HTTPException):
            return error_response(error.description, error.code, error.name.upper().replace(' ', '_'))
        logger.exception(f"Unhandled error: {type(error).__name__}")
        return error_response('Internal server error', 500, 'INTERNAL_ERROR')


def create_app(config_name=None):
    """Application factory."""
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))
    app.url_map.strict_slashes = False

    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Configure Swagger
    swagger_config = {
        "headers": [],
        "specs": [
            {
                "endpoint": 'apispec',
                "route": '/apispec.json',
                "rule_filter": lambda rule: True,
                "model_filter": lambda tag: True,
            }
        ],
        "static_url_path": "/flasgger_static",
        "swagger_ui": True,
        "specs_route": "/docs"
    }

    swagger_template = {
        "swagger": "2.0",
        "info": {
            "title": "Panaderia API",
            "description": "Catalog, cart and inventory API for the bakery storefront",
            "version": "1.0.0"
        },
        "securityDefinitions": {
            "Bearer": {
                "type": "apiKey",
                "name": "Authorization",
                "in": "header",
                "description": "JWT Authorization header using the Bearer scheme. The session cookie is accepted as well."
            }
        },
        "security": [
            {
                "Bearer": []
            }
        ]
    }

    Swagger(app, config=swagger_config, template=swagger_template)

    CORS(app,
         resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}},
         supports_credentials=True,
         allow_headers=["Content-Type", "Authorization", "X-CSRF-TOKEN"],
         methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
         max_age=3600)

    # Initialize extensions
    db.init_app(app)
    Migrate(app, db)
    jwt = JWTManager(app)
    register_jwt_callbacks(jwt)

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(product_bp, url_prefix='/api/products')
    app.register_blueprint(category_bp, url_prefix='/api/categories')
    app.register_blueprint(cart_bp, url_prefix='/api/cart')
    app.register_blueprint(inventory_bp, url_prefix='/api/inventory')

    register_error_handlers(app)

    @app.route('/api/health')
    def health():
        """
        Liveness and database check
        ---
        tags:
          - Health
        responses:
          200:
            description: Service and database reachable
          503:
            description: Database unreachable
        """
        try:
            db.session.execute(text('SELECT 1'))
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Health check could not reach the database")
            return jsonify({'status': 'degraded', 'database': 'unreachable'}), 503
        return jsonify({'status': 'ok', 'database': 'ok'})

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(host='0.0.0.0', port=5110)
