import logging
from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

from common.errors import BakeryError, InfrastructureError

logger = logging.getLogger(__name__)

# Initialize the database instance
db = SQLAlchemy()

# Base model with common fields for all tables
class BaseModel(db.Model):
    """Base model with common fields for all tables."""
    __abstract__ = True

    # No default ID field - each model will define its own primary key

    created_at = db.Column(db.DateTime, default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, default=db.func.current_timestamp(),
                          onupdate=db.func.current_timestamp())

    @classmethod
    def get_by_id(cls, id):
        """Get a record by primary key."""
        return db.session.get(cls, id)


@contextmanager
def transaction(action):
    """
    Run a block of statements as one atomic unit on the request's connection.

    Commits when the block finishes, rolls back on any error. Business errors
    propagate unchanged; database failures are logged and surfaced as a
    generic InfrastructureError.

    Args:
        action (str): Short description used in log and error messages
    """
    try:
        yield db.session
        db.session.commit()
    except BakeryError as e:
        db.session.rollback()
        logger.warning(f"{action} rejected: {e.message}")
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception(f"Database error while trying to {action}")
        raise InfrastructureError(f"Could not {action}") from e
    except Exception:
        db.session.rollback()
        raise
