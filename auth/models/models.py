import bcrypt
from datetime import datetime, timezone
from enum import Enum

from flask import current_app

from common.database import db, BaseModel

# Compared against when the username does not exist so that both login
# failure paths spend the same time in bcrypt.
_DUMMY_HASH = bcrypt.hashpw(b'not-a-real-password', bcrypt.gensalt(rounds=4))


class CustomerRole(Enum):
    CUSTOMER = 'customer'
    ADMIN = 'admin'


class Customer(BaseModel):
    """Customer account. Admins are customers with the admin role."""
    __tablename__ = 'customers'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(150), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    role = db.Column(db.Enum(CustomerRole, values_callable=lambda e: [m.value for m in e]),
                     default=CustomerRole.CUSTOMER, nullable=False)
    last_login = db.Column(db.DateTime, nullable=True)

    # Relationships
    sessions = db.relationship('CustomerSession', back_populates='customer', cascade='all, delete-orphan')
    cart_items = db.relationship('CartItem', back_populates='customer', lazy='dynamic')

    def set_password(self, password):
        """Hash password with a per-password salt."""
        rounds = current_app.config.get('BCRYPT_ROUNDS', 12)
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds)).decode('utf-8')

    def check_password(self, password):
        """Verify password."""
        if not self.password_hash:
            return False
        return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))

    @staticmethod
    def burn_password_check(password):
        """Run a throwaway bcrypt comparison for unknown usernames."""
        bcrypt.checkpw(password.encode('utf-8'), _DUMMY_HASH)
        return False

    def update_last_login(self):
        self.last_login = datetime.now(timezone.utc)

    @classmethod
    def get_by_username(cls, username):
        """Get customer by username."""
        return cls.query.filter_by(username=username).first()

    def serialize(self):
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "email": self.email,
            "role": self.role.value
        }


class CustomerSession(BaseModel):
    """Server-side record of an issued session token, used for logout."""
    __tablename__ = 'customer_sessions'

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(64), nullable=False, unique=True, index=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    revoked_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    customer = db.relationship('Customer', back_populates='sessions')

    @classmethod
    def get_by_jti(cls, jti):
        """Get session by token identifier."""
        return cls.query.filter_by(jti=jti).first()

    def is_valid(self, now=None):
        now = now or datetime.now(timezone.utc).replace(tzinfo=None)
        expires_at = self.expires_at.replace(tzinfo=None) if self.expires_at else None
        return self.revoked_at is None and expires_at is not None and expires_at > now

    def revoke(self):
        """Revoke session. Revoking twice keeps the first timestamp."""
        if self.revoked_at is None:
            self.revoked_at = datetime.now(timezone.utc)
