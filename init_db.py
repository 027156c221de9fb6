"""
Database initialization script.
Run this script to create the database, the tables and the seed data.
"""

import os

from dotenv import load_dotenv
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from app import create_app
from common.database import db
from auth.models import Customer, CustomerRole
from models.category import Category

# Load environment variables
load_dotenv()

DEFAULT_CATEGORIES = [
    {'name': 'Pan dulce', 'description': 'Conchas, cuernitos, orejas and other sweet breads'},
    {'name': 'Pan salado', 'description': 'Bolillos, teleras and savory breads'},
    {'name': 'Pasteles', 'description': 'Whole cakes and slices'},
    {'name': 'Galletas', 'description': 'Cookies and small pastries'},
    {'name': 'Temporada', 'description': 'Seasonal specialties such as pan de muerto and rosca'},
]


def create_database(uri):
    """Create the MySQL database if it doesn't exist."""
    url = make_url(uri)
    if not url.drivername.startswith('mysql'):
        print(f"Skipping database creation for {url.drivername}.")
        return

    db_name = url.database
    engine = create_engine(url.set(database=None))
    try:
        with engine.connect() as conn:
            conn.execute(text(f"CREATE DATABASE IF NOT EXISTS `{db_name}` CHARACTER SET utf8mb4"))
            conn.commit()
        print(f"Database '{db_name}' created or already exists.")
    except SQLAlchemyError as err:
        print(f"Error: {err}")
    finally:
        engine.dispose()


def init_categories():
    """Initialize the default bakery categories."""
    print("\nInitializing Categories:")
    print("------------------------")

    for category_data in DEFAULT_CATEGORIES:
        existing = Category.get_by_name(category_data['name'])
        if not existing:
            db.session.add(Category(**category_data))
            print(f"Created category: {category_data['name']}")
        else:
            print(f"Category {category_data['name']} already exists")

    db.session.commit()
    print("Categories initialized successfully.")


def init_admin(app):
    """Create the admin account if it doesn't exist."""
    print("\nInitializing Admin Account:")
    print("---------------------------")

    username = app.config.get('ADMIN_USERNAME')
    password = app.config.get('ADMIN_PASSWORD')
    if not password:
        print("ADMIN_PASSWORD is not set; skipping admin creation.")
        return

    admin = Customer.get_by_username(username)
    if admin:
        print(f"Admin user '{username}' already exists.")
        return

    admin = Customer(username=username, full_name='Administrador', role=CustomerRole.ADMIN)
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    print(f"Admin user '{username}' created.")


def init_database():
    """Initialize the database with all tables and initial data."""
    app = create_app(os.getenv('FLASK_ENV'))
    with app.app_context():
        print("Initializing Database:")
        print("=====================")

        create_database(app.config['SQLALCHEMY_DATABASE_URI'])

        print("\nCreating tables...")
        db.create_all()
        print("All tables created successfully.")

        init_categories()
        init_admin(app)

        print("\nDatabase initialization completed successfully!")


if __name__ == "__main__":
    init_database()
