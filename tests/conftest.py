import pytest

from app import create_app
from common.database import db
from auth.models import Customer, CustomerRole
from models.category import Category

ADMIN_PASSWORD = 'horno-admin-1'
CUSTOMER_PASSWORD = 'concha123'


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _create_customer(app, username, password, role=CustomerRole.CUSTOMER):
    with app.app_context():
        customer = Customer(username=username, full_name=username.title(), role=role)
        customer.set_password(password)
        db.session.add(customer)
        db.session.commit()
        return customer.id


def login(client, username, password):
    response = client.post('/api/auth/login', json={'username': username, 'password': password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()['data']


@pytest.fixture
def admin_client(app):
    _create_customer(app, 'admin', ADMIN_PASSWORD, CustomerRole.ADMIN)
    client = app.test_client()
    login(client, 'admin', ADMIN_PASSWORD)
    return client


@pytest.fixture
def make_customer_client(app):
    """Factory returning a logged-in test client for a new customer."""
    def _make(username='ana'):
        _create_customer(app, username, CUSTOMER_PASSWORD)
        client = app.test_client()
        login(client, username, CUSTOMER_PASSWORD)
        return client
    return _make


@pytest.fixture
def customer_client(make_customer_client):
    return make_customer_client('ana')


@pytest.fixture
def category_id(app):
    with app.app_context():
        category = Category(name='Pan dulce', description='Conchas y cuernitos')
        db.session.add(category)
        db.session.commit()
        return category.category_id


@pytest.fixture
def make_product(admin_client):
    """Factory creating a product through the admin API and returning its id."""
    def _make(name='Concha', price=12.5, stock=10, **extra):
        payload = {'name': name, 'price': price, 'stock': stock}
        payload.update(extra)
        response = admin_client.post('/api/products', json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()['data']['product_id']
    return _make
