"""Checkout turns reserved cart rows into stock exits."""
import pytest

from auth.models import Customer
from common.errors import ConflictError
from controllers.cart_controller import CartController
from models.cart import CartItem
from models.stock_movement import StockExit
from tests.test_cart import StaleRows, _add, _cart

SHIPPING = {
    'address': 'Av. Juarez 120',
    'city': 'Oaxaca',
    'postal_code': '68000',
    'payment_method': 'efectivo',
    'notes': 'Tocar el timbre'
}


def test_checkout_creates_exits_and_empties_cart(admin_client, customer_client, make_product):
    concha = make_product('Concha', price=12.5, stock=10)
    rosca = make_product('Rosca', price=250, stock=2)
    _add(customer_client, concha, 4)
    _add(customer_client, rosca, 1)

    response = customer_client.post('/api/cart/checkout', json=SHIPPING)

    assert response.status_code == 201
    summary = response.get_json()['data']
    assert summary['order_reference'].startswith('ORDER-')
    assert summary['item_count'] == 5
    assert summary['subtotal'] == 300.0
    assert summary['shipping_fee'] == 50.0
    assert summary['total'] == 350.0
    assert summary['shipping']['city'] == 'Oaxaca'

    assert _cart(customer_client)['items'] == []
    inventory = admin_client.get(f'/api/inventory/{concha}').get_json()['data']
    assert inventory['current_quantity'] == 6
    assert inventory['reserved_quantity'] == 0
    latest = admin_client.get(f'/api/inventory/{concha}/movements').get_json()['data'][0]
    assert (latest['type'], latest['quantity'], latest['reference']) == ('exit', 4, summary['order_reference'])


def test_checkout_requires_shipping_fields(customer_client, make_product):
    _add(customer_client, make_product('Concha', stock=10), 1)

    response = customer_client.post('/api/cart/checkout', json={'address': 'Av. Juarez 120'})

    assert response.status_code == 400
    assert len(_cart(customer_client)['items']) == 1


def test_checkout_of_empty_cart_is_rejected(customer_client):
    response = customer_client.post('/api/cart/checkout', json=SHIPPING)

    assert response.status_code == 400
    assert response.get_json()['error'] == 'Your cart is empty'


def test_checkout_with_archived_product_writes_nothing(admin_client, customer_client, make_product):
    concha = make_product('Concha', stock=10)
    oreja = make_product('Oreja', stock=10)
    _add(customer_client, concha, 2)
    _add(customer_client, oreja, 2)
    admin_client.delete(f'/api/products/{oreja}')

    response = customer_client.post('/api/cart/checkout', json=SHIPPING)

    assert response.status_code == 400
    assert response.get_json()['code'] == 'PRODUCT_INACTIVE'
    assert admin_client.get(f'/api/inventory/{concha}').get_json()['data']['current_quantity'] == 10
    assert len(admin_client.get(f'/api/inventory/{concha}/movements').get_json()['data']) == 1


def test_checkout_fails_when_stock_dropped_below_cart(admin_client, customer_client, make_product):
    concha = make_product('Concha', stock=5)
    _add(customer_client, concha, 4)
    admin_client.post('/api/inventory/exits', json={'product_id': concha, 'quantity': 3, 'reference': 'MERMA'})

    response = customer_client.post('/api/cart/checkout', json=SHIPPING)

    assert response.status_code == 409
    assert response.get_json()['details'] == {'available': 2}
    assert len(_cart(customer_client)['items']) == 1


def test_repeated_checkout_of_a_stale_cart_writes_nothing(app, admin_client, customer_client, make_product, monkeypatch):
    concha = make_product('Concha', stock=10)
    rosca = make_product('Rosca', stock=3)
    _add(customer_client, concha, 4)
    _add(customer_client, rosca, 1)

    with app.app_context():
        ana = Customer.get_by_username('ana').id
        stale = CartItem.query.filter_by(customer_id=ana).order_by(CartItem.cart_item_id).all()

        CartController.checkout(ana, SHIPPING)
        monkeypatch.setattr(CartController, '_active_rows', staticmethod(lambda customer_id, **criteria: StaleRows(stale)))

        with pytest.raises(ConflictError):
            CartController.checkout(ana, SHIPPING)

        assert StockExit.query.filter_by(product_id=concha).count() == 1
        assert StockExit.query.filter_by(product_id=rosca).count() == 1

    assert admin_client.get(f'/api/inventory/{concha}').get_json()['data']['current_quantity'] == 6
    assert admin_client.get(f'/api/inventory/{rosca}').get_json()['data']['current_quantity'] == 2
