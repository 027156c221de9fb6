"""Cart operations and stock reservation."""
from types import SimpleNamespace

import pytest
from sqlalchemy.dialects import mysql

from auth.models import Customer
from common.database import db
from common.errors import NotFoundError
from controllers.cart_controller import CartController
from models.cart import CartItem
from models.enums import CartItemStatus
from models.inventory import InventoryRecord


def _add(client, product_id, quantity):
    return client.post('/api/cart/items', json={'product_id': product_id, 'quantity': quantity})


def _cart(client):
    return client.get('/api/cart').get_json()['data']


def test_empty_cart(customer_client):
    assert _cart(customer_client) == {'items': [], 'item_count': 0, 'total': 0.0, 'unavailable_items': 0}


def test_add_to_cart_and_view_totals(customer_client, make_product):
    concha = make_product('Concha', price=12.5, stock=10)
    rosca = make_product('Rosca', price=250, stock=2, season='navidad')

    assert _add(customer_client, concha, 4).status_code == 200
    assert _add(customer_client, rosca, 1).status_code == 200

    cart = _cart(customer_client)
    assert [item['name'] for item in cart['items']] == ['Rosca', 'Concha']
    assert cart['item_count'] == 5
    assert cart['total'] == 300.0
    assert cart['items'][1]['subtotal'] == 50.0
    assert cart['items'][1]['stock_available'] == 10


def test_repeated_adds_merge_into_one_row(app, customer_client, make_product):
    product_id = make_product('Concha', stock=10)

    _add(customer_client, product_id, 2)
    response = _add(customer_client, product_id, 3)

    assert response.get_json()['data']['quantity'] == 5
    cart = _cart(customer_client)
    assert len(cart['items']) == 1
    assert cart['items'][0]['quantity'] == 5


def test_add_rejects_invalid_quantity(customer_client, make_product):
    product_id = make_product('Concha', stock=10)

    assert _add(customer_client, product_id, 0).status_code == 400
    assert _add(customer_client, product_id, -2).status_code == 400
    assert customer_client.post('/api/cart/items', json={'product_id': product_id}).status_code == 400


def test_add_unknown_product_is_not_found(customer_client):
    assert _add(customer_client, 999, 1).status_code == 404


def test_add_archived_product_is_rejected(admin_client, customer_client, make_product):
    product_id = make_product('Concha', stock=10)
    admin_client.delete(f'/api/products/{product_id}')

    response = _add(customer_client, product_id, 1)

    assert response.status_code == 400
    assert response.get_json()['code'] == 'PRODUCT_INACTIVE'


def test_add_beyond_stock_reports_available_units(customer_client, make_product):
    product_id = make_product('Concha', stock=3)

    response = _add(customer_client, product_id, 4)

    assert response.status_code == 409
    assert response.get_json()['error'] == 'Insufficient stock. Only 3 units available'
    assert _cart(customer_client)['items'] == []


def test_combined_adds_cannot_exceed_stock(customer_client, make_product):
    product_id = make_product('Concha', stock=5)

    assert _add(customer_client, product_id, 3).status_code == 200
    response = _add(customer_client, product_id, 3)

    assert response.status_code == 409
    assert response.get_json()['details'] == {'available': 2}
    assert _cart(customer_client)['items'][0]['quantity'] == 3


def test_two_customers_cannot_oversell(app, make_customer_client, make_product):
    product_id = make_product('Pan de muerto', stock=10, season='dia_muertos')
    first = make_customer_client('ana')
    second = make_customer_client('beto')

    assert _add(first, product_id, 7).status_code == 200
    response = _add(second, product_id, 5)

    assert response.status_code == 409
    assert response.get_json()['details'] == {'available': 3}
    assert _add(second, product_id, 3).status_code == 200
    with app.app_context():
        record = InventoryRecord.query.filter_by(product_id=product_id).one()
        assert record.current_quantity == 10
        assert record.reserved_quantity == 10


def test_reservation_does_not_change_displayed_stock(client, customer_client, make_product):
    product_id = make_product('Concha', stock=10)
    _add(customer_client, product_id, 6)

    assert client.get(f'/api/products/{product_id}').get_json()['data']['stock'] == 10


def test_update_cart_item_quantity(app, customer_client, make_product):
    product_id = make_product('Concha', stock=5)
    item_id = _add(customer_client, product_id, 2).get_json()['data']['cart_item_id']

    assert customer_client.put(f'/api/cart/items/{item_id}', json={'quantity': 5}).status_code == 200
    too_many = customer_client.put(f'/api/cart/items/{item_id}', json={'quantity': 6})
    assert too_many.status_code == 409
    assert too_many.get_json()['details'] == {'available': 5}

    assert customer_client.put(f'/api/cart/items/{item_id}', json={'quantity': 1}).status_code == 200
    assert customer_client.put(f'/api/cart/items/{item_id}', json={'quantity': 0}).status_code == 400
    assert _cart(customer_client)['items'][0]['quantity'] == 1
    with app.app_context():
        assert InventoryRecord.query.filter_by(product_id=product_id).one().reserved_quantity == 1


def test_cart_items_are_scoped_to_their_owner(make_customer_client, make_product):
    product_id = make_product('Concha', stock=5)
    owner = make_customer_client('ana')
    intruder = make_customer_client('beto')
    item_id = _add(owner, product_id, 2).get_json()['data']['cart_item_id']

    assert intruder.put(f'/api/cart/items/{item_id}', json={'quantity': 1}).status_code == 404
    assert intruder.delete(f'/api/cart/items/{item_id}').status_code == 404
    assert _cart(owner)['items'][0]['quantity'] == 2


def test_remove_item_releases_reservation(app, customer_client, make_product):
    product_id = make_product('Concha', stock=5)
    item_id = _add(customer_client, product_id, 5).get_json()['data']['cart_item_id']

    assert customer_client.delete(f'/api/cart/items/{item_id}').status_code == 200
    assert customer_client.delete(f'/api/cart/items/{item_id}').status_code == 404

    assert _cart(customer_client)['items'] == []
    with app.app_context():
        item = db.session.get(CartItem, item_id)
        assert item.status == CartItemStatus.REMOVED
        assert InventoryRecord.query.filter_by(product_id=product_id).one().reserved_quantity == 0
    assert _add(customer_client, product_id, 5).status_code == 200


def test_clear_cart_is_idempotent(customer_client, make_product):
    _add(customer_client, make_product('Concha', stock=5), 1)
    _add(customer_client, make_product('Oreja', stock=5), 2)

    first = customer_client.delete('/api/cart')
    second = customer_client.delete('/api/cart')

    assert first.get_json()['data'] == {'removed': 2}
    assert second.status_code == 200
    assert second.get_json()['data'] == {'removed': 0}
    assert _cart(customer_client)['items'] == []


def test_archived_products_leave_the_cart_listing(admin_client, customer_client, make_product):
    concha = make_product('Concha', price=10, stock=5)
    oreja = make_product('Oreja', price=8, stock=5)
    _add(customer_client, concha, 1)
    _add(customer_client, oreja, 1)

    admin_client.delete(f'/api/products/{oreja}')

    cart = _cart(customer_client)
    assert [item['name'] for item in cart['items']] == ['Concha']
    assert cart['total'] == 10.0
    assert cart['unavailable_items'] == 1


class StaleRows:
    """Stands in for the locked query with rows read before another request changed them."""

    def __init__(self, rows):
        self.rows = list(rows)

    def order_by(self, *clauses):
        return self

    def all(self):
        return list(self.rows)

    def first(self):
        return self.rows[0] if self.rows else None


def _customer_id(username):
    return Customer.get_by_username(username).id


def _reserved(product_id):
    return InventoryRecord.query.filter_by(product_id=product_id).populate_existing().one().reserved_quantity


def test_active_rows_are_read_with_a_row_lock(app):
    with app.app_context():
        statement = CartController._active_rows(1, product_id=2).statement
        assert 'FOR UPDATE' in str(statement.compile(dialect=mysql.dialect()))


def test_repeated_remove_of_a_stale_row_releases_once(app, make_customer_client, make_product, monkeypatch):
    product_id = make_product('Concha', stock=5)
    _add(make_customer_client('ana'), product_id, 2)
    _add(make_customer_client('beto'), product_id, 3)

    with app.app_context():
        ana = _customer_id('ana')
        item = CartItem.query.filter_by(customer_id=ana).one()
        stale = SimpleNamespace(cart_item_id=item.cart_item_id, product_id=product_id, quantity=item.quantity)

        CartController.remove_cart_item(ana, stale.cart_item_id)
        monkeypatch.setattr(CartController, '_get_active_item', staticmethod(lambda customer_id, cart_item_id: stale))

        with pytest.raises(NotFoundError):
            CartController.remove_cart_item(ana, stale.cart_item_id)

        # Only beto's reservation is left
        assert _reserved(product_id) == 3


def test_clear_cart_skips_rows_already_removed(app, make_customer_client, make_product, monkeypatch):
    product_id = make_product('Oreja', stock=5)
    _add(make_customer_client('ana'), product_id, 2)
    _add(make_customer_client('beto'), product_id, 3)

    with app.app_context():
        ana = _customer_id('ana')
        stale = CartItem.query.filter_by(customer_id=ana).all()

        assert CartController.clear_cart(ana) == 1
        monkeypatch.setattr(CartController, '_active_rows', staticmethod(lambda customer_id, **criteria: StaleRows(stale)))

        assert CartController.clear_cart(ana) == 0
        assert _reserved(product_id) == 3


def test_add_merges_with_a_row_committed_after_reservation(app, customer_client, make_product, monkeypatch):
    product_id = make_product('Concha', stock=10)
    original = CartController._reserve

    with app.app_context():
        ana = _customer_id('ana')

        def reserve_then_other_request_inserts(pid, quantity):
            original(pid, quantity)
            db.session.add(CartItem(customer_id=ana, product_id=pid, quantity=1, status=CartItemStatus.ACTIVE))

        monkeypatch.setattr(CartController, '_reserve', staticmethod(reserve_then_other_request_inserts))
        CartController.add_to_cart(ana, product_id, 2)

        rows = CartItem.query.filter_by(customer_id=ana, status=CartItemStatus.ACTIVE).all()
        assert [row.quantity for row in rows] == [3]
