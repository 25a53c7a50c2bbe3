"""
Unit tests for the cart and wishlist repositories

Author: Taksha Engineering
Date: 2025-10-17
"""
import pytest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock, patch

from storefront.domain.cart import Cart
from storefront.repositories.cart_repository import CartRepository
from storefront.repositories.wishlist_repository import WishlistRepository


@pytest.fixture
def cart_db():
    with patch('storefront.repositories.cart_repository.get_db_connection_dict') as mock_get_conn:
        mock_conn = MagicMock()
        mock_get_conn.return_value = mock_conn
        yield mock_conn, mock_conn.cursor.return_value


@pytest.fixture
def wishlist_db():
    with patch('storefront.repositories.wishlist_repository.get_db_connection_dict') as mock_get_conn:
        mock_conn = MagicMock()
        mock_get_conn.return_value = mock_conn
        yield mock_conn, mock_conn.cursor.return_value


class TestCartRepository:

    def test_missing_cart_is_empty(self, cart_db):
        _, mock_cursor = cart_db
        mock_cursor.fetchone.return_value = None

        cart = CartRepository().get_or_create(7)

        assert cart.user_id == 7
        assert cart.items == []
        assert mock_cursor.execute.call_count == 1

    def test_loads_items_and_coupon(self, cart_db):
        _, mock_cursor = cart_db
        mock_cursor.fetchone.return_value = {
            'user_id': 7, 'coupon_code': 'WELCOME10', 'coupon_discount': Decimal('80'), 'updated_at': None,
        }
        mock_cursor.fetchall.return_value = [{
            'product_id': 11, 'quantity': 2, 'price': Decimal('400'),
            'customization': None, 'added_at': datetime(2025, 10, 1, tzinfo=timezone.utc),
        }]

        cart = CartRepository().get_or_create(7)

        assert cart.coupon_code == 'WELCOME10'
        assert cart.items[0].customization == {}
        assert cart.subtotal == Decimal('800')

    def test_save_replaces_items_in_one_transaction(self, cart_db):
        mock_conn, mock_cursor = cart_db
        cart = Cart(user_id=7)
        cart.add_item(11, 2, Decimal('400'))
        cart.add_item(12, 1, Decimal('250'))

        CartRepository().save(cart)

        # upsert cart, delete items, two inserts
        assert mock_cursor.execute.call_count == 4
        mock_conn.commit.assert_called_once()

    def test_save_rolls_back_on_error(self, cart_db):
        mock_conn, mock_cursor = cart_db
        mock_cursor.execute.side_effect = [None, RuntimeError("disk full")]

        with pytest.raises(RuntimeError):
            CartRepository().save(Cart(user_id=7))

        mock_conn.rollback.assert_called_once()
        mock_conn.commit.assert_not_called()
        mock_conn.close.assert_called_once()


class TestWishlistRepository:

    @pytest.mark.parametrize("rowcount,expected", [(1, True), (0, False)])
    def test_add_reports_insert(self, wishlist_db, rowcount, expected):
        _, mock_cursor = wishlist_db
        mock_cursor.rowcount = rowcount

        assert WishlistRepository().add(7, 11) is expected

    def test_clear_returns_removed_ids(self, wishlist_db):
        mock_conn, mock_cursor = wishlist_db
        mock_cursor.fetchall.return_value = [{'product_id': 11}, {'product_id': 12}]

        assert WishlistRepository().clear(7) == [11, 12]
        mock_conn.commit.assert_called_once()

    def test_get_maps_items_newest_first(self, wishlist_db):
        _, mock_cursor = wishlist_db
        mock_cursor.fetchall.return_value = [
            {'product_id': 12, 'added_at': datetime(2025, 10, 5, tzinfo=timezone.utc)},
            {'product_id': 11, 'added_at': datetime(2025, 10, 1, tzinfo=timezone.utc)},
        ]

        wishlist = WishlistRepository().get(7)

        assert wishlist.user_id == 7
        assert [item.product_id for item in wishlist.items] == [12, 11]
        assert 'ORDER BY added_at DESC' in mock_cursor.execute.call_args[0][0]

    @pytest.mark.parametrize("row,expected", [({'?column?': 1}, True), (None, False)])
    def test_contains(self, wishlist_db, row, expected):
        _, mock_cursor = wishlist_db
        mock_cursor.fetchone.return_value = row

        assert WishlistRepository().contains(7, 11) is expected
        assert mock_cursor.execute.call_args[0][1] == (7, 11)

    def test_remove_missing_item(self, wishlist_db):
        mock_conn, mock_cursor = wishlist_db
        mock_cursor.rowcount = 0

        assert WishlistRepository().remove(7, 11) is False
        mock_conn.commit.assert_called_once()

    def test_add_rolls_back_on_error(self, wishlist_db):
        mock_conn, mock_cursor = wishlist_db
        mock_cursor.execute.side_effect = RuntimeError("foreign key violation")

        with pytest.raises(RuntimeError):
            WishlistRepository().add(7, 999)

        mock_conn.rollback.assert_called_once()
        mock_conn.close.assert_called_once()
