"""
API tests for wishlist endpoints

Author: Taksha Engineering
Date: 2025-10-17
"""
from unittest.mock import patch

from storefront.core.exceptions import InsufficientStockError, NotFoundError, ValidationError

EMPTY = {"user_id": 7, "items": [], "item_count": 0}


class TestWishlistApi:

    def test_requires_token(self, api_client):
        client, _ = api_client

        assert client.get("/api/wishlist/").status_code == 401

    @patch('storefront.api.wishlist.WishlistService')
    def test_get_wishlist(self, mock_service_class, api_client, customer):
        client, login_as = api_client
        login_as(customer)
        mock_service_class.return_value.get_wishlist.return_value = EMPTY

        response = client.get("/api/wishlist/")

        assert response.status_code == 200
        assert response.json()["data"] == EMPTY
        mock_service_class.return_value.get_wishlist.assert_called_once_with(7)

    @patch('storefront.api.wishlist.WishlistService')
    def test_add_unknown_product_is_404(self, mock_service_class, api_client, customer):
        client, login_as = api_client
        login_as(customer)
        mock_service_class.return_value.add.side_effect = NotFoundError("Product")

        response = client.post("/api/wishlist/add", json={"product_id": 99})

        assert response.status_code == 404
        assert response.json()["detail"] == "Product not found"

    @patch('storefront.api.wishlist.WishlistService')
    def test_add_duplicate_is_400(self, mock_service_class, api_client, customer):
        client, login_as = api_client
        login_as(customer)
        mock_service_class.return_value.add.side_effect = ValidationError("Product already in wishlist")

        response = client.post("/api/wishlist/add", json={"product_id": 11})

        assert response.status_code == 400

    @patch('storefront.api.wishlist.WishlistService')
    def test_toggle_message(self, mock_service_class, api_client, customer):
        client, login_as = api_client
        login_as(customer)
        mock_service_class.return_value.toggle.return_value = {"action": "removed", "is_in_wishlist": False}

        response = client.post("/api/wishlist/toggle/11")

        assert response.json()["message"] == "Product removed from wishlist"

    def test_unknown_series_is_422(self, api_client, customer):
        client, login_as = api_client
        login_as(customer)

        assert client.get("/api/wishlist/series/Unknown").status_code == 422

    @patch('storefront.api.wishlist.WishlistService')
    def test_series_with_plus_sign(self, mock_service_class, api_client, customer):
        client, login_as = api_client
        login_as(customer)
        mock_service_class.return_value.filter_by.return_value = EMPTY

        response = client.get("/api/wishlist/series/Moments%2B")

        assert response.status_code == 200
        mock_service_class.return_value.filter_by.assert_called_once_with(7, "series", "Moments+")

    @patch('storefront.api.wishlist.WishlistService')
    def test_inverted_price_range_is_400(self, mock_service_class, api_client, customer):
        client, login_as = api_client
        login_as(customer)
        mock_service_class.return_value.in_price_range.side_effect = ValidationError(
            "Minimum price cannot be greater than maximum price"
        )

        response = client.get("/api/wishlist/price-range?min_price=900&max_price=100")

        assert response.status_code == 400
        assert response.json()["detail"] == "Minimum price cannot be greater than maximum price"

    @patch('storefront.api.wishlist.WishlistService')
    def test_move_to_cart_out_of_stock(self, mock_service_class, api_client, customer):
        client, login_as = api_client
        login_as(customer)
        mock_service_class.return_value.move_to_cart.side_effect = InsufficientStockError(
            available=0, requested=1, product_name="Brass Diya"
        )

        response = client.post("/api/wishlist/move-to-cart", json={"product_id": 11})

        assert response.status_code == 400
        assert response.json()["detail"]["available"] == 0

    def test_move_to_cart_quantity_bounds(self, api_client, customer):
        client, login_as = api_client
        login_as(customer)

        response = client.post("/api/wishlist/move-to-cart", json={"product_id": 11, "quantity": 0})

        assert response.status_code == 422
