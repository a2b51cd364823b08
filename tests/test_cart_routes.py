"""
HTTP tests for the cart endpoints.

They go through routing, request validation, the service layer and the
error envelope, with the principal supplied by a dependency override.
"""
from types import SimpleNamespace

import stripe
from beanie import PydanticObjectId

CART = "/api/v1/cart"


class TestCartEndpoints:

    async def test_add_then_list(self, client, make_product):
        product = await make_product(stock=5, price=12.5)

        response = await client.post(CART, json={"productId": str(product.id), "size": "500g", "quantity": 2})

        assert response.status_code == 201
        assert response.json() == {"message": "Item added to cart"}

        response = await client.get(CART)
        assert response.status_code == 200
        assert response.json() == [{
            "_id": str(product.id),
            "name": "Arabica Coffee",
            "price": 12.5,
            "image": "https://cdn.example.com/coffee.png",
            "stock": 5,
            "selectedSize": "500g",
            "quantity": 2,
            "inStock": True,
        }]

    async def test_add_defaults_size_and_quantity(self, client, make_product):
        product = await make_product()

        await client.post(CART, json={"productId": str(product.id)})

        [item] = (await client.get(CART)).json()
        assert item["selectedSize"] == "Standard"
        assert item["quantity"] == 1

    async def test_empty_cart_is_empty_list(self, client):
        response = await client.get(CART)

        assert response.status_code == 200
        assert response.json() == []

    async def test_add_over_stock_reports_numbers(self, client, make_product):
        product = await make_product(stock=2)

        response = await client.post(CART, json={"productId": str(product.id), "quantity": 3})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "InsufficientStockError"
        assert error["message"] == "Not enough stock available"
        assert error["detail"] == {
            "productId": str(product.id),
            "size": "Standard",
            "requested": 3,
            "available": 2,
        }

    async def test_add_unknown_product_is_404(self, client):
        response = await client.post(CART, json={"productId": str(PydanticObjectId())})

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Product not found"

    async def test_add_without_product_id_is_rejected(self, client):
        response = await client.post(CART, json={"quantity": 1})

        assert response.status_code == 422
        assert response.json()["error"]["message"] == "Validation error"

    async def test_add_zero_quantity_is_rejected(self, client, make_product):
        product = await make_product()

        response = await client.post(CART, json={"productId": str(product.id), "quantity": 0})

        assert response.status_code == 422

    async def test_remove_with_body(self, client, make_product):
        product = await make_product()
        await client.post(CART, json={"productId": str(product.id), "size": "Small"})
        await client.post(CART, json={"productId": str(product.id), "size": "Large"})

        response = await client.request("DELETE", CART, json={"productId": str(product.id), "size": "Small"})

        assert response.status_code == 200
        assert [i["selectedSize"] for i in (await client.get(CART)).json()] == ["Large"]

    async def test_remove_absent_entry_still_succeeds(self, client):
        response = await client.request("DELETE", CART, json={"productId": str(PydanticObjectId())})

        assert response.status_code == 200
        assert response.json() == {"message": "Item removed from cart"}

    async def test_update_quantity(self, client, make_product):
        product = await make_product(stock=5)
        await client.post(CART, json={"productId": str(product.id)})

        response = await client.put(f"{CART}/{product.id}", json={"quantity": 4})

        assert response.status_code == 200
        assert (await client.get(CART)).json()[0]["quantity"] == 4

    async def test_update_to_zero_removes(self, client, make_product):
        product = await make_product(stock=5)
        await client.post(CART, json={"productId": str(product.id)})

        response = await client.put(f"{CART}/{product.id}", json={"quantity": 0})

        assert response.status_code == 200
        assert (await client.get(CART)).json() == []

    async def test_update_absent_entry_is_404(self, client, make_product):
        product = await make_product(stock=5)

        response = await client.put(f"{CART}/{product.id}", json={"quantity": 2})

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Product not found in cart"

    async def test_update_requires_quantity(self, client, make_product):
        product = await make_product(stock=5)
        await client.post(CART, json={"productId": str(product.id)})

        response = await client.put(f"{CART}/{product.id}", json={"size": "Standard"})

        assert response.status_code == 422

    async def test_clear(self, client, make_product):
        first = await make_product(name="Milk")
        second = await make_product(name="Bread")
        await client.post(CART, json={"productId": str(first.id)})
        await client.post(CART, json={"productId": str(second.id)})

        response = await client.delete(f"{CART}/clear")

        assert response.status_code == 200
        assert response.json() == {"message": "Cart cleared successfully"}
        assert (await client.get(CART)).json() == []

    async def test_summary_totals(self, client, make_product):
        coffee = await make_product(name="Coffee", price=10.0, stock=5)
        salt = await make_product(name="Salt", price=5.5, stock=5)
        await client.post(CART, json={"productId": str(coffee.id), "quantity": 2})
        await client.post(CART, json={"productId": str(salt.id)})

        body = (await client.get(f"{CART}/summary")).json()

        assert len(body["items"]) == 2
        assert body["totalItems"] == 3
        assert body["subtotal"] == 25.5
        assert body["total"] == 25.5

    async def test_summary_total_matches_checkout_charge(self, client, make_product, monkeypatch):
        product = await make_product(name="Chewing Gum", price=1.005, stock=5)
        await client.post(CART, json={"productId": str(product.id)})

        summary = (await client.get(f"{CART}/summary")).json()

        monkeypatch.setattr(
            stripe.checkout.Session, "create",
            lambda **params: SimpleNamespace(id="cs_gum", url="https://checkout.stripe.test/cs_gum"),
        )
        checkout = (await client.post("/api/v1/payments/create-checkout-session", json={"products": [
            {"_id": str(product.id), "name": product.name, "price": product.price, "quantity": 1},
        ]})).json()

        assert summary["total"] == 1.01
        assert checkout["totalAmount"] == summary["total"]


class TestValidateStockEndpoint:

    async def test_valid_cart_has_no_invalid_items_key(self, client, make_product):
        product = await make_product(stock=5)
        await client.post(CART, json={"productId": str(product.id), "quantity": 3})

        response = await client.get(f"{CART}/validate-stock")

        assert response.status_code == 200
        assert response.json() == {"valid": True}

    async def test_stock_drop_is_reported(self, client, make_product):
        product = await make_product(stock=5)
        await client.post(CART, json={"productId": str(product.id), "quantity": 3})
        product.stock = 2
        await product.save()

        response = await client.get(f"{CART}/validate-stock")

        assert response.json() == {
            "valid": False,
            "invalidItems": [{
                "productId": str(product.id),
                "name": "Arabica Coffee",
                "requested": 3,
                "available": 2,
                "size": "Standard",
            }],
        }
