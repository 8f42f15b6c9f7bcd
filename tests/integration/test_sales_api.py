"""
Integration tests for checkout, sale history, cancellation and held carts.
"""

from conftest import staff_headers, cart_line
from petcare.models.customer import Customer
from petcare.models.sale import Sale, SaleItem
from petcare.models.stock import Stock


class TestCreateSale:

    async def test_checkout(self, client, cashier, product, stock, customer):
        response = await client.post(
            "/sales/",
            json={"items": [cart_line(product, 2, gst_amount=10.0)], "customer_id": customer.id},
            headers=staff_headers(cashier),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["grand_total"] == 210.0
        assert data["invoice_number"].startswith(f"INV-{cashier.branch_id}-")
        assert data["invoice_number"].endswith("-0001")

        assert (await Stock.get(stock.id)).quantity == 8
        assert await SaleItem.find(SaleItem.sale_id == data["id"]).count() == 1
        assert (await Customer.get(customer.id)).loyalty_points == 2

    async def test_percentage_discount(self, client, cashier, product, stock):
        response = await client.post(
            "/sales/",
            json={
                "items": [cart_line(product, 2, gst_amount=10.0)],
                "discount": 10,
                "discount_type": "percentage",
            },
            headers=staff_headers(cashier),
        )

        assert response.status_code == 201
        assert response.json()["data"]["grand_total"] == 190.0

    async def test_empty_cart(self, client, cashier):
        response = await client.post("/sales/", json={"items": []}, headers=staff_headers(cashier))

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Items are required"}
        assert await Sale.find_all().count() == 0

    async def test_zero_quantity_line_is_rejected(self, client, cashier, product):
        response = await client.post(
            "/sales/", json={"items": [cart_line(product, 0)]}, headers=staff_headers(cashier)
        )
        assert response.status_code == 400

    async def test_requires_identity(self, client, product):
        response = await client.post("/sales/", json={"items": [cart_line(product, 1)]})
        assert response.status_code == 401

    async def test_unknown_customer(self, client, cashier, product, stock):
        response = await client.post(
            "/sales/",
            json={"items": [cart_line(product, 1)], "customer_id": 404},
            headers=staff_headers(cashier),
        )
        assert response.status_code == 404
        assert (await Stock.get(stock.id)).quantity == 10


class TestSaleQueries:

    async def checkout(self, client, user, product, **extra):
        response = await client.post(
            "/sales/", json={"items": [cart_line(product, 1)], **extra}, headers=staff_headers(user)
        )
        return response.json()["data"]

    async def test_list_shows_walk_in_customer(self, client, cashier, product, stock, customer):
        await self.checkout(client, cashier, product)
        await self.checkout(client, cashier, product, customer_id=customer.id)

        response = await client.get("/sales/", headers=staff_headers(cashier))

        assert response.status_code == 200
        names = [s["customer_name"] for s in response.json()["data"]]
        assert sorted(names) == ["Priya", "Walk-in Customer"]

    async def test_today_summary(self, client, cashier, product, stock):
        await self.checkout(client, cashier, product)
        await self.checkout(client, cashier, product)

        response = await client.get("/sales/today", headers=staff_headers(cashier))

        summary = response.json()["data"]
        assert summary["transactions"] == 2
        assert summary["revenue"] == 200.0
        assert summary["average"] == 100.0

    async def test_sale_detail_includes_items(self, client, cashier, product, stock):
        sale = await self.checkout(client, cashier, product)

        response = await client.get(f"/sales/{sale['id']}", headers=staff_headers(cashier))

        data = response.json()["data"]
        assert data["invoice_number"] == sale["invoice_number"]
        assert data["items"][0]["product_name"] == product.name
        assert data["items"][0]["sku"] == product.sku

    async def test_unknown_sale(self, client, cashier):
        response = await client.get("/sales/999", headers=staff_headers(cashier))
        assert response.status_code == 404


class TestCancelSale:

    async def test_manager_cancels(self, client, cashier, manager, product, stock):
        created = await client.post(
            "/sales/", json={"items": [cart_line(product, 3)]}, headers=staff_headers(cashier)
        )
        sale_id = created.json()["data"]["id"]

        response = await client.put(
            f"/sales/{sale_id}/cancel", json={"reason": "Customer changed mind"}, headers=staff_headers(manager)
        )

        assert response.status_code == 200
        sale = await Sale.get(sale_id)
        assert sale.status == "cancelled"
        assert "Cancelled: Customer changed mind" in sale.notes
        assert (await Stock.get(stock.id)).quantity == 10

    async def test_cashier_cannot_cancel(self, client, cashier, product, stock):
        created = await client.post(
            "/sales/", json={"items": [cart_line(product, 1)]}, headers=staff_headers(cashier)
        )

        response = await client.put(
            f"/sales/{created.json()['data']['id']}/cancel", json={}, headers=staff_headers(cashier)
        )
        assert response.status_code == 403


class TestHeldSales:

    async def test_hold_resume_discard(self, client, cashier, product):
        headers = staff_headers(cashier)
        cart = [cart_line(product, 2)]

        held = await client.post("/sales/hold", json={"cart_data": cart, "notes": "back soon"}, headers=headers)
        assert held.status_code == 201
        held_id = held.json()["data"]["id"]

        listing = await client.get("/sales/held", headers=headers)
        assert listing.json()["count"] == 1

        detail = await client.get(f"/sales/held/{held_id}", headers=headers)
        assert detail.json()["data"]["cart_data"][0]["product_id"] == product.id
        assert detail.json()["data"]["branch_id"] == cashier.branch_id

        deleted = await client.delete(f"/sales/held/{held_id}", headers=headers)
        assert deleted.status_code == 200

        missing = await client.get(f"/sales/held/{held_id}", headers=headers)
        assert missing.status_code == 404

    async def test_empty_cart_cannot_be_held(self, client, cashier):
        response = await client.post("/sales/hold", json={"cart_data": []}, headers=staff_headers(cashier))
        assert response.status_code == 400
