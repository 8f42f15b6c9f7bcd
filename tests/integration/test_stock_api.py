"""
Integration tests for stock batches and manual adjustments.
"""

from conftest import staff_headers
from petcare.models.stock import Stock, StockAdjustment


class TestStockRows:

    async def test_list_for_callers_branch(self, client, cashier, stock, other_branch, product):
        await Stock(id=999, product_id=product.id, branch_id=other_branch.id, quantity=3).insert()

        response = await client.get("/stock/", headers=staff_headers(cashier))

        data = response.json()["data"]
        assert [row["id"] for row in data] == [stock.id]
        assert data[0]["product_name"] == product.name
        assert data[0]["category_name"] == "Dog Food"

    async def test_add_batch(self, client, manager, product, branch):
        response = await client.post(
            "/stock/",
            json={
                "product_id": product.id,
                "branch_id": branch.id,
                "quantity": 24,
                "batch_number": "B-777",
                "expiry_date": "2027-03-31T00:00:00",
            },
            headers=staff_headers(manager),
        )

        assert response.status_code == 201
        row = await Stock.get(response.json()["data"]["id"])
        assert row.quantity == 24
        assert row.expiry_date.year == 2027

    async def test_duplicate_batch_rejected(self, client, manager, stock):
        response = await client.post(
            "/stock/",
            json={
                "product_id": stock.product_id,
                "branch_id": stock.branch_id,
                "quantity": 5,
                "batch_number": stock.batch_number,
            },
            headers=staff_headers(manager),
        )
        assert response.status_code == 400

    async def test_update_row(self, client, manager, stock):
        response = await client.put(f"/stock/{stock.id}", json={"quantity": 42}, headers=staff_headers(manager))

        assert response.status_code == 200
        assert (await Stock.get(stock.id)).quantity == 42


class TestAdjustments:

    async def adjust(self, client, user, product, adjustment_type, quantity, **extra):
        return await client.post(
            "/stock/adjust",
            json={"product_id": product.id, "adjustment_type": adjustment_type, "quantity": quantity, **extra},
            headers=staff_headers(user),
        )

    async def test_add(self, client, manager, product, stock):
        response = await self.adjust(client, manager, product, "add", 5)

        assert response.status_code == 200
        assert response.json()["data"] == {"stock_id": stock.id, "previous_quantity": 10, "new_quantity": 15}

    async def test_damage_is_logged(self, client, manager, product, stock):
        await self.adjust(client, manager, product, "damage", 2, reason="Torn bags")

        logs = await StockAdjustment.find_all().to_list()
        assert len(logs) == 1
        assert logs[0].previous_quantity == 10
        assert logs[0].new_quantity == 8
        assert logs[0].reason == "Torn bags"
        assert logs[0].user_id == manager.id

    async def test_cannot_remove_more_than_on_hand(self, client, manager, product, stock):
        response = await self.adjust(client, manager, product, "remove", 11)

        assert response.status_code == 400
        assert (await Stock.get(stock.id)).quantity == 10
        assert await StockAdjustment.find_all().count() == 0

    async def test_correction_sets_absolute_quantity(self, client, manager, product, stock):
        response = await self.adjust(client, manager, product, "correction", 3)
        assert response.json()["data"]["new_quantity"] == 3

    async def test_unknown_type(self, client, manager, product, stock):
        response = await self.adjust(client, manager, product, "stolen", 1)
        assert response.status_code == 400

    async def test_adjustment_log_listing(self, client, manager, product, stock):
        await self.adjust(client, manager, product, "add", 1)
        await self.adjust(client, manager, product, "expired", 1)

        response = await client.get("/stock/adjustments", headers=staff_headers(manager))

        assert response.json()["count"] == 2
