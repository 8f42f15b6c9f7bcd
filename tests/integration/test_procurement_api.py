"""
Integration tests for purchase orders and receiving goods.
"""

from conftest import staff_headers
from petcare.models.purchase_order import PurchaseOrder, POStatus
from petcare.models.stock import Stock


def po_payload(supplier, branch, product, quantity=20, unit_price=60.0, **line):
    return {
        "supplier_id": supplier.id,
        "branch_id": branch.id,
        "items": [{"product_id": product.id, "quantity": quantity, "unit_price": unit_price, **line}],
        "notes": "Monthly restock",
    }


async def raise_po(client, manager, *args, **kwargs):
    response = await client.post("/purchase-orders/", json=po_payload(*args, **kwargs), headers=staff_headers(manager))
    assert response.status_code == 201
    return response.json()["data"]


class TestCreatePurchaseOrder:

    async def test_create(self, client, manager, supplier, branch, product):
        data = await raise_po(client, manager, supplier, branch, product, quantity=20, unit_price=60.0)

        assert data["po_number"].startswith("PO-")
        assert data["po_number"].endswith("-0001")
        assert data["status"] == "pending"
        assert data["total_amount"] == 1200.0
        assert data["supplier_name"] == supplier.name
        assert data["branch_name"] == branch.name
        assert data["items"][0]["product_name"] == product.name
        assert data["items"][0]["subtotal"] == 1200.0

    async def test_numbers_follow_the_years_orders(self, client, manager, supplier, branch, product):
        await raise_po(client, manager, supplier, branch, product)
        second = await raise_po(client, manager, supplier, branch, product)
        assert second["po_number"].endswith("-0002")

    async def test_items_required(self, client, manager, supplier, branch):
        response = await client.post(
            "/purchase-orders/",
            json={"supplier_id": supplier.id, "branch_id": branch.id, "items": []},
            headers=staff_headers(manager),
        )
        assert response.status_code == 400
        assert await PurchaseOrder.find_all().count() == 0

    async def test_inactive_supplier(self, client, manager, supplier, branch, product):
        supplier.is_active = False
        await supplier.save()

        response = await client.post(
            "/purchase-orders/", json=po_payload(supplier, branch, product), headers=staff_headers(manager)
        )
        assert response.status_code == 400

    async def test_unknown_product(self, client, manager, supplier, branch, product):
        payload = po_payload(supplier, branch, product)
        payload["items"][0]["product_id"] = 999

        response = await client.post("/purchase-orders/", json=payload, headers=staff_headers(manager))
        assert response.status_code == 404

    async def test_cashier_cannot_raise(self, client, cashier, supplier, branch, product):
        response = await client.post(
            "/purchase-orders/", json=po_payload(supplier, branch, product), headers=staff_headers(cashier)
        )
        assert response.status_code == 403

    async def test_list_and_filter(self, client, manager, cashier, supplier, branch, other_branch, product):
        await raise_po(client, manager, supplier, branch, product)
        await raise_po(client, manager, supplier, other_branch, product)

        response = await client.get(
            "/purchase-orders/", params={"branch_id": branch.id}, headers=staff_headers(cashier)
        )

        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["branch_id"] == branch.id
        assert data[0]["items_count"] == 1
        assert data[0]["created_by"] == manager.full_name


class TestReceiveGoods:

    async def test_receive_tops_up_matching_batch(self, client, manager, supplier, branch, product, stock):
        po = await raise_po(
            client, manager, supplier, branch, product, quantity=20, batch_number=stock.batch_number
        )

        response = await client.post(
            f"/purchase-orders/{po['id']}/receive",
            json={"items": [{"product_id": product.id, "received_quantity": 18}], "notes": "2 damaged"},
            headers=staff_headers(manager),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "delivered"
        assert data["received_date"] is not None
        assert data["items"][0]["received_quantity"] == 18
        assert (await Stock.get(stock.id)).quantity == 28

    async def test_receive_everything_opens_new_batch(self, client, manager, supplier, branch, product, stock):
        po = await raise_po(
            client, manager, supplier, branch, product,
            quantity=12, batch_number="PO-B1", expiry_date="2027-01-31T00:00:00",
        )

        response = await client.post(f"/purchase-orders/{po['id']}/receive", headers=staff_headers(manager))

        assert response.status_code == 200
        new_row = await Stock.find_one(Stock.batch_number == "PO-B1")
        assert new_row.quantity == 12
        assert new_row.branch_id == branch.id
        assert new_row.expiry_date.year == 2027
        assert (await Stock.get(stock.id)).quantity == 10

    async def test_cannot_receive_twice(self, client, manager, supplier, branch, product, stock):
        po = await raise_po(client, manager, supplier, branch, product, batch_number=stock.batch_number)
        await client.post(f"/purchase-orders/{po['id']}/receive", headers=staff_headers(manager))

        again = await client.post(f"/purchase-orders/{po['id']}/receive", headers=staff_headers(manager))

        assert again.status_code == 400
        assert (await Stock.get(stock.id)).quantity == 30

    async def test_product_not_on_order(self, client, manager, supplier, branch, product, stock):
        po = await raise_po(client, manager, supplier, branch, product)

        response = await client.post(
            f"/purchase-orders/{po['id']}/receive",
            json={"items": [{"product_id": 999, "received_quantity": 1}]},
            headers=staff_headers(manager),
        )

        assert response.status_code == 400
        assert (await PurchaseOrder.get(po["id"])).status == POStatus.PENDING

    async def test_cancelled_order_cannot_be_received(self, client, manager, supplier, branch, product):
        po = await raise_po(client, manager, supplier, branch, product)
        await client.put(
            f"/purchase-orders/{po['id']}/status", json={"status": "cancelled"}, headers=staff_headers(manager)
        )

        response = await client.post(f"/purchase-orders/{po['id']}/receive", headers=staff_headers(manager))
        assert response.status_code == 400


class TestPurchaseOrderStatus:

    async def test_confirm(self, client, manager, supplier, branch, product):
        po = await raise_po(client, manager, supplier, branch, product)

        response = await client.put(
            f"/purchase-orders/{po['id']}/status", json={"status": "confirmed"}, headers=staff_headers(manager)
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "confirmed"

    async def test_delivered_only_through_receiving(self, client, manager, supplier, branch, product):
        po = await raise_po(client, manager, supplier, branch, product)

        response = await client.put(
            f"/purchase-orders/{po['id']}/status", json={"status": "delivered"}, headers=staff_headers(manager)
        )
        assert response.status_code == 400

    async def test_delete_is_admin_only_and_not_after_delivery(self, client, admin, manager, supplier, branch, product):
        pending = await raise_po(client, manager, supplier, branch, product)
        delivered = await raise_po(client, manager, supplier, branch, product)
        await client.post(f"/purchase-orders/{delivered['id']}/receive", headers=staff_headers(manager))

        assert (await client.delete(f"/purchase-orders/{pending['id']}", headers=staff_headers(manager))).status_code == 403
        assert (await client.delete(f"/purchase-orders/{delivered['id']}", headers=staff_headers(admin))).status_code == 400
        assert (await client.delete(f"/purchase-orders/{pending['id']}", headers=staff_headers(admin))).status_code == 200
        assert await PurchaseOrder.get(pending["id"]) is None
