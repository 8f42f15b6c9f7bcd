"""
Integration tests for till-side customers, suppliers and storefront accounts.
"""

from conftest import staff_headers, customer_headers
from petcare.models.customer import Customer
from petcare.models.supplier import Supplier


class TestStaffCustomers:

    async def test_create_and_search(self, client, cashier):
        headers = staff_headers(cashier)
        created = await client.post(
            "/customers/", json={"name": "Arjun", "phone": "9000000001"}, headers=headers
        )
        assert created.status_code == 201
        assert created.json()["data"]["loyalty_points"] == 0

        response = await client.get("/customers/", params={"search": "arj"}, headers=headers)
        assert response.json()["count"] == 1

    async def test_duplicate_phone(self, client, cashier, customer):
        response = await client.post(
            "/customers/", json={"name": "Someone", "phone": customer.phone}, headers=staff_headers(cashier)
        )
        assert response.status_code == 400

    async def test_password_hash_never_listed(self, client, cashier, customer):
        customer.password_hash = "not-for-your-eyes"
        await customer.save()

        response = await client.get("/customers/", headers=staff_headers(cashier))

        assert all("password_hash" not in c for c in response.json()["data"])

    async def test_detail_with_sales(self, client, cashier, customer):
        response = await client.get(f"/customers/{customer.id}", headers=staff_headers(cashier))

        assert response.status_code == 200
        assert response.json()["data"]["sales"] == []

    async def test_only_managers_deactivate(self, client, cashier, manager, customer):
        forbidden = await client.delete(f"/customers/{customer.id}", headers=staff_headers(cashier))
        assert forbidden.status_code == 403

        response = await client.delete(f"/customers/{customer.id}", headers=staff_headers(manager))
        assert response.status_code == 200
        assert (await Customer.get(customer.id)).is_active is False


class TestSuppliers:

    async def test_lifecycle(self, client, admin, manager):
        created = await client.post(
            "/suppliers/", json={"name": "Paws Wholesale", "phone": "044-2222333"}, headers=staff_headers(manager)
        )
        assert created.status_code == 201
        supplier_id = created.json()["data"]["id"]
        assert created.json()["data"]["payment_terms"] == "Net 30"

        updated = await client.put(
            f"/suppliers/{supplier_id}", json={"credit_limit": 50000}, headers=staff_headers(manager)
        )
        assert updated.json()["data"]["credit_limit"] == 50000

        # Deleting is admin-only
        assert (await client.delete(f"/suppliers/{supplier_id}", headers=staff_headers(manager))).status_code == 403
        assert (await client.delete(f"/suppliers/{supplier_id}", headers=staff_headers(admin))).status_code == 200
        assert (await Supplier.get(supplier_id)).is_active is False


class TestCustomerAccounts:

    async def test_register_and_login(self, client, db):
        registered = await client.post(
            "/customer/register",
            json={"name": "Meena", "phone": "9123456780", "password": "woofwoof"},
        )
        assert registered.status_code == 201
        assert registered.json()["data"]["token"]

        login = await client.post("/customer/login", json={"phone": "9123456780", "password": "woofwoof"})
        assert login.status_code == 200
        assert login.json()["data"]["customer"]["name"] == "Meena"

    async def test_register_activates_till_customer(self, client, customer):
        response = await client.post(
            "/customer/register",
            json={"name": "Priya S", "phone": customer.phone, "password": "woofwoof"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["customer"]["id"] == customer.id
        refreshed = await Customer.get(customer.id)
        assert refreshed.password_hash
        assert refreshed.name == "Priya S"

    async def test_register_twice(self, client, db):
        payload = {"name": "Meena", "phone": "9123456780", "password": "woofwoof"}
        await client.post("/customer/register", json=payload)

        response = await client.post("/customer/register", json=payload)
        assert response.status_code == 400

    async def test_invalid_phone(self, client, db):
        response = await client.post(
            "/customer/register", json={"name": "Meena", "phone": "12ab", "password": "woofwoof"}
        )
        assert response.status_code == 400

    async def test_login_failures(self, client, customer):
        unknown = await client.post("/customer/login", json={"phone": "0000000000", "password": "x"})
        assert unknown.status_code == 401

        # Till customer with no password yet
        unregistered = await client.post("/customer/login", json={"phone": customer.phone, "password": "x"})
        assert unregistered.status_code == 401
        assert "register" in unregistered.json()["message"]

    async def test_profile(self, client, customer):
        headers = customer_headers(customer)

        updated = await client.put(
            "/customer/profile", json={"name": "Priya K", "address": "12 Lake Rd"}, headers=headers
        )
        assert updated.status_code == 200

        profile = await client.get("/customer/profile", headers=headers)
        assert profile.json()["data"]["name"] == "Priya K"
        assert "password_hash" not in profile.json()["data"]

    async def test_staff_token_is_not_a_customer_token(self, client, cashier):
        response = await client.get("/customer/profile", headers=staff_headers(cashier))
        assert response.status_code == 401
