"""
Integration tests for staff authentication and role gating.
"""

from conftest import PASSWORD, staff_headers, customer_headers
from petcare.models.user import User


class TestLogin:

    async def test_login_with_username(self, client, cashier, branch):
        response = await client.post("/auth/login", json={"username": "cashier", "password": PASSWORD})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["token"]
        user = body["data"]["user"]
        assert user["username"] == "cashier"
        assert user["branch_name"] == branch.name
        assert user["branch_code"] == branch.code
        assert "password_hash" not in user

    async def test_login_with_email(self, client, cashier):
        response = await client.post(
            "/auth/login", json={"username": "cashier@petcare.test", "password": PASSWORD}
        )
        assert response.status_code == 200

    async def test_bad_password(self, client, cashier):
        response = await client.post("/auth/login", json={"username": "cashier", "password": "nope"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Invalid credentials"}

    async def test_inactive_user_cannot_login(self, client, cashier):
        cashier.is_active = False
        await cashier.save()

        response = await client.post("/auth/login", json={"username": "cashier", "password": PASSWORD})
        assert response.status_code == 401

    async def test_missing_fields_are_a_bad_request(self, client, db):
        response = await client.post("/auth/login", json={"username": "cashier"})

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestIdentityGate:

    async def test_no_token(self, client, db):
        response = await client.get("/auth/me")
        assert response.status_code == 401
        assert response.json()["success"] is False

    async def test_garbage_token(self, client, db):
        response = await client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    async def test_me(self, client, cashier):
        response = await client.get("/auth/me", headers=staff_headers(cashier))

        assert response.status_code == 200
        assert response.json()["data"]["id"] == cashier.id
        assert "password_hash" not in response.json()["data"]

    async def test_deactivation_applies_to_live_tokens(self, client, cashier):
        headers = staff_headers(cashier)
        cashier.is_active = False
        await cashier.save()

        response = await client.get("/auth/me", headers=headers)
        assert response.status_code == 401

    async def test_deleted_user_token(self, client, cashier):
        headers = staff_headers(cashier)
        await cashier.delete()

        response = await client.get("/auth/me", headers=headers)
        assert response.status_code == 401

    async def test_customer_token_is_not_a_staff_token(self, client, customer):
        response = await client.get("/auth/me", headers=customer_headers(customer))
        assert response.status_code == 401

    async def test_wrong_role_is_forbidden(self, client, cashier):
        """401 means no identity; a known user with the wrong role gets 403."""
        response = await client.get("/users/", headers=staff_headers(cashier))

        assert response.status_code == 403
        assert response.json()["success"] is False


class TestChangePassword:

    async def test_change_password(self, client, cashier):
        headers = staff_headers(cashier)

        response = await client.put(
            "/auth/change-password",
            json={"current_password": PASSWORD, "new_password": "brand-new"},
            headers=headers,
        )
        assert response.status_code == 200

        login = await client.post("/auth/login", json={"username": "cashier", "password": "brand-new"})
        assert login.status_code == 200

    async def test_wrong_current_password(self, client, cashier):
        response = await client.put(
            "/auth/change-password",
            json={"current_password": "wrong", "new_password": "brand-new"},
            headers=staff_headers(cashier),
        )
        assert response.status_code == 400


class TestUserManagement:

    async def test_admin_creates_user(self, client, admin, branch):
        response = await client.post(
            "/users/",
            json={
                "username": "newbie",
                "full_name": "New Cashier",
                "password": "secret123",
                "role": "cashier",
                "branch_id": branch.id,
            },
            headers=staff_headers(admin),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["username"] == "newbie"
        assert "password_hash" not in data
        assert await User.find_one(User.username == "newbie") is not None

    async def test_duplicate_username(self, client, admin, cashier):
        response = await client.post(
            "/users/",
            json={"username": "cashier", "full_name": "Dup", "password": "secret123"},
            headers=staff_headers(admin),
        )
        assert response.status_code == 400

    async def test_list_users_hides_hashes(self, client, admin, cashier):
        response = await client.get("/users/", headers=staff_headers(admin))

        assert response.status_code == 200
        assert response.json()["count"] == 2
        assert all("password_hash" not in u for u in response.json()["data"])

    async def test_deactivate_user(self, client, admin, cashier):
        response = await client.patch(
            f"/users/{cashier.id}/status", params={"active": "false"}, headers=staff_headers(admin)
        )

        assert response.status_code == 200
        assert (await User.get(cashier.id)).is_active is False

    async def test_admin_cannot_deactivate_self(self, client, admin):
        response = await client.patch(
            f"/users/{admin.id}/status", params={"active": "false"}, headers=staff_headers(admin)
        )
        assert response.status_code == 400
