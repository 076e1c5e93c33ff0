"""
==============================================================================
API Integration Tests
==============================================================================

Tests for REST API endpoints.

==============================================================================
"""

from fastapi.testclient import TestClient

from app.catalog.publisher import CatalogPublisher
from app.catalog.store import CatalogStore
from app.db.models import Product, User


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client: TestClient):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] in ["healthy", "degraded"]
        assert "reaction-payments" in data["details"]["packages"]

    def test_readiness_probe(self, client: TestClient):
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["ready"] is True

    def test_liveness_probe(self, client: TestClient):
        response = client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["alive"] is True


class TestAuthEndpoints:
    """Tests for authentication endpoints."""

    def test_login_success(self, client: TestClient, manager_user: User):
        response = client.post(
            "/api/v1/auth/login",
            json={"username": "manager", "password": "manager123"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert "access_token" in data
        assert "refresh_token" in data
        assert data["user"]["shop_id"] == "shop-b"

    def test_login_invalid_password(self, client: TestClient, admin_user: User):
        response = client.post(
            "/api/v1/auth/login",
            json={"username": admin_user.username, "password": "wrongpassword"}
        )
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"

    def test_refresh(self, client: TestClient, admin_user: User):
        login = client.post(
            "/api/v1/auth/login",
            json={"username": "admin", "password": "admin123"}
        ).json()

        response = client.post(
            "/api/v1/auth/refresh",
            json={"refresh_token": login["refresh_token"]}
        )
        assert response.status_code == 200
        assert response.json()["user"]["id"] == admin_user.id

    def test_get_current_user(self, client: TestClient, manager_headers: dict):
        response = client.get("/api/v1/auth/me", headers=manager_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["user"]["username"] == "manager"
        assert data["user"]["role"] == "shop_manager"

    def test_get_current_user_no_token(self, client: TestClient):
        response = client.get("/api/v1/auth/me")
        assert response.status_code == 401


class TestUserEndpoints:
    """Tests for user management endpoints."""

    def test_create_user_as_admin(self, client: TestClient, admin_headers: dict):
        response = client.post(
            "/api/v1/users",
            headers=admin_headers,
            json={"username": "newmanager", "password": "password123", "shop_id": "shop-c"}
        )
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["role"] == "shop_manager"
        assert user["shop_id"] == "shop-c"

    def test_create_user_as_manager_fails(self, client: TestClient, manager_headers: dict):
        response = client.post(
            "/api/v1/users",
            headers=manager_headers,
            json={"username": "another", "password": "password123"}
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ADMIN_REQUIRED"

    def test_grant_and_revoke_permission(self, client: TestClient, admin_headers: dict, customer_user: User):
        url = f"/api/v1/users/{customer_user.id}/permissions"

        granted = client.post(
            url,
            headers=admin_headers,
            json={"permission": "createProduct", "shop_id": "shop-b"}
        )
        assert granted.status_code == 200
        assert [(p["permission"], p["shop_id"]) for p in granted.json()["permissions"]] == [
            ("createProduct", "shop-b")
        ]

        revoked = client.delete(
            url,
            headers=admin_headers,
            params={"permission": "createProduct", "shop_id": "shop-b"}
        )
        assert revoked.status_code == 200
        assert revoked.json()["permissions"] == []

    def test_list_users_by_shop(
        self, client: TestClient, admin_headers: dict, manager_user: User, customer_user: User
    ):
        response = client.get("/api/v1/users", headers=admin_headers, params={"shop_id": "shop-b"})
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert {u["username"] for u in data["users"]} == {"manager", "customer"}

    def test_update_user_moves_active_shop(self, client: TestClient, admin_headers: dict, customer_user: User):
        response = client.put(
            f"/api/v1/users/{customer_user.id}",
            headers=admin_headers,
            json={"shop_id": "shop-c", "role": "shop_manager"}
        )
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["shop_id"] == "shop-c"
        assert user["role"] == "shop_manager"
        assert user["is_active"] is True

    def test_deactivated_user_cannot_log_in(self, client: TestClient, admin_headers: dict, customer_user: User):
        response = client.delete(f"/api/v1/users/{customer_user.id}", headers=admin_headers)
        assert response.status_code == 200

        login = client.post(
            "/api/v1/auth/login",
            json={"username": "customer", "password": "customer123"}
        )
        assert login.status_code == 403
        assert login.json()["error"]["code"] == "ACCOUNT_DISABLED"

    def test_change_password(self, client: TestClient, manager_headers: dict):
        response = client.put(
            "/api/v1/auth/change-password",
            headers=manager_headers,
            json={"current_password": "manager123", "new_password": "newsecret1"}
        )
        assert response.status_code == 200

        login = client.post(
            "/api/v1/auth/login",
            json={"username": "manager", "password": "newsecret1"}
        )
        assert login.status_code == 200

    def test_get_unknown_user(self, client: TestClient, admin_headers: dict):
        response = client.get("/api/v1/users/missing", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "USER_NOT_FOUND"


class TestProductEndpoints:
    """Tests for product store endpoints."""

    def test_create_product_and_variant(self, client: TestClient, manager_headers: dict):
        created = client.post(
            "/api/v1/products",
            headers=manager_headers,
            json={"id": "b1", "shop_id": "shop-b", "title": "Bag", "handle": "Canvas Bag"}
        )
        assert created.status_code == 200
        assert created.json()["product"]["handle"] == "canvas-bag"

        variant = client.post(
            "/api/v1/products/b1/variants",
            headers=manager_headers,
            json={"id": "b1-red", "title": "Red", "inventory_management": True, "inventory_quantity": 4}
        )
        assert variant.status_code == 200
        assert variant.json()["product"]["ancestors"] == ["b1"]
        assert variant.json()["product"]["shopId"] == "shop-b"

        product = client.get("/api/v1/products/b1", headers=manager_headers).json()["product"]
        assert [v["id"] for v in product["variants"]] == ["b1-red"]

    def test_create_product_in_foreign_shop_denied(self, client: TestClient, manager_headers: dict):
        response = client.post(
            "/api/v1/products",
            headers=manager_headers,
            json={"id": "x1", "shop_id": "shop-c", "title": "Nope"}
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ACCESS_DENIED"

    def test_duplicate_product(self, client: TestClient, admin_headers: dict, shirt: Product):
        response = client.post(
            "/api/v1/products",
            headers=admin_headers,
            json={"id": "p1", "title": "Shirt again"}
        )
        assert response.status_code == 409

    def test_unknown_product(self, client: TestClient, admin_headers: dict):
        response = client.get("/api/v1/products/missing", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PRODUCT_NOT_FOUND"

    def test_inventory_on_top_level_product_rejected(self, client: TestClient, admin_headers: dict, shirt: Product):
        response = client.put(
            "/api/v1/products/p1/inventory",
            headers=admin_headers,
            json={"inventory_quantity": 5}
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_PRODUCT"

    def test_inventory_update_without_catalog_entry(self, client: TestClient, admin_headers: dict, shirt: Product):
        response = client.put(
            "/api/v1/products/v1/inventory",
            headers=admin_headers,
            json={"inventory_quantity": 9}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["product"]["inventoryQuantity"] == 9
        assert data["catalogUpdated"] is False

    def test_inventory_update_accepts_camel_case(self, client: TestClient, admin_headers: dict, shirt: Product):
        response = client.put(
            "/api/v1/products/v1/inventory",
            headers=admin_headers,
            json={"inventoryQuantity": 7}
        )
        assert response.status_code == 200
        assert response.json()["product"]["inventoryQuantity"] == 7

    def test_inventory_update_denied_for_known_and_unknown_ids(
        self, client: TestClient, customer_headers: dict, shirt: Product
    ):
        for product_id in ("v1", "missing"):
            response = client.put(
                f"/api/v1/products/{product_id}/inventory",
                headers=customer_headers,
                json={"inventoryQuantity": 1}
            )
            assert response.status_code == 403
            assert response.json()["error"]["code"] == "ACCESS_DENIED"

    def test_deleted_product_not_found(self, client: TestClient, admin_headers: dict, shirt: Product, db):
        shirt.is_deleted = True
        db.commit()

        response = client.get("/api/v1/products/p1", headers=admin_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PRODUCT_NOT_FOUND"

    def test_add_media(self, client: TestClient, admin_headers: dict, shirt: Product):
        response = client.post(
            "/api/v1/products/p1/media",
            headers=admin_headers,
            json={"filename": "back.jpg", "priority": 3}
        )
        assert response.status_code == 200
        assert response.json()["media"]["product_id"] == "p1"

    def test_add_media_to_variant_rejected(self, client: TestClient, admin_headers: dict, shirt: Product):
        response = client.post(
            "/api/v1/products/v1/media",
            headers=admin_headers,
            json={"filename": "back.jpg"}
        )
        assert response.status_code == 400


class TestPublishEndpoint:
    """Tests for POST /api/v1/catalog/publish/products."""

    URL = "/api/v1/catalog/publish/products"

    def test_publish_single_id(self, client: TestClient, admin_headers: dict, shirt: Product, db):
        response = client.post(self.URL, headers=admin_headers, json={"productIds": "p1"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "productIds": ["p1"]}
        assert CatalogStore(db).get("p1")["type"] == "product-simple"

    def test_caller_without_create_product_denied(
        self, client: TestClient, customer_headers: dict, shirt: Product, db
    ):
        response = client.post(self.URL, headers=customer_headers, json={"productIds": ["p1"]})

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ACCESS_DENIED"
        assert response.json()["error"]["message"] == "Access Denied"
        assert CatalogStore(db).exists("p1") is False

    def test_products_of_other_shops_dropped(
        self, client: TestClient, manager_headers: dict, make_product, shirt: Product, db
    ):
        make_product("b1", shop_id="shop-b", variants=[{"id": "b1-v1"}])

        response = client.post(self.URL, headers=manager_headers, json={"productIds": ["p1", "b1"]})

        assert response.status_code == 200
        assert response.json()["productIds"] == ["b1"]
        assert CatalogStore(db).exists("b1") is True
        assert CatalogStore(db).exists("p1") is False

    def test_nothing_publishable(self, client: TestClient, manager_headers: dict, shirt: Product):
        response = client.post(self.URL, headers=manager_headers, json={"productIds": ["p1"]})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NO_PUBLISHABLE_PRODUCTS"

    def test_unknown_ids_not_publishable(self, client: TestClient, admin_headers: dict):
        response = client.post(self.URL, headers=admin_headers, json={"productIds": ["missing"]})

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NO_PUBLISHABLE_PRODUCTS"

    def test_variant_id_publishes_product(self, client: TestClient, admin_headers: dict, shirt: Product, db):
        response = client.post(self.URL, headers=admin_headers, json={"productIds": ["v1"]})

        assert response.status_code == 200
        assert response.json()["productIds"] == ["p1"]
        assert CatalogStore(db).exists("p1") is True

    def test_variant_and_product_ids_collapse_to_one_entry(
        self, client: TestClient, admin_headers: dict, shirt: Product
    ):
        response = client.post(self.URL, headers=admin_headers, json={"productIds": ["v2", "p1", "v1"]})

        assert response.status_code == 200
        assert response.json()["productIds"] == ["p1"]

    def test_failed_write_reports_publish_failed(
        self, client: TestClient, admin_headers: dict, make_product, shirt: Product, db, monkeypatch
    ):
        make_product("p2", variants=[{"id": "p2-v1"}])
        publish_product = CatalogPublisher.publish_product

        async def publish_all_but_p2(self, product_id):
            if product_id == "p2":
                return False
            return await publish_product(self, product_id)

        monkeypatch.setattr(CatalogPublisher, "publish_product", publish_all_but_p2)

        response = client.post(self.URL, headers=admin_headers, json={"productIds": ["p1", "p2"]})

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "PUBLISH_FAILED"
        assert error["message"] == "Some products could not be published to the catalog."
        assert error["details"]["product_ids"] == ["p1", "p2"]
        # entries are written one by one; p1 stays published
        assert CatalogStore(db).exists("p1") is True
        assert CatalogStore(db).exists("p2") is False

    def test_empty_id_rejected(self, client: TestClient, admin_headers: dict):
        response = client.post(self.URL, headers=admin_headers, json={"productIds": [" "]})

        assert response.status_code == 422

    def test_requires_authentication(self, client: TestClient):
        response = client.post(self.URL, json={"productIds": "p1"})

        assert response.status_code == 401


class TestCatalogEndpoints:
    """Tests for catalog reads and inventory flag refreshes."""

    def test_get_entry(self, client: TestClient, admin_headers: dict, shirt: Product):
        client.post("/api/v1/catalog/publish/products", headers=admin_headers, json={"productIds": "p1"})

        response = client.get("/api/v1/catalog/p1")

        assert response.status_code == 200
        product = response.json()["product"]
        assert product["isLowQuantity"] is True
        assert len(product["media"]) == 1

    def test_get_missing_entry(self, client: TestClient):
        response = client.get("/api/v1/catalog/p1")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "CATALOG_ENTRY_NOT_FOUND"

    def test_inventory_update_reflags_entry(self, client: TestClient, admin_headers: dict, shirt: Product):
        client.post("/api/v1/catalog/publish/products", headers=admin_headers, json={"productIds": "p1"})

        response = client.put(
            "/api/v1/products/v1/inventory",
            headers=admin_headers,
            json={"inventory_quantity": 0}
        )

        assert response.status_code == 200
        assert response.json()["catalogUpdated"] is True
        entry = client.get("/api/v1/catalog/p1").json()["product"]
        assert entry["isSoldOut"] is True
        assert entry["isLowQuantity"] is False

    def test_adjustment_without_changes(self, client: TestClient, admin_headers: dict, shirt: Product):
        client.post("/api/v1/catalog/publish/products", headers=admin_headers, json={"productIds": "p1"})

        response = client.post("/api/v1/catalog/p1/inventory-adjustments", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True, "updated": False}

    def test_adjustment_in_foreign_shop_denied(
        self, client: TestClient, admin_headers: dict, manager_headers: dict, shirt: Product
    ):
        client.post("/api/v1/catalog/publish/products", headers=admin_headers, json={"productIds": "p1"})

        response = client.post("/api/v1/catalog/p1/inventory-adjustments", headers=manager_headers)

        assert response.status_code == 403

    def test_adjustment_of_unpublished_product(self, client: TestClient, admin_headers: dict, shirt: Product):
        response = client.post("/api/v1/catalog/p1/inventory-adjustments", headers=admin_headers)

        assert response.status_code == 404

    def test_adjustment_denied_for_known_and_unknown_entries(
        self, client: TestClient, admin_headers: dict, customer_headers: dict, shirt: Product
    ):
        client.post("/api/v1/catalog/publish/products", headers=admin_headers, json={"productIds": "p1"})

        for product_id in ("p1", "missing"):
            response = client.post(
                f"/api/v1/catalog/{product_id}/inventory-adjustments",
                headers=customer_headers
            )
            assert response.status_code == 403
            assert response.json()["error"]["code"] == "ACCESS_DENIED"


class TestPackageEndpoints:
    """Tests for the package registry endpoints."""

    def test_list_packages(self, client: TestClient):
        response = client.get("/api/v1/packages")

        assert response.status_code == 200
        names = [p["name"] for p in response.json()["packages"]]
        assert "reaction-payments" in names
        assert "reaction-catalog" in names

    def test_list_settings_panels(self, client: TestClient):
        response = client.get("/api/v1/packages", params={"provides": "settings"})

        [payments] = response.json()["packages"]
        assert payments["name"] == "reaction-payments"
        assert payments["autoEnable"] is True
        assert [entry["name"] for entry in payments["registry"]] == ["payment/settings"]

    def test_get_package(self, client: TestClient):
        response = client.get("/api/v1/packages/reaction-payments")

        assert response.status_code == 200
        assert response.json()["package"]["settings"] == {"payments": {"enabled": True}}

    def test_unknown_package(self, client: TestClient):
        response = client.get("/api/v1/packages/reaction-unknown")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PACKAGE_NOT_FOUND"
