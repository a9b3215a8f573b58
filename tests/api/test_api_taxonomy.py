"""Tests for taxonomy endpoints."""

from fastapi.testclient import TestClient

from textile_catalog.api.taxonomy import CATEGORY_DELETE_WARNING


class TestTaxonomyReads:
    """Tests for the hierarchy lists."""

    def test_lists_active_only(self, auth_client: TestClient, seed) -> None:
        seed("categories", "c1", {"name": "Cotton"})
        seed("categories", "c2", {"name": "Retired", "active": False})
        seed("subcategories", "s1", {"name": "Shirting", "categoryId": "c1"})
        seed("subcategories", "s2", {"name": "Other", "categoryId": "c9"})
        seed("fabricTypes", "f1", {"name": "Poplin", "subcategoryId": "s1", "active": None})

        categories = auth_client.get("/categories").json()
        subcategories = auth_client.get("/categories/c1/subcategories").json()
        fabric_types = auth_client.get("/subcategories/s1/fabric-types").json()

        assert categories == [{"id": "c1", "name": "Cotton"}]
        assert subcategories == [{"id": "s1", "name": "Shirting", "category_id": "c1"}]
        assert fabric_types == [{"id": "f1", "name": "Poplin", "subcategory_id": "s1"}]


class TestTaxonomyAdmin:
    """Tests for admin-only mutations."""

    def test_plain_user_cannot_create(self, auth_client: TestClient) -> None:
        response = auth_client.post("/categories", json={"name": "Silk"})

        assert response.status_code == 403
        assert response.json()["error_code"] == "FORBIDDEN"

    def test_create_hierarchy(self, admin_client: TestClient) -> None:
        category = admin_client.post("/categories", json={"name": "Silk"})
        assert category.status_code == 201
        category_id = category.json()["id"]

        sub = admin_client.post(
            "/subcategories", json={"name": "Sarees", "category_id": category_id}
        )
        sub_id = sub.json()["id"]
        fabric = admin_client.post(
            "/fabric-types", json={"name": "Banarasi", "subcategory_id": sub_id}
        )

        assert fabric.status_code == 201
        assert admin_client.get(f"/categories/{category_id}/subcategories").json()[0][
            "name"
        ] == "Sarees"
        assert admin_client.get(f"/subcategories/{sub_id}/fabric-types").json()[0][
            "name"
        ] == "Banarasi"

    def test_blank_name_rejected(self, admin_client: TestClient) -> None:
        response = admin_client.post("/categories", json={"name": "  "})

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_delete_does_not_cascade(self, admin_client: TestClient, seed) -> None:
        seed("categories", "c1", {"name": "Cotton"})
        seed("subcategories", "s1", {"name": "Shirting", "categoryId": "c1"})

        response = admin_client.delete("/categories/c1")

        assert response.status_code == 200
        assert response.json() == {
            "id": "c1",
            "deleted": True,
            "warning": CATEGORY_DELETE_WARNING,
        }
        assert admin_client.get("/categories").json() == []
        assert len(admin_client.get("/categories/c1/subcategories").json()) == 1
