"""
==============================================================================
Catalog Store Tests
==============================================================================

Tests for put (replace) and patch (merge) on catalog entries.

==============================================================================
"""

from sqlalchemy.exc import OperationalError

from app.catalog.store import CatalogStore


class TestCatalogStore:
    """Tests for CatalogStore."""

    def test_get_missing(self, catalog: CatalogStore):
        assert catalog.get("p1") is None
        assert catalog.exists("p1") is False

    def test_put_inserts(self, catalog: CatalogStore):
        assert catalog.put("p1", {"id": "p1", "title": "Shirt"}, shop_id="primary") is True
        assert catalog.get("p1") == {"id": "p1", "title": "Shirt"}
        assert catalog.exists("p1") is True

    def test_put_replaces_whole_document(self, catalog: CatalogStore):
        catalog.put("p1", {"id": "p1", "title": "Shirt", "vendor": "Acme"})
        catalog.put("p1", {"id": "p1", "title": "T-Shirt"})

        assert catalog.get("p1") == {"id": "p1", "title": "T-Shirt"}

    def test_patch_merges(self, catalog: CatalogStore):
        catalog.put("p1", {"id": "p1", "isSoldOut": False, "media": [{"image": "a"}]})

        assert catalog.patch("p1", {"isSoldOut": True}) is True
        assert catalog.get("p1") == {"id": "p1", "isSoldOut": True, "media": [{"image": "a"}]}

    def test_patch_missing(self, catalog: CatalogStore):
        assert catalog.patch("p1", {"isSoldOut": True}) is False
        assert catalog.exists("p1") is False

    def test_patch_is_persisted(self, db, catalog: CatalogStore):
        catalog.put("p1", {"id": "p1", "isSoldOut": False})
        catalog.patch("p1", {"isSoldOut": True})

        db.expire_all()
        assert CatalogStore(db).get("p1")["isSoldOut"] is True

    def test_get_returns_copy(self, catalog: CatalogStore):
        catalog.put("p1", {"id": "p1", "variants": [{"id": "v1"}]})

        document = catalog.get("p1")
        document["variants"].append({"id": "v2"})

        assert catalog.get("p1")["variants"] == [{"id": "v1"}]

    def test_list_keys_by_shop(self, catalog: CatalogStore):
        catalog.put("p2", {"id": "p2"}, shop_id="shop-b")
        catalog.put("p1", {"id": "p1"}, shop_id="primary")

        assert catalog.list_keys() == ["p1", "p2"]
        assert catalog.list_keys("shop-b") == ["p2"]

    def test_delete(self, catalog: CatalogStore):
        catalog.put("p1", {"id": "p1"})

        assert catalog.delete("p1") is True
        assert catalog.delete("p1") is False
        assert catalog.get("p1") is None

    def test_failed_commit_is_rolled_back(self, db, catalog: CatalogStore, monkeypatch):
        def commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", commit)

        assert catalog.put("p1", {"id": "p1"}) is False

        monkeypatch.undo()
        assert catalog.exists("p1") is False

    def test_failed_patch_keeps_stored_document(self, db, catalog: CatalogStore, monkeypatch):
        catalog.put("p1", {"id": "p1", "isSoldOut": False})

        def commit():
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "commit", commit)

        assert catalog.patch("p1", {"isSoldOut": True}) is False

        monkeypatch.undo()
        assert catalog.get("p1")["isSoldOut"] is False
