import json

import pytest

from storefront.cart import CART_KEY, CartStore
from storefront.storage import JsonFileCartStorage, MemoryCartStorage


class TestMemoryStorage:
    def test_missing_key_loads_none(self):
        assert MemoryCartStorage().load("anything") is None

    def test_values_are_copied(self):
        storage = MemoryCartStorage()
        value = {"items": []}
        storage.save("k", value)
        value["items"].append(1)

        assert storage.load("k") == {"items": []}


class TestJsonFileStorage:
    def test_missing_file_loads_none(self, tmp_path):
        assert JsonFileCartStorage(tmp_path / "state.json").load(CART_KEY) is None

    def test_save_then_load(self, tmp_path):
        storage = JsonFileCartStorage(tmp_path / "nested" / "state.json")
        storage.save("a", {"x": 1})
        storage.save("b", [1, 2])

        reopened = JsonFileCartStorage(tmp_path / "nested" / "state.json")
        assert reopened.load("a") == {"x": 1}
        assert reopened.load("b") == [1, 2]

    def test_leaves_no_temporary_file(self, tmp_path):
        path = tmp_path / "state.json"
        JsonFileCartStorage(path).save("a", 1)
        assert [p.name for p in tmp_path.iterdir()] == ["state.json"]

    def test_non_object_document_raises(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2]")
        with pytest.raises(ValueError):
            JsonFileCartStorage(path).load("a")

    def test_save_replaces_corrupt_document(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("[1, 2]")
        JsonFileCartStorage(path).save("a", 1)
        assert json.loads(path.read_text()) == {"a": 1}

    def test_cart_restores_from_file(self, tmp_path):
        path = tmp_path / "state.json"
        CartStore(JsonFileCartStorage(path)).add_item({"id": "mug", "price": "9.99"}, 2)

        cart = CartStore(JsonFileCartStorage(path))
        assert cart.count() == 2

    def test_corrupt_file_gives_empty_cart(self, tmp_path):
        path = tmp_path / "state.json"
        path.write_text("{broken")
        assert not CartStore(JsonFileCartStorage(path))
