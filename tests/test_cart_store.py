import json
from decimal import Decimal

import pytest

from batchcart.database import CartStore, persist_on_change
from batchcart.models import CartLine
from batchcart.services import CartEngine
from helpers import make_product


@pytest.fixture
def path(tmp_path):
    return tmp_path / "cart.json"


@pytest.fixture
def store(path):
    return CartStore(str(path))


def _entry(product_id, quantity, price="10"):
    return {
        "product": make_product(product_id, price).model_dump(mode="json", by_alias=True),
        "quantity": quantity,
    }


class TestLoad:
    def test_missing_file_loads_empty(self, store):
        assert store.load() == []

    def test_corrupt_file_loads_empty(self, store, path):
        path.write_text("{not json", encoding="utf-8")
        assert store.load() == []

    def test_non_object_file_loads_empty(self, store, path):
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert store.load() == []

    def test_malformed_entry_loads_empty(self, store, path):
        path.write_text(json.dumps({"batchcart:cart": [{"quantity": 2}]}), encoding="utf-8")
        assert store.load() == []

    def test_missing_key_loads_empty(self, store, path):
        path.write_text(json.dumps({"other": []}), encoding="utf-8")
        assert store.load() == []

    def test_drops_non_positive_quantities(self, store, path):
        path.write_text(
            json.dumps({"batchcart:cart": [_entry("A", 0), _entry("B", -3), _entry("C", 2)]}),
            encoding="utf-8",
        )

        lines = store.load()

        assert [(line.product_id, line.quantity) for line in lines] == [("C", 2)]

    def test_duplicate_products_keep_first(self, store, path):
        path.write_text(
            json.dumps({"batchcart:cart": [_entry("A", 2), _entry("A", 5)]}),
            encoding="utf-8",
        )

        lines = store.load()

        assert len(lines) == 1
        assert lines[0].quantity == 2


class TestSave:
    def test_round_trip_preserves_order_and_prices(self, store):
        lines = [
            CartLine(make_product("B", "50.25"), 1),
            CartLine(make_product("A", "100"), 3),
        ]

        store.save(lines)
        loaded = store.load()

        assert loaded == lines
        assert loaded[0].product.price == Decimal("50.25")

    @pytest.mark.parametrize("price", ["12345678901234567.89", "0.3333333333333333333"])
    def test_high_precision_prices_survive_reload(self, store, price):
        store.save([CartLine(make_product("A", price), 2)])

        loaded = store.load()

        assert loaded[0].product.price == Decimal(price)
        assert loaded[0].subtotal == Decimal(price) * 2

    def test_float_prices_from_older_files_still_load(self, store, path):
        entry = _entry("A", 1)
        entry["product"]["price"] = 99.5
        path.write_text(json.dumps({"batchcart:cart": [entry]}), encoding="utf-8")

        assert store.load()[0].product.price == Decimal("99.5")

    def test_save_keeps_other_keys(self, store, path):
        path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

        store.save([CartLine(make_product("A", "10"), 1)])

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["theme"] == "dark"
        assert len(data["batchcart:cart"]) == 1

    def test_save_overwrites_unreadable_file(self, store, path):
        path.write_text("garbage", encoding="utf-8")

        store.save([CartLine(make_product("A", "10"), 4)])

        assert store.load()[0].quantity == 4

    def test_save_creates_directory(self, tmp_path):
        store = CartStore(str(tmp_path / "nested" / "dir" / "cart.json"))

        store.save([CartLine(make_product("A", "10"), 1)])

        assert len(store.load()) == 1

    def test_save_failure_is_swallowed(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory", encoding="utf-8")
        store = CartStore(str(blocker / "cart.json"))

        store.save([CartLine(make_product("A", "10"), 1)])

        assert store.load() == []

    def test_separate_keys_do_not_collide(self, path):
        first = CartStore(str(path), key="one")
        second = CartStore(str(path), key="two")

        first.save([CartLine(make_product("A", "10"), 1)])
        second.save([CartLine(make_product("B", "20"), 2)])

        assert [line.product_id for line in first.load()] == ["A"]
        assert [line.product_id for line in second.load()] == ["B"]


class TestClear:
    def test_clear_removes_only_cart_key(self, store, path):
        path.write_text(json.dumps({"theme": "dark"}), encoding="utf-8")
        store.save([CartLine(make_product("A", "10"), 1)])

        store.clear()

        assert json.loads(path.read_text(encoding="utf-8")) == {"theme": "dark"}
        assert store.load() == []

    def test_clear_without_file(self, store, path):
        store.clear()
        assert not path.exists()


class TestPersistOnChange:
    def test_engine_changes_are_saved(self, store, scheduler):
        engine = CartEngine(scheduler=scheduler)
        engine.subscribe(persist_on_change(store))

        engine.add_item(make_product("A", "100"))
        engine.add_item(make_product("A", "100"))

        assert [(line.product_id, line.quantity) for line in store.load()] == [("A", 2)]

    def test_clear_cart_saves_empty_lines(self, store, scheduler):
        engine = CartEngine(scheduler=scheduler)
        engine.subscribe(persist_on_change(store))
        engine.add_item(make_product("A", "100"))

        engine.clear_cart()

        assert store.load() == []

    def test_notification_changes_do_not_write(self, store, path, scheduler):
        engine = CartEngine(scheduler=scheduler)
        engine.subscribe(persist_on_change(store))
        engine.add_item(make_product("A", "100"))
        path.unlink()

        engine.hide_notification()
        engine.set_min_order_value(Decimal("500"))

        assert not path.exists()

    def test_rehydration_restores_cart(self, store, scheduler):
        engine = CartEngine(scheduler=scheduler)
        engine.subscribe(persist_on_change(store))
        engine.add_item(make_product("A", "100"))
        engine.add_item(make_product("A", "100"))
        engine.add_item(make_product("B", "50"))

        restored = CartEngine(lines=store.load(), scheduler=scheduler)

        assert restored.snapshot.total == Decimal("250")
        assert restored.snapshot.item_count == 3
