import pytest

from waste_config import reset_config
from waste_inventory import (
    InventoryEditor,
    StoreDeleteError,
    StoreInsertError,
    StoreLoadError,
    WasteItem,
)


class FakeStore:
    """In-memory Record Store with switchable failures."""

    def __init__(self, items=None):
        self.rows = {}
        self.next_id = 1
        self.fail_load = False
        self.fail_insert = False
        self.fail_delete = False
        self.deleted = []
        for item in items or []:
            self.insert(item)

    def load_all(self):
        if self.fail_load:
            raise StoreLoadError("disk on fire")
        return [WasteItem(**vars(item)) for _, item in sorted(self.rows.items())]

    def insert(self, item):
        if self.fail_insert:
            raise StoreInsertError("database is locked")
        new_id = self.next_id
        self.next_id += 1
        self.rows[new_id] = WasteItem(
            name=item.name, quantity=item.quantity, waste_type=item.waste_type,
            location=item.location, method=item.method, id=new_id,
        )
        return new_id

    def delete_by_id(self, item_id):
        if self.fail_delete:
            raise StoreDeleteError("database is locked")
        self.deleted.append(item_id)
        self.rows.pop(item_id, None)


def make_item(name, quantity=1.0, waste_type="Solid", location="Bay1", method="Landfill"):
    return WasteItem(name=name, quantity=quantity, waste_type=waste_type,
                     location=location, method=method)


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def two_item_store():
    return FakeStore([make_item("Oil", 3.2, "Liquid"), make_item("Paint", 1.5, "Chemical")])


@pytest.fixture()
def editor(store):
    return InventoryEditor.from_store(store)


@pytest.fixture()
def two_item_editor(two_item_store):
    return InventoryEditor.from_store(two_item_store)


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch, tmp_path):
    monkeypatch.setenv("WMTUI_LOG_FILE", str(tmp_path / "wmtui.log"))
    reset_config()
    yield
    reset_config()
