from types import SimpleNamespace

import pytest

from utils.qr_store import SqlQRStore, SupabaseQRStore


def _record(content="hello", kind="TEXT"):
    return {
        "type": kind,
        "content": content,
        "data": {"text": content},
        "style": {"size": 256},
        "image_url": None,
    }


# =============================================================================
# 🗄️ SqlQRStore
# =============================================================================
def test_create_assigns_id_and_defaults(db):
    store = SqlQRStore(db)
    stored = store.create(_record(), user_id="user-1")

    assert len(stored["id"]) == 32
    assert stored["type"] == "TEXT"
    assert stored["content"] == "hello"
    assert stored["data"] == {"text": "hello"}
    assert stored["scan_count"] == 0
    assert stored["user_id"] == "user-1"
    assert stored["created_at"] is not None


def test_list_newest_first_with_paging(db):
    store = SqlQRStore(db)
    for i in range(5):
        store.create(_record(f"qr-{i}"))

    first_page = store.list(limit=2)
    assert [r["content"] for r in first_page] == ["qr-4", "qr-3"]
    second_page = store.list(limit=2, offset=2)
    assert [r["content"] for r in second_page] == ["qr-2", "qr-1"]


def test_list_and_get_are_scoped_by_owner(db):
    store = SqlQRStore(db)
    mine = store.create(_record("mine"), user_id="alice")
    store.create(_record("theirs"), user_id="bob")
    anonymous = store.create(_record("anonymous"))

    assert [r["content"] for r in store.list(user_id="alice")] == ["mine"]
    assert store.get(mine["id"], user_id="bob") is None
    assert store.get(mine["id"], user_id="alice")["content"] == "mine"
    assert [r["content"] for r in store.list()] == ["anonymous"]
    assert store.get(anonymous["id"])["content"] == "anonymous"


def test_anonymous_cannot_touch_owned_records(db):
    store = SqlQRStore(db)
    owned = store.create(_record("owned"), user_id="alice")

    assert store.get(owned["id"]) is None
    assert store.update(owned["id"], {"content": "hijacked"}) is None
    assert store.delete(owned["id"]) is False
    assert store.summary() == []
    assert store.get(owned["id"], user_id="alice")["content"] == "owned"


def test_scans_are_counted_for_owned_records(db):
    store = SqlQRStore(db)
    owned = store.create(_record(), user_id="alice")
    assert store.record_scan(owned["id"]) is not None
    assert store.get(owned["id"], user_id="alice")["scan_count"] == 1


def test_update_and_delete(db):
    store = SqlQRStore(db)
    stored = store.create(_record("old"), user_id="alice")

    assert store.update(stored["id"], {"content": "new"}, user_id="bob") is None
    updated = store.update(stored["id"], {"content": "new", "id": "ignored"}, user_id="alice")
    assert updated["content"] == "new"
    assert updated["id"] == stored["id"]
    assert updated["updated_at"] is not None

    assert store.delete(stored["id"], user_id="bob") is False
    assert store.delete(stored["id"], user_id="alice") is True
    assert store.get(stored["id"], user_id="alice") is None


def test_record_scan_increments_counter(db):
    store = SqlQRStore(db)
    stored = store.create(_record())

    scan = store.record_scan(stored["id"], {"device_type": "mobile", "unknown": "x"})
    store.record_scan(stored["id"])

    assert scan["device_type"] == "mobile"
    record = store.get(stored["id"])
    assert record["scan_count"] == 2
    assert record["last_scanned"] is not None
    assert len(store.analytics(stored["id"])) == 2
    assert store.record_scan("missing") is None


def test_summary_orders_by_scans(db):
    store = SqlQRStore(db)
    quiet = store.create(_record("quiet"))
    busy = store.create(_record("busy"))
    for _ in range(3):
        store.record_scan(busy["id"])
    store.record_scan(quiet["id"])

    summary = store.summary()
    assert [r["id"] for r in summary] == [busy["id"], quiet["id"]]
    assert set(summary[0]) == {"id", "type", "scan_count", "created_at", "last_scanned"}


def test_delete_removes_scans(db):
    store = SqlQRStore(db)
    stored = store.create(_record())
    store.record_scan(stored["id"])
    store.delete(stored["id"])
    assert store.analytics(stored["id"]) == []


# =============================================================================
# ☁️ SupabaseQRStore (mit Fake-Client)
# =============================================================================
class FakeQuery:
    def __init__(self, client, table, data):
        self.client = client
        self.table = table
        self.calls = []
        self.data = data

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    def execute(self):
        self.client.executed.append((self.table, self.calls))
        return SimpleNamespace(data=self.data)


class FakeSupabase:
    def __init__(self, data=None):
        self.data = data if data is not None else []
        self.executed = []
        self.rpcs = []

    def table(self, name):
        return FakeQuery(self, name, self.data)

    def rpc(self, name, params):
        self.rpcs.append((name, params))
        return SimpleNamespace(execute=lambda: SimpleNamespace(data=None))


def test_supabase_create_inserts_with_owner():
    client = FakeSupabase(data=[{"id": "abc", "type": "URL"}])
    stored = SupabaseQRStore(client).create(_record(kind="URL"), user_id="u1")

    assert stored == {"id": "abc", "type": "URL"}
    table, calls = client.executed[0]
    assert table == "qr_codes"
    name, args, _ = calls[0]
    assert name == "insert"
    assert args[0]["user_id"] == "u1"
    assert args[0]["content"] == "hello"


def test_supabase_list_uses_range_and_owner_filter():
    client = FakeSupabase(data=[{"id": "1"}])
    rows = SupabaseQRStore(client).list(limit=10, offset=20, user_id="u1")

    assert rows == [{"id": "1"}]
    _, calls = client.executed[0]
    assert ("order", ("created_at",), {"desc": True}) in calls
    assert ("range", (20, 29), {}) in calls
    assert ("eq", ("user_id", "u1"), {}) in calls


def test_supabase_record_scan_calls_increment_rpc():
    client = FakeSupabase(data=[{"id": "abc"}])
    SupabaseQRStore(client).record_scan("abc", {"city": "Berlin"})

    assert client.executed[0][0] == "qr_codes"
    table, calls = client.executed[1]
    assert table == "qr_analytics"
    assert calls[0][1][0]["city"] == "Berlin"
    assert client.rpcs == [("increment_scan_count", {"qr_id": "abc"})]


@pytest.mark.parametrize("data, expected", [([], None), ([{"id": "x"}], {"id": "x"})])
def test_supabase_get(data, expected):
    assert SupabaseQRStore(FakeSupabase(data=data)).get("x") == expected


def test_supabase_record_scan_unknown_id():
    client = FakeSupabase(data=[])
    assert SupabaseQRStore(client).record_scan("missing") is None
    assert [table for table, _ in client.executed] == ["qr_codes"]
    assert client.rpcs == []


def test_supabase_anonymous_queries_only_unowned_rows():
    client = FakeSupabase(data=[])
    store = SupabaseQRStore(client)
    store.list()
    store.delete("abc")

    for _, calls in client.executed:
        assert ("is_", ("user_id", "null"), {}) in calls
        assert not any(name == "eq" and args[0] == "user_id" for name, args, _ in calls)
