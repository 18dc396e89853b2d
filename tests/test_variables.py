from gql_e2e.scenario.schema import Session
from gql_e2e.scenario.variables import VariableStore


def test_merge_last_write_wins():
    store = VariableStore()
    store.merge({"a": 1})
    store.merge({"a": 2})
    assert store["a"] == 2


def test_merge_adds_new_keys():
    store = VariableStore()
    store.merge({"a": 1})
    store.merge({"b": 1})
    assert store.get_all() == {"a": 1, "b": 1}


def test_merge_is_shallow():
    store = VariableStore({"user": {"id": 1, "name": "x"}})
    store.merge({"user": {"id": 2}})
    assert store["user"] == {"id": 2}


def test_get_all_returns_live_mapping():
    store = VariableStore()
    view = store.get_all()
    store.merge({"token": "x"})
    assert view["token"] == "x"


def test_empty_updates_are_ignored():
    store = VariableStore({"a": 1})
    store.merge(None)
    store.merge({})
    assert store.get_all() == {"a": 1}
    assert store.history == []


def test_non_mapping_update_is_ignored_with_warning(capsys):
    store = VariableStore()
    store.merge(["a", "b"], step="create", source="test_response")

    assert len(store) == 0
    assert "expected a mapping" in capsys.readouterr().err


def test_history_records_source_and_keys():
    store = VariableStore()
    store.merge({"id": "abc", "name": "n"}, step="create", source="test_response")

    record = store.history[0]
    assert record.step == "create"
    assert record.source == "test_response"
    assert record.keys == ["id", "name"]


def test_session_property():
    store = VariableStore()
    assert store.session is None

    store.merge({"session": {"itemId": "1", "data": {}}})
    assert store.session == {"itemId": "1", "data": {}}
    assert "session" in store


def test_initial_values_are_copied():
    initial = {"a": 1}
    store = VariableStore(initial)
    store.merge({"a": 2})
    assert initial == {"a": 1}


def test_verbose_merge_prints_keys(capsys):
    store = VariableStore(verbose=True)
    store.merge({"userId": "abc"}, source="test_response")
    assert "userId" in capsys.readouterr().err


def test_session_from_value():
    assert Session.from_value(None) is None
    session = Session.from_value({"itemId": 7, "data": "tok"})
    assert session == Session(item_id="7", data="tok")
