"""Tests for Reactive and Registration."""

import logging

import pytest

from statebox import InvalidArgument, PathUnreachable, Reactive, ReadOnlyStateError

USER = {
    "first_name": "First",
    "friends": 0,
    "big": {"foo": "sub-bar", "sub": {"titi": 421, "town": "Douala"}},
    "tags": ["a", "b"],
    "admin": None,
}


class TestSnapshot:
    def test_snapshot_equals_initial(self):
        r = Reactive(USER)
        assert r.snapshot() == USER
        assert r.state == USER

    def test_mutating_snapshot_does_not_leak(self):
        r = Reactive(USER)
        snap = r.snapshot()
        snap["big"]["sub"]["town"] = "Yaounde"
        snap["tags"].append("c")
        assert r.snapshot() == USER

    def test_constructor_argument_is_copied(self):
        value = {"nested": {"x": 1}}
        r = Reactive(value)
        value["nested"]["x"] = 99
        assert r.snapshot() == {"nested": {"x": 1}}

    def test_state_is_read_only(self, caplog):
        r = Reactive({"a": 1})
        with caplog.at_level(logging.WARNING, logger="statebox.reactive"):
            with pytest.raises(ReadOnlyStateError):
                r.state = {"a": 2}
        assert r.snapshot() == {"a": 1}
        assert "set_state" in caplog.text

    def test_repr(self):
        assert "Reactive({'a': 1})" in repr(Reactive({"a": 1}))


class TestSetState:
    def test_shallow_merge(self):
        r = Reactive({"a": 1, "b": {"c": 2}})
        r.set_state({"b": 3})
        assert r.snapshot() == {"a": 1, "b": 3}

    def test_nested_values_are_replaced_not_merged(self):
        r = Reactive({"a": 1, "b": {"c": 2, "d": 4}})
        r.set_state({"b": {"c": 5}})
        assert r.snapshot() == {"a": 1, "b": {"c": 5}}

    def test_non_mapping_state_is_replaced(self):
        r = Reactive(1)
        r.set_state(2)
        assert r.snapshot() == 2

    def test_partial_is_copied(self):
        r = Reactive({"a": []})
        items = [1]
        r.set_state({"a": items})
        items.append(2)
        assert r.snapshot() == {"a": [1]}

    def test_notifies_in_registration_order(self):
        r = Reactive({"n": 0})
        log = []
        r.register(lambda s: log.append(("first", s["n"])))
        r.register(lambda s: log.append(("second", s["n"])))
        r.set_state({"n": 1})
        assert log == [("first", 1), ("second", 1)]

    def test_notifies_even_when_value_is_unchanged(self):
        r = Reactive({"n": 0})
        log = []
        r.register(lambda s: log.append(s))
        r.set_state({"n": 0})
        assert log == [{"n": 0}]

    def test_each_observer_gets_its_own_copy(self):
        r = Reactive({"items": []})
        seen = []

        def vandal(s):
            s["items"].append("x")

        r.register(vandal)
        r.register(lambda s: seen.append(s))
        r.set_state({"items": [1]})
        assert seen == [{"items": [1]}]
        assert r.snapshot() == {"items": [1]}


class TestResetState:
    def test_restores_initial(self):
        r = Reactive(USER)
        r.set_state({"first_name": "Other", "friends": 3})
        r.set_state({"big": None})
        r.reset_state()
        assert r.snapshot() == USER

    def test_reset_is_idempotent(self):
        r = Reactive({"a": 1})
        r.set_state({"a": 2})
        r.reset_state()
        r.reset_state()
        assert r.snapshot() == {"a": 1}

    def test_reset_notifies(self):
        r = Reactive({"a": 1})
        log = []
        r.register(lambda s: log.append(s["a"]))
        r.set_state({"a": 2})
        r.reset_state()
        assert log == [2, 1]


class TestRegister:
    def test_rejects_non_callable(self):
        r = Reactive({})
        with pytest.raises(InvalidArgument):
            r.register("not a function")

    def test_unregister_silences(self):
        r = Reactive({"a": 0})
        log = []
        reg = r.register(lambda s: log.append(s["a"]))
        r.set_state({"a": 1})
        reg.unregister()
        r.set_state({"a": 2})
        r.reset_state()
        assert log == [1]
        assert not reg.active

    def test_unregister_twice_is_safe(self):
        r = Reactive({})
        reg = r.register(lambda s: None)
        reg.unregister()
        reg.unregister()

    def test_call_handler_uses_current_snapshot(self):
        r = Reactive({"a": 0})
        log = []
        reg = r.register(lambda s: log.append(s["a"]))
        r.set_state({"a": 5})
        reg.call_handler()
        assert log == [5, 5]

    def test_call_handler_after_unregister_is_noop(self):
        r = Reactive({"a": 0})
        log = []
        reg = r.register(lambda s: log.append(s))
        reg.unregister()
        reg.call_handler()
        assert log == []

    def test_unregister_keeps_other_observers(self):
        r = Reactive({"a": 0})
        log = []
        first = r.register(lambda s: log.append("first"))
        r.register(lambda s: log.append("second"))
        first.unregister()
        r.register(lambda s: log.append("third"))
        r.set_state({"a": 1})
        assert log == ["second", "third"]

    def test_unregister_during_notification(self):
        r = Reactive({"a": 0})
        log = []
        regs = []

        def once(s):
            log.append("once")
            regs[0].unregister()

        regs.append(r.register(once))
        r.register(lambda s: log.append("after"))
        r.set_state({"a": 1})
        r.set_state({"a": 2})
        assert log == ["once", "after", "after"]


class TestReachValueOf:
    def test_nested_path(self):
        r = Reactive(USER)
        assert r.reach_value_of("big.sub.town") == "Douala"
        assert r.reach_value_of("first_name") == "First"

    def test_returns_a_copy(self):
        r = Reactive(USER)
        sub = r.reach_value_of("big.sub")
        sub["town"] = "Yaounde"
        assert r.reach_value_of("big.sub.town") == "Douala"

    def test_sequence_index(self):
        r = Reactive(USER)
        assert r.reach_value_of("tags.1") == "b"
        assert r.reach_value_of("tags.5") is None

    def test_missing_key_is_none(self):
        r = Reactive(USER)
        assert r.reach_value_of("big.nope") is None

    @pytest.mark.parametrize("path", ["", None, 42])
    def test_invalid_path(self, path):
        r = Reactive(USER)
        with pytest.raises(InvalidArgument):
            r.reach_value_of(path)

    @pytest.mark.parametrize("path", ["admin.role", "big.nope.deeper", "friends.x", "tags.first"])
    def test_unreachable(self, path):
        r = Reactive(USER)
        with pytest.raises(PathUnreachable):
            r.reach_value_of(path)
