"""Tests for mdp.tables."""

from __future__ import annotations

import pytest

from mdp.errors import NoActionDefinedError
from mdp.StateSpace import StateSpace
from mdp.TableMDP import StateLink, TableMDP
from mdp.tables import PolicyTable, ValueTable


@pytest.fixture
def space() -> StateSpace:
    return StateSpace.from_model(TableMDP([
        StateLink("a", "b", "go", 1.0, 1.0),
        StateLink("b", "end", "go", 1.0, 1.0),
    ]))


class TestValueTable:
    def test_zero_initialised(self, space: StateSpace) -> None:
        values = ValueTable(space)
        assert values.as_dict() == {"a": 0.0, "b": 0.0, "end": 0.0}
        assert len(values) == 3

    def test_prior_skips_terminal_and_unknown(self, space: StateSpace) -> None:
        values = ValueTable(space, prior={"a": 2.5, "end": 9.0, "elsewhere": 1.0})
        assert values["a"] == 2.5
        assert values.value("end") == 0.0
        assert values["b"] == 0.0

    def test_freeze(self, space: StateSpace) -> None:
        values = ValueTable(space).freeze()
        with pytest.raises(ValueError):
            values.array[0] = 1.0

    def test_max_abs_diff(self, space: StateSpace) -> None:
        values = ValueTable(space)
        other = ValueTable(space, prior={"a": 4.0, "b": -1.5})
        assert values["a"] == 0.0
        assert values.max_abs_diff(other) == 4.0


class TestPolicyTable:
    def test_action_for(self) -> None:
        policy = PolicyTable({"a": "go", "b": "stop"})
        assert policy.action_for("a") == "go"
        assert policy["b"] == "stop"
        assert len(policy) == 2
        assert "a" in policy
        assert "end" not in policy

    def test_unknown_state_raises(self) -> None:
        policy = PolicyTable({"a": "go"})
        with pytest.raises(NoActionDefinedError) as excinfo:
            policy.action_for("end")
        assert excinfo.value.state == "end"
        assert "end" in str(excinfo.value)
        assert isinstance(excinfo.value, KeyError)
        assert policy.get("end") is None

    def test_immutable(self) -> None:
        source = {"a": "go"}
        policy = PolicyTable(source)
        source["a"] = "changed"
        assert policy["a"] == "go"
        with pytest.raises(TypeError):
            policy["a"] = "other"  # type: ignore[index]

    def test_equality_with_mapping(self) -> None:
        assert PolicyTable({"a": 1}) == {"a": 1}
        assert PolicyTable({"a": 1}) == PolicyTable({"a": 1})
        assert PolicyTable({"a": 1}) != PolicyTable({"a": 2})
