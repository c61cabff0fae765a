"""Tests for batch receptor evaluation."""

import pytest

from analysis.receptors import evaluate_receptors
from models.errors import DegenerateConditionError, InvalidInputError
from models.results import ConcentrationResult
from models.source import ReceptorPoint


def _result(receptor):
    return ConcentrationResult(
        concentration=1.0, receptor=receptor, downwind=receptor.downwind,
        crosswind=receptor.crosswind, stability_class="D", effective_height=0.0,
    )


class TestEvaluateReceptors:
    def test_all_succeed(self):
        receptors = [ReceptorPoint(downwind=d) for d in (100.0, 200.0)]
        outcomes = evaluate_receptors(_result, receptors)
        assert [o.ok for o in outcomes] == [True, True]
        assert [o.receptor for o in outcomes] == receptors

    def test_failure_isolated_to_item(self):
        def evaluate(receptor):
            if receptor.name == "bad":
                raise InvalidInputError("bad receptor")
            return _result(receptor)

        receptors = [
            ReceptorPoint(downwind=100.0, name="a"),
            ReceptorPoint(downwind=100.0, name="bad"),
            ReceptorPoint(downwind=100.0, name="c"),
        ]
        outcomes = evaluate_receptors(evaluate, receptors)
        assert [o.ok for o in outcomes] == [True, False, True]
        assert outcomes[1].error_kind == "InvalidInputError"
        assert outcomes[1].error == "bad receptor"
        assert outcomes[1].result is None

    def test_degenerate_reported(self):
        def evaluate(receptor):
            raise DegenerateConditionError(0.1, 0.5)

        (outcome,) = evaluate_receptors(evaluate, [ReceptorPoint(downwind=10.0)])
        assert outcome.error_kind == "DegenerateConditionError"
        assert "Calm conditions" in outcome.error

    def test_unexpected_errors_propagate(self):
        def evaluate(receptor):
            raise RuntimeError("bug")

        with pytest.raises(RuntimeError):
            evaluate_receptors(evaluate, [ReceptorPoint(downwind=10.0)])

    def test_empty(self):
        assert evaluate_receptors(_result, []) == []
