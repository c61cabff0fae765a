"""
Batch receptor evaluation.

Each receptor is evaluated independently; a failure on one receptor is
recorded on its ReceptorOutcome and the batch carries on.  Only the
engine's own error taxonomy is caught, anything else is a bug and
propagates.
"""

import logging
from typing import Callable, Iterable, List

from models.errors import DispersionError
from models.results import ConcentrationResult, ReceptorOutcome
from models.source import ReceptorPoint

logger = logging.getLogger(__name__)


def evaluate_receptors(
    evaluate: Callable[[ReceptorPoint], ConcentrationResult],
    receptors: Iterable[ReceptorPoint],
) -> List[ReceptorOutcome]:
    """
    Run ``evaluate`` for every receptor and collect per-item outcomes.

    Args:
        evaluate: Callable returning a ConcentrationResult for one receptor.
        receptors: Receptors to evaluate, in order.

    Returns:
        One ReceptorOutcome per receptor, in input order.
    """
    outcomes = []
    for receptor in receptors:
        try:
            result = evaluate(receptor)
        except DispersionError as exc:
            logger.warning("Receptor %s failed: %s", receptor.name or receptor, exc)
            outcomes.append(ReceptorOutcome(
                receptor=receptor,
                error_kind=type(exc).__name__,
                error=str(exc),
            ))
            continue
        outcomes.append(ReceptorOutcome(receptor=receptor, result=result))

    failed = sum(1 for o in outcomes if not o.ok)
    if failed:
        logger.info("Evaluated %d receptors, %d failed", len(outcomes), failed)
    return outcomes
