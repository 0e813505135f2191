"""Cross-server consistency verdicts."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ipacheck.domain.models import ERROR, ComparableUnit, Verdict


def evaluate(
    values: Mapping[Any, ComparableUnit],
    *,
    reference_value: ComparableUnit | None = None,
) -> Verdict:
    """Return ``OK`` when every server reports the same value.

    Any ``ERROR`` forces ``FAIL``, including a result where every server
    errored. When *reference_value* is given the first server (mapping order)
    must also report exactly that value.
    """

    if not values:
        return Verdict.FAIL
    units = list(values.values())
    if any(unit is ERROR for unit in units):
        return Verdict.FAIL
    reference = units[0]
    if any(unit != reference for unit in units[1:]):
        return Verdict.FAIL
    if reference_value is not None and reference != reference_value:
        return Verdict.FAIL
    return Verdict.OK


__all__ = ["evaluate"]
