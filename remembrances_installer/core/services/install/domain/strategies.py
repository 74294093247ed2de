"""
L1 Domain: Ordered probe strategies.

A fact (e.g. "CUDA major version") is resolved by an ordered list of
independent strategies. Each returns a definite value, or ``None`` when
it has no signal. ``first_definite`` is the combinator: the first
definite answer wins and later strategies are not run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import NamedTuple

logger = logging.getLogger(__name__)


class Strategy(NamedTuple):
    """A named probe. ``run`` returns a value or None (indeterminate)."""

    name: str
    run: Callable[[], object]


class Resolution(NamedTuple):
    value: object
    strategy: str | None   # None when every strategy was indeterminate


def first_definite(strategies: Iterable[Strategy]) -> Resolution:
    """Run strategies in order and stop at the first definite value."""
    for strategy in strategies:
        value = strategy.run()
        if value is not None:
            logger.debug("Strategy %s answered %r", strategy.name, value)
            return Resolution(value, strategy.name)
        logger.debug("Strategy %s: no signal", strategy.name)
    return Resolution(None, None)
