"""Current signal for the latest bar of a snapshot: a proposal or HOLD with a reason."""

from __future__ import annotations
import logging
from typing import Sequence, Union

from signal_bot.core.errors import InsufficientDataError
from signal_bot.core.types import EnrichedBar, HoldSignal, SignalProposal
from signal_bot.strategies.base import BaseStrategy

logger = logging.getLogger("signal_bot.live")

NO_SETUP = "No clear signal - waiting for better setup"


def latest_window(bars: Sequence[EnrichedBar], size: int) -> Sequence[EnrichedBar]:
    """Last `size` bars, current bar included. Raises InsufficientDataError if shorter."""
    if len(bars) < size:
        raise InsufficientDataError(size, len(bars))
    return bars[-size:]


def generate_current_signal(
    bars: Sequence[EnrichedBar],
    strategy: BaseStrategy,
    window_size: int = 50,
) -> Union[SignalProposal, HoldSignal]:
    """
    Score the newest bar against the last `window_size` bars of `bars`.
    `bars` is a snapshot owned by the caller; nothing is cached between calls.
    """
    try:
        window = latest_window(bars, window_size)
    except InsufficientDataError as e:
        logger.debug("Holding: %s", e)
        return HoldSignal(f"Not enough data: {e}")
    proposal = strategy.get_signal(window[-1], window)
    if proposal is None:
        return HoldSignal(NO_SETUP)
    return proposal
