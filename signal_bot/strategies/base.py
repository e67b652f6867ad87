"""Abstract strategy: score the current bar against a trailing window."""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from signal_bot.core.types import EnrichedBar, SignalProposal


class BaseStrategy(ABC):
    """Strategy returns a SignalProposal for the current bar or None. Must not keep per-call state."""

    min_window: int = 20

    @abstractmethod
    def get_signal(self, current: EnrichedBar, window: Sequence[EnrichedBar]) -> Optional[SignalProposal]:
        """
        Return a proposal for `current` or None ("no signal").
        `window` is ordered oldest first; fewer than `min_window` bars means no signal.
        """
        pass
