from abc import ABC, abstractmethod
from typing import Any, Sequence


class HouseAgent(ABC):
    """
    Abstract base class for the automated opponent's dice selection.
    Agents implement choose_dice(view), which receives the house's view of the round and returns a dice index.
    Randomness of the throws is never decided here; that goes through the commit-reveal generator.
    """

    @abstractmethod
    def choose_dice(self, view: Any) -> int:
        """
        Given the house view, return the index of the dice the house will play.
        Args:
            view (dict): Keys 'dice_set', 'matrix', 'available', 'player_dice_index' (None when the house moves first) and 'config'.
        Returns:
            int: An index from view['available'].
        """
        raise NotImplementedError

    def preferred_or_first(self, preferred: int, available: Sequence[int]) -> int:
        """
        Return preferred if it is still available, otherwise the lowest available index.
        """
        if preferred in available:
            return preferred
        return min(available)
