from .base import HouseAgent
from . import register_agent


@register_agent("counter")
class CounterAgent(HouseAgent):
    """
    Announces the default dice when moving first. When answering the player's pick it plays
    the free dice with the highest probability of beating the player's dice, lowest index on ties.
    """

    def choose_dice(self, view):
        config = view["config"]
        available = view["available"]
        player_index = view.get("player_dice_index")
        if player_index is None:
            return self.preferred_or_first(config.house_default_index, available)

        matrix = view["matrix"]
        best = None
        best_p = -1.0
        for i in sorted(available):
            p = matrix[i][player_index]
            if p > best_p:
                best, best_p = i, p
        return best
