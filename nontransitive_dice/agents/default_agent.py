from .base import HouseAgent
from . import register_agent


@register_agent("default")
class DefaultAgent(HouseAgent):
    """
    Always plays the configured default dice (index 1) if it is free, otherwise the lowest free index.
    """

    def choose_dice(self, view):
        config = view["config"]
        return self.preferred_or_first(config.house_default_index, view["available"])
