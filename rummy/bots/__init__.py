"""Computer players for Infinite Rummy.

Available bots:
- HeuristicBot: Draws from the deck, lays down by card count, discards high
"""

from rummy.bots.base_bot import BaseBot
from rummy.bots.heuristic_bot import HeuristicBot

__all__ = ["BaseBot", "HeuristicBot"]
