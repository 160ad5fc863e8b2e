"""
Judge: lynch tallies and win conditions.
"""

from collections import Counter
from enum import Enum
from typing import Dict, Optional, TYPE_CHECKING

from ..config.game_config import GameConfig, default_config
from .states import Side

if TYPE_CHECKING:
    from .player import Player


class Outcome(Enum):
    """How a game ended."""
    VILLAGE = "village"
    MAFIA = "mafia"
    TIE = "tie"


class Judge:
    """Counts votes and sides. Holds no game state of its own."""
    
    def __init__(self, config: GameConfig = default_config):
        self.config = config
        self.overturn_sides = {Side[name] for name in config.overturn_sides}
    
    @staticmethod
    def count_sides(players: Dict[int, "Player"]) -> Counter:
        """Alive players per side."""
        return Counter(p.side for p in players.values())
    
    def side_can_overturn(self, side: Side, players: Dict[int, "Player"]) -> bool:
        """True if an alive member of side can win while outnumbered and the config allows it."""
        if side not in self.overturn_sides:
            return False
        return any(p.side == side and p.can_overturn() for p in players.values())
    
    def evaluate_win(self, players: Dict[int, "Player"]) -> Optional[Outcome]:
        """
        Decide whether the game is over.
        
        The mafia wins once the village is no longer ahead, or once the
        village is gone entirely if a villager can still overturn. The
        village wins once the mafia is gone. Nobody left on either side is
        a tie.
        """
        sides = self.count_sides(players)
        village, mafia = sides[Side.VILLAGE], sides[Side.MAFIA]
        if village == 0 and mafia == 0:
            return Outcome.TIE
        if self.side_can_overturn(Side.VILLAGE, players):
            mafia_won = village == 0
        else:
            mafia_won = village <= mafia
        if mafia_won:
            return Outcome.MAFIA
        if mafia == 0:
            return Outcome.VILLAGE
        return None
    
    @staticmethod
    def calculate_lynch(players: Dict[int, "Player"]) -> Optional[int]:
        """
        Player number to lynch, or None for no lynch.
        
        A vote for nobody (0) counts like any other. The single target with
        the most votes is lynched; a tie for the most votes, or nobody
        winning, means no lynch.
        """
        votes = Counter(p.lynch_vote for p in players.values() if p.lynch_vote is not None)
        if not votes:
            return None
        ranked = votes.most_common()
        top, top_count = ranked[0]
        if len(ranked) > 1 and ranked[1][1] == top_count:
            return None
        if top == 0:
            return None
        return top
    
    def list_lynch(self, players: Dict[int, "Player"]) -> str:
        """Readable tally for `;listlynch`."""
        lines = []
        for player in players.values():
            if player.lynch_vote is None:
                lines.append(f"\n{player.name} has not voted")
            elif player.lynch_vote == 0:
                lines.append(f"\n{player.name} votes to lynch nobody")
            else:
                lines.append(f"\n{player.name} votes to lynch {players[player.lynch_vote].name}")
        lynch = self.calculate_lynch(players)
        if lynch is None:
            lines.append("\n**The consensus is to lynch nobody.**")
        else:
            lines.append(f"\n**The consensus is to lynch {players[lynch].name}.**")
        return "".join(lines)
    
    def pressure_notice(self, players: Dict[int, "Player"]) -> Optional[str]:
        """MYLO/LYLO warning for the start of a day, if one applies."""
        if self.side_can_overturn(Side.VILLAGE, players):
            return None
        sides = self.count_sides(players)
        village, mafia = sides[Side.VILLAGE], sides[Side.MAFIA]
        if village == mafia + 2:
            return ("**It is MYLO, so the village must either lynch correctly or not lynch, "
                    "otherwise there will be a high chance of losing.**")
        if village == mafia + 1:
            return "**It is LYLO, so the village must lynch correctly, otherwise there will be a high chance of losing.**"
        return None
