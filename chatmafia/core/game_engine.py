"""
Core game engine managing game state and phase transitions.
"""

import logging
import random
from typing import Dict, List, Optional, TYPE_CHECKING

from ..config.game_config import GameConfig, default_config
from ..exceptions import GameStateError, SetupError
from ..gateway.base import (
    ChatGateway, EVERYONE, FULL_SEND, Member, Message, NO_SEND, Permissions, VIEW,
)
from ..phases.day_phase import DayPhaseHandler
from ..phases.night_phase import NightPhaseHandler
from .commands import parse_use_command
from .judge import Judge, Outcome
from .player import Player
from .roles import Role, get_role, roles_for_setup
from .scheduler import Scheduler
from .states import Side, State

if TYPE_CHECKING:
    from ..web.event_emitter import EventEmitter


class Game:
    """
    One game of Mafia played over a chat gateway.
    
    The game is driven entirely by inbound chat events and scheduler
    callbacks. Every call runs to completion before the next event is
    handled, so state is never mutated concurrently.
    """
    
    def __init__(self, gateway: ChatGateway, scheduler: Scheduler,
                 config: GameConfig = default_config,
                 event_emitter: Optional['EventEmitter'] = None):
        self.gateway = gateway
        self.scheduler = scheduler
        self.config = config
        self.event_emitter = event_emitter
        self.judge = Judge(config)
        self.rng = random.Random(config.random_seed)
        self.log = logging.getLogger(f"{__name__}[{config.day_channel}]")
        self.day_phase = DayPhaseHandler(self)
        self.night_phase = NightPhaseHandler(self)
        self._reset()
    
    def _reset(self) -> None:
        # only living players; keys are removed on death
        self.players: Dict[int, Player] = {}
        self.all_players: List[Player] = []
        self.cur_state: Optional[State] = None
        self.running = False
        self.outcome: Optional[Outcome] = None
        self.day = 1
        self.hiding_numbers = self.config.hide_numbers_first_night
        # 0 = no kill, -1 = kill replaced (janitor), else the target's number
        self.killing = 0
        self.kill_pending = False
        # the hooker has acted or there is no hooker
        self.night_report_passed = True
        # same for mafia reports; nothing blocks them yet
        self.mafia_night_report_passed = True
    
    # Lifecycle
    
    def start(self, members: List[Member], roles: Optional[List[Role]] = None, shuffle: bool = True) -> None:
        """
        Assign roles to members and begin the game.
        
        Args:
            members: one chat member per player, numbered in this order
            roles: roles to deal; defaults to the configured roles or setup
            shuffle: deal the roles in random order
        
        Raises:
            GameStateError: a game is already running
            SetupError: no players, or the player count does not match the roles
        """
        if self.running:
            raise GameStateError("A game is already running", {"state": self.cur_state.value})
        if not members:
            raise SetupError("No players")
        roles = list(roles) if roles is not None else self._configured_roles()
        if len(members) != len(roles):
            raise SetupError(
                f"This setup needs {len(roles)} players, got {len(members)}",
                {"roles": [r.name for r in roles]}
            )
        if shuffle:
            self.rng.shuffle(roles)
        
        self._reset()
        for number, (member, role) in enumerate(zip(members, roles), start=1):
            player = Player(number=number, name=member.name, role=role, member=member)
            self.players[number] = player
            self.all_players.append(player)
            self.gateway.add_role(member, self.config.player_role)
        self.running = True
        self.log.info("Game started with %d players: %s", len(self.all_players),
                      ", ".join(f"{p.number}={p.role.name}" for p in self.all_players))
        
        if self.event_emitter:
            self.event_emitter.emit_game_start([
                {"number": p.number, "name": p.name, "role": p.role.name, "side": p.side.value}
                for p in self.all_players
            ])
        self.do_state(State.GAME)
    
    def _configured_roles(self) -> List[Role]:
        if self.config.roles:
            return [get_role(name) for name in self.config.roles]
        if self.config.setup:
            return roles_for_setup(self.config.setup)
        raise SetupError("No roles configured: set `roles` or `setup`")
    
    def force_stop(self) -> None:
        """
        Abort the game without a winner.
        
        Stops every collector and timer, restores chat permissions and
        leaves the game ready for a new start().
        """
        if not self.running:
            return
        self.log.warning("Game force-stopped in state %s", self.cur_state.value if self.cur_state else None)
        self.day_phase.stop()
        self.night_phase.stop()
        for player in self.all_players:
            player.action.close("cleanup")
            if player.item_collector is not None:
                player.item_collector.stop("cleanup")
            self.gateway.clear_permissions(self.config.mafia_channel, player.member)
            self.gateway.remove_role(player.member, self.config.player_role)
        self._restore_permissions()
        self._reset()
    
    @property
    def is_over(self) -> bool:
        return self.cur_state == State.GAME_END
    
    # State machine
    
    def do_state(self, state: State) -> None:
        """Enter a game state. GAME_END is terminal."""
        if not self.running:
            self.log.debug("Ignoring %s: no game running", state.value)
            return
        if self.is_over:
            self.log.debug("Ignoring %s: game is over", state.value)
            return
        handlers = {
            State.GAME: self._begin_game,
            State.GAME_END: self._end_game,
            State.DAY: self.day_phase.begin_day,
            State.DAY_END: self.day_phase.end_day,
            State.NIGHT: self.night_phase.begin_night,
            State.NIGHT_END: self.night_phase.end_night,
        }
        handler = handlers.get(state)
        if handler is None:
            # PRE_NIGHT, NIGHT_REPORT and DEAD are player sweeps, not game states
            self.log.warning("%s is not a game state", state.value)
            return
        self.cur_state = state
        self.log.debug("Game enters %s (day %d)", state.value, self.day)
        if self.event_emitter:
            self.event_emitter.emit_phase_change(state.value, self.day)
        handler()
    
    def _begin_game(self) -> None:
        channel, secret = self.config.day_channel, self.config.mafia_channel
        self.gateway.set_permissions(channel, EVERYONE, NO_SEND)
        self.gateway.set_permissions(channel, self.config.player_role, NO_SEND)
        self.gateway.set_permissions(secret, EVERYONE, Permissions(view=False))
        self.gateway.set_permissions(secret, self.config.player_role, NO_SEND)
        for player in self.alive_players():
            if player.is_mafia:
                self.gateway.set_permissions(secret, player.member, VIEW)
            else:
                self.gateway.clear_permissions(secret, player.member)
            player.item_collector = self.gateway.create_message_collector(
                self.gateway.dm_channel(player.member),
                lambda message, p=player: self._on_item_message(p, message),
            )
            player.do_state(State.GAME, self)
        self.day = 1
        self.hiding_numbers = self.config.hide_numbers_first_night
        if self.config.has_option("daystart") or self.config.has_option("nightless"):
            self.do_state(State.DAY)
        else:
            self.do_state(State.NIGHT)
    
    def _end_game(self) -> None:
        self.day_phase.stop()
        self.night_phase.stop()
        self._restore_permissions()
        for player in self.alive_players():
            self.gateway.clear_permissions(self.config.mafia_channel, player.member)
            self.gateway.remove_role(player.member, self.config.player_role)
        for player in self.all_players:
            player.action.close("game end")
            if player.item_collector is not None:
                player.item_collector.stop("game end")
            player.do_state(State.GAME_END, self)
        self.running = False
    
    def _restore_permissions(self) -> None:
        self.gateway.set_permissions(self.config.day_channel, EVERYONE, FULL_SEND)
        self.gateway.set_permissions(self.config.day_channel, self.config.player_role, FULL_SEND)
        self.gateway.set_permissions(self.config.mafia_channel, self.config.player_role, NO_SEND)
    
    def update_night(self) -> None:
        """Close the night if nothing is holding it open."""
        self.night_phase.update()
    
    # Deaths and wins
    
    def kill(self, player: Player, killer: Optional[Player] = None) -> None:
        """
        Remove a player from the game and run their death effects.
        
        Killing a dead player, or killing after the game is over, does nothing.
        """
        if player.dead or self.is_over or not self.running:
            return
        player.dead = True
        player.killed_by = killer
        self.players.pop(player.number, None)
        player.action_pending = False
        player.action_report_pending = False
        player.action.close("dead")
        if player.item_collector is not None:
            player.item_collector.stop("dead")
        self.gateway.remove_role(player.member, self.config.player_role)
        self.gateway.clear_permissions(self.config.mafia_channel, player.member)
        for other in self.alive_players():
            if other.lynch_vote == player.number:
                other.lynch_vote = None
        self.log.info("Player %d (%s, %s) died%s", player.number, player.name, player.role.name,
                      f", killed by player {killer.number}" if killer else "")
        
        if self.event_emitter:
            self.event_emitter.emit_death(
                player.number, player.name, player.role.name,
                killer.number if killer else None, self.day
            )
        
        player.do_state(State.DEAD, self)
        self.update_win_condition()
    
    def update_win_condition(self) -> None:
        """End the game if a side has won."""
        if self.is_over or not self.running:
            return
        outcome = self.judge.evaluate_win(self.players)
        if outcome is not None:
            self.post_win(outcome)
    
    def post_win(self, outcome: Outcome) -> None:
        """Announce the result and end the game."""
        self.outcome = outcome
        self.log.info("Game over: %s", outcome.value)
        if outcome == Outcome.TIE:
            text = f"{self.role_mention} It was a tie!"
        else:
            side = Side[outcome.name]
            winners = "".join(f" {p.mention}" for p in self.all_players if p.side == side)
            text = f"{self.role_mention} The {side.name} won!{winners}"
        for player in self.all_players:
            text += f"\n{player.number}- {player.name} ({player.role.name})"
            if player.dead:
                text += " (dead)"
        self.do_state(State.GAME_END)
        self.announce(text)
        
        if self.event_emitter:
            self.event_emitter.emit_game_over(outcome.value, self.day)
    
    # Items
    
    def _on_item_message(self, player: Player, message: Message) -> None:
        command = parse_use_command(message.content)
        if command is None or player.dead:
            return
        item = player.inventory.find(command.item)
        if item is None:
            self.tell(player, "You don't have this item.")
            return
        usable_in = State.NIGHT if item.night_use else State.DAY
        if self.cur_state != usable_in:
            state_name = self.cur_state.value if self.cur_state else "lobby"
            self.tell(player, f"You cannot use this item in the {state_name}.")
            return
        if item.no_target:
            target = player
        elif command.target is None:
            self.gateway.reply(message, "This item requires a target.")
            return
        else:
            target = self.players.get(command.target)
            if target is None:
                self.gateway.reply(message, "Invalid target.")
                return
            if target is player:
                self.gateway.reply(message, "You can't use this item on yourself.")
                return
        
        self.log.info("Player %d uses %s on player %d", player.number, item.name, target.number)
        # taken away first so the win check after a shot sees the empty hand
        if not item.stays_after_use:
            player.remove(item, self)
        item.use(target, player, self)
        if self.cur_state == State.DAY:
            self.day_phase.check_votes()
    
    # Chat helpers
    
    @property
    def role_mention(self) -> str:
        return f"<@&{self.config.player_role}>"
    
    def announce(self, text: str) -> Message:
        """Post in the public day channel."""
        if self.event_emitter:
            self.event_emitter.emit_announcement(text, self.cur_state.value if self.cur_state else None, self.day)
        return self.gateway.send(self.config.day_channel, text)
    
    def tell(self, player: Player, text: str) -> Message:
        """DM one player."""
        return self.gateway.send_dm(player.member, text)
    
    def tell_mafia(self, text: str) -> Message:
        """Post in the mafia secret channel."""
        return self.gateway.send(self.config.mafia_channel, text)
    
    def display_name(self, player: Player) -> str:
        """Name shown in target lists; hidden until the first day."""
        return "<hidden>" if self.hiding_numbers else player.name
    
    def alive_players(self) -> List[Player]:
        """Snapshot of the living players, by number."""
        return [self.players[n] for n in sorted(self.players)]
    
    def find_player(self, member_id: str) -> Optional[Player]:
        """Living player for a chat member id."""
        for player in self.players.values():
            if player.member.id == member_id:
                return player
        return None
