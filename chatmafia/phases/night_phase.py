"""
Night phase handler for the mafia kill and the role actions.
"""

from typing import Optional, TYPE_CHECKING

from ..core.commands import parse_kill_command
from ..core.player import Player
from ..core.scheduler import Countdown
from ..core.states import DEATH_MESSAGES, State
from ..gateway.base import EVERYONE, Message, MessageCollector, NO_SEND, PARTIAL_SEND
from .day_phase import format_duration

if TYPE_CHECKING:
    from ..core.game_engine import Game


class NightPhaseHandler:
    """
    Handles night phase operations: the mafia kill, role prompts and reports.
    
    The night closes as soon as nothing is holding it open (see update) or
    when the night time limit runs out.
    """
    
    def __init__(self, game: 'Game'):
        self.game = game
        self.kill_collector: Optional[MessageCollector] = None
        self.countdown: Optional[Countdown] = None
        self.killer: Optional[Player] = None
        self._updating = False
    
    def begin_night(self) -> None:
        game = self.game
        config = game.config
        game.gateway.set_permissions(config.day_channel, EVERYONE, NO_SEND)
        game.gateway.set_permissions(config.day_channel, config.player_role, NO_SEND)
        game.gateway.set_permissions(config.mafia_channel, config.player_role, PARTIAL_SEND)
        self.stop()
        
        game.kill_pending = True
        game.killing = 0
        game.night_report_passed = True
        game.mafia_night_report_passed = True
        self.killer = None
        
        numbers = "".join(
            f"\n{p.number}- {game.display_name(p)}" for p in game.alive_players() if not p.is_mafia
        )
        game.tell_mafia(
            f"{game.role_mention} Night {game.day} has begun. Use `;kill <number>` to kill someone, "
            f"or just `;kill` to not kill tonight. The mafia can only do this once tonight, "
            f"and you can't change your choice. Targets:{numbers}"
        )
        self.kill_collector = game.gateway.create_message_collector(config.mafia_channel, self._on_kill_message)
        
        for player in game.alive_players():
            player.reset_night()
            if player.inventory.has_usable(night=True):
                game.tell(player, player.inventory.describe())
            player.do_state(State.PRE_NIGHT, game)
        
        game.announce(
            f"{game.role_mention} Night {game.day} has begun. You have {format_duration(config.night_duration)} to act. "
            f"If you are a power role, check your DMs. If you are mafia, check the mafia secret chat."
        )
        for player in game.alive_players():
            player.do_state(State.NIGHT, game)
        
        self.countdown = Countdown(game.scheduler, config.night_duration, on_expire=self._on_timeout).start()
        self.update()
    
    def _on_kill_message(self, message: Message) -> None:
        game = self.game
        if not game.kill_pending or game.cur_state != State.NIGHT:
            return
        command = parse_kill_command(message.content)
        if command is None:
            return
        killer = game.find_player(message.author.id)
        if killer is None or not killer.is_mafia:
            return
        
        if command.target is None:
            game.kill_pending = False
            game.killing = 0
            game.gateway.reply(message, "You chose to kill nobody.")
            self.close_kill_collector("null kill chosen")
            self.update()
            return
        
        target = game.players.get(command.target)
        if target is None:
            game.gateway.reply(message, f"{command.target} is not a valid player.")
            return
        if target.is_mafia:
            game.gateway.reply(message, f"{command.target}- {target.name} is mafia-aligned.")
            return
        
        game.kill_pending = False
        game.killing = target.number
        self.killer = killer
        game.log.info("Mafia (player %d) chose to kill player %d", killer.number, target.number)
        game.gateway.reply(message, f"You chose to kill number {target.number}, {target.name}.")
        self.close_kill_collector("kill chosen")
        self.update()
    
    def update(self) -> None:
        """
        Resolve the reports that can be resolved and end the night if possible.
        
        The night waits for the mafia kill and for every blocking action.
        Reports wait for the hooker, except the report of the player who is
        about to be killed.
        """
        # a report may trigger another update; the outer call finishes the job
        if self._updating:
            return
        self._updating = True
        try:
            ready = self._resolve_reports()
        finally:
            self._updating = False
        if ready and self.game.cur_state == State.NIGHT:
            self.game.do_state(State.NIGHT_END)
    
    def _resolve_reports(self) -> bool:
        game = self.game
        if game.cur_state != State.NIGHT:
            game.log.debug("Night can't end: it is %s", game.cur_state.value if game.cur_state else None)
            return False
        if game.kill_pending:
            game.log.debug("Night can't end: kill pending")
            return False
        for player in game.alive_players():
            if player.action_pending:
                game.log.debug("Night can't end: action pending from %s", player.name)
                return False
        
        mafia_first = sorted(game.alive_players(), key=lambda p: not p.is_mafia)
        for player in mafia_first:
            if player.dead or not player.action_report_pending:
                continue
            passed = game.mafia_night_report_passed if player.is_mafia else game.night_report_passed
            if passed:
                player.do_state(State.NIGHT_REPORT, game)
            elif game.killing != player.number:
                game.log.debug("Night can't end: hooker not done and report pending to %s", player.name)
                return False
        return True
    
    def _on_timeout(self) -> None:
        game = self.game
        self.countdown = None
        game.log.info("Night %d time limit reached", game.day)
        # actions already chosen still get their report
        for player in game.alive_players():
            if not player.dead and not player.action_pending and player.action_report_pending:
                player.do_state(State.NIGHT_REPORT, game)
        if game.cur_state == State.NIGHT:
            game.do_state(State.NIGHT_END)
    
    def end_night(self) -> None:
        """Apply the mafia kill and move on."""
        game = self.game
        config = game.config
        game.gateway.set_permissions(config.day_channel, config.player_role, NO_SEND)
        game.gateway.set_permissions(config.mafia_channel, config.player_role, NO_SEND)
        self.stop()
        
        victim = None
        if game.kill_pending:
            game.kill_pending = False
            game.tell_mafia("The night ended. You killed no one.")
        elif game.killing > 0:
            target = game.players.get(game.killing)
            if target is not None and (not target.protected or target.role.macho):
                victim = target
            elif target is not None:
                game.log.info("Player %d was protected", target.number)
        
        for player in game.alive_players():
            player.do_state(State.NIGHT_END, game)
        
        if victim is not None:
            message = game.rng.choice(DEATH_MESSAGES)
            game.announce(message.replace("%pr", f"{victim.mention} ({victim.role.name})"))
            game.kill(victim, self.killer)
            if game.is_over:
                return
        
        game.killing = 0
        game.hiding_numbers = False
        if game.config.has_option("dayless"):
            game.day += 1
            game.do_state(State.NIGHT)
        else:
            game.do_state(State.DAY)
    
    def close_kill_collector(self, reason: str) -> None:
        if self.kill_collector is not None:
            self.kill_collector.stop(reason)
            self.kill_collector = None
    
    def stop(self) -> None:
        """Cancel the night timer and the kill collector."""
        if self.countdown is not None:
            self.countdown.cancel()
            self.countdown = None
        self.close_kill_collector("night end")
