"""
Day phase handler for voting, lynches and revenge kills.
"""

from typing import Optional, TYPE_CHECKING

from ..core.commands import ACK_EMOJI, CANCEL_EMOJI, emoji_number, number_emoji, parse_day_command
from ..core.player import Player
from ..core.scheduler import Countdown
from ..core.states import State
from ..gateway.base import EVERYONE, MessageCollector, Message, NO_SEND, PARTIAL_SEND, Reaction, ReactionCollector

if TYPE_CHECKING:
    from ..core.game_engine import Game


def format_duration(seconds: float) -> str:
    """'10 minutes', '1 minute', '90 seconds'."""
    seconds = int(seconds)
    if seconds % 60 == 0:
        minutes = seconds // 60
        return f"{minutes} minute{'' if minutes == 1 else 's'}"
    return f"{seconds} seconds"


class DayPhaseHandler:
    """Handles day phase operations: the vote, the lynch and the revenge window."""
    
    def __init__(self, game: 'Game'):
        self.game = game
        self.collector: Optional[MessageCollector] = None
        self.countdown: Optional[Countdown] = None
        self.revenge_collector: Optional[ReactionCollector] = None
        self.revenge_countdown: Optional[Countdown] = None
    
    def begin_day(self) -> None:
        """Reset votes, post the roster and open the vote."""
        game = self.game
        config = game.config
        game.hiding_numbers = False
        game.gateway.set_permissions(config.day_channel, EVERYONE, NO_SEND)
        game.gateway.set_permissions(config.day_channel, config.player_role, PARTIAL_SEND)
        game.gateway.set_permissions(config.mafia_channel, config.player_role, NO_SEND)
        
        for player in game.alive_players():
            player.lynch_vote = None
            player.protected = False
            player.hooked = False
            if player.inventory.has_usable(night=False):
                game.tell(player, player.inventory.describe())
            player.do_state(State.DAY, game)
        
        numbers = "".join(f"\n{p.number}- {p.name}" for p in game.alive_players())
        game.announce(
            f"{game.role_mention} Day {game.day} has begun. You have {format_duration(config.day_duration)} "
            f"to vote on who to lynch with `;lynch @usermention`.{numbers}"
        )
        notice = game.judge.pressure_notice(game.players)
        if notice:
            game.announce(notice)
        
        self.collector = game.gateway.create_message_collector(config.day_channel, self._on_message)
        self.countdown = Countdown(
            game.scheduler, config.day_duration, config.day_reminders,
            on_reminder=game.announce, on_expire=self._on_timeout,
        ).start()
    
    def _on_message(self, message: Message) -> None:
        game = self.game
        player = game.find_player(message.author.id)
        if player is None:
            return
        command = parse_day_command(message.content)
        if command is None:
            return
        
        if command.name == "lynch":
            if command.mention is not None:
                target = game.find_player(command.mention)
                if target is None:
                    game.gateway.reply(message, "That player is not in the game.")
                    return
                player.lynch_vote = target.number
            else:
                player.lynch_vote = 0
            game.gateway.react(message, ACK_EMOJI)
            game.log.debug("Player %d votes %d", player.number, player.lynch_vote)
            if game.event_emitter:
                game.event_emitter.emit_vote(player.number, player.lynch_vote, game.day)
        elif command.name == "removelynch":
            player.lynch_vote = None
            game.gateway.react(message, ACK_EMOJI)
            if game.event_emitter:
                game.event_emitter.emit_vote(player.number, None, game.day)
        elif command.name == "listlynch":
            game.gateway.reply(message, game.judge.list_lynch(game.players))
        
        self.check_votes()
    
    def check_votes(self) -> None:
        """End the day early once every living player has voted."""
        game = self.game
        if game.cur_state != State.DAY:
            return
        if all(p.lynch_vote is not None for p in game.alive_players()):
            game.log.debug("Everyone voted, ending day %d", game.day)
            self.stop()
            game.do_state(State.DAY_END)
    
    def _on_timeout(self) -> None:
        self.countdown = None
        self._close_vote("day over")
        self.game.do_state(State.DAY_END)
    
    def end_day(self) -> None:
        """Count the votes and lynch, then hand over to the next phase."""
        game = self.game
        config = game.config
        game.gateway.set_permissions(config.day_channel, EVERYONE, NO_SEND)
        game.gateway.set_permissions(config.day_channel, config.player_role, NO_SEND)
        game.gateway.set_permissions(config.mafia_channel, config.player_role, NO_SEND)
        for player in game.alive_players():
            player.do_state(State.DAY_END, game)
        self.stop()
        
        lynched = game.judge.calculate_lynch(game.players)
        if lynched is None:
            game.announce("Nobody was lynched.")
            self._advance()
            return
        
        target = game.players[lynched]
        game.announce(f"{target.mention}, the {target.role.name}, was lynched.")
        game.kill(target)
        if game.is_over:
            return
        if target.role.vengeful and game.players:
            self._open_revenge(target)
        else:
            self._advance()
    
    def _advance(self) -> None:
        game = self.game
        game.day += 1
        if game.config.has_option("nightless"):
            game.do_state(State.DAY)
        else:
            game.do_state(State.NIGHT)
    
    # Revenge
    
    def _open_revenge(self, avenger: Player) -> None:
        """Let a lynched vengeful player take someone down with them."""
        game = self.game
        targets = game.alive_players()
        numbers = "".join(f"\n{p.number}- {p.name}" for p in targets)
        prompt = game.announce(
            f"{avenger.mention}, choose someone to kill in revenge. "
            f"You have {format_duration(game.config.revenge_duration)}.{numbers}"
        )
        for player in targets:
            game.gateway.react(prompt, number_emoji(player.number))
        game.gateway.react(prompt, CANCEL_EMOJI)
        
        def on_reaction(reaction: Reaction) -> None:
            if reaction.emoji == CANCEL_EMOJI:
                self._close_revenge("declined")
                game.announce("No one was killed in revenge.")
                self._advance()
                return
            number = emoji_number(reaction.emoji)
            victim = game.players.get(number) if number is not None else None
            if victim is None:
                return
            self._close_revenge("victim chosen")
            game.announce(f"{victim.mention}, the {victim.role.name}, was killed in revenge.")
            game.kill(victim, avenger)
            if not game.is_over:
                self._advance()
        
        self.revenge_collector = game.gateway.create_reaction_collector(
            prompt, on_reaction, lambda r: r.user.id == avenger.member.id
        )
        self.revenge_countdown = Countdown(
            game.scheduler, game.config.revenge_duration, on_expire=self._on_revenge_timeout,
        ).start()
    
    def _on_revenge_timeout(self) -> None:
        self.revenge_countdown = None
        self._close_revenge("timed out")
        self.game.announce("Your kill timed out. No one was killed.")
        self._advance()
    
    def _close_revenge(self, reason: str) -> None:
        if self.revenge_countdown is not None:
            self.revenge_countdown.cancel()
            self.revenge_countdown = None
        if self.revenge_collector is not None:
            self.revenge_collector.stop(reason)
            self.revenge_collector = None
    
    def _close_vote(self, reason: str) -> None:
        if self.collector is not None:
            self.collector.stop(reason)
            self.collector = None
    
    def stop(self) -> None:
        """Cancel every timer and collector of the day."""
        if self.countdown is not None:
            self.countdown.cancel()
            self.countdown = None
        self._close_vote("day end")
        self._close_revenge("day end")
