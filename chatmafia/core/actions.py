"""
Action templates shared by the roles.

A template builds the per-state callback table of a role. It owns how a
target is picked (DM reactions or a command in the mafia channel), the
hook check and use counting; the role only supplies what the action does.
"""

import logging
from typing import Callable, Dict, Optional, Union, TYPE_CHECKING

from ..gateway.base import Message, Reaction
from .commands import CANCEL_EMOJI, emoji_number, number_emoji, parse_action_command
from .states import State

if TYPE_CHECKING:
    from .game_engine import Game
    from .player import Player

logger = logging.getLogger(__name__)

PlayerAction = Callable[["Player", "Game"], None]
TargetedReport = Callable[["Player", "Player", "Game"], None]  # (target, player, game)
Actions = Dict[State, PlayerAction]


def _uses_left_text(player: "Player", max_uses: Optional[int]) -> str:
    if max_uses is None:
        return ""
    left = max_uses - player.memory.uses
    return f" You have {left} use{'' if left == 1 else 's'} of this action left."


def targeted_action(verb: str,
                    on_resolve: TargetedReport,
                    on_hooked: Union[TargetedReport, bool, None] = None,
                    on_cancel: Optional[PlayerAction] = None,
                    via_secret_channel: bool = False,
                    deferred: bool = False,
                    max_uses: Optional[int] = None) -> Actions:
    """
    Build the callbacks of a night action aimed at another player.
    
    Args:
        verb: what the player does to the target ("investigate", "protect")
        on_resolve: effect of the action, called as on_resolve(target, player, game)
        on_hooked: called instead of on_resolve when the player is hooked;
            True sends "You were hooked.", None does nothing
        on_cancel: called when the player declines to act
        via_secret_channel: pick the target with `;<verb> <n>` in the mafia
            channel instead of reacting to a DM; the action resolves as soon
            as it is chosen
        deferred: the night does not wait for this action
        max_uses: number of times the action can be used in the whole game
    """
    
    def exhausted(player: "Player") -> bool:
        return max_uses is not None and player.memory.uses >= max_uses
    
    def notify(player: "Player", game: "Game", text: str) -> None:
        if via_secret_channel:
            game.tell_mafia(f"{player.mention} {text}")
        else:
            game.tell(player, text)
    
    def resolve(player: "Player", game: "Game", target: "Player") -> None:
        logger.debug("Resolving %s by player %d on player %d", verb, player.number, target.number)
        if player.hooked:
            if on_hooked is True:
                notify(player, game, "You were hooked.")
            elif callable(on_hooked):
                on_hooked(target, player, game)
        else:
            on_resolve(target, player, game)
        player.memory.uses += 1
        if exhausted(player):
            notify(player, game, "This was your last use of this action.")
    
    def cancel(player: "Player", game: "Game") -> None:
        player.action.close("action cancelled")
        player.action.target = None
        player.action_pending = False
        player.action_report_pending = False
        if on_cancel:
            on_cancel(player, game)
        game.update_night()
    
    def request_by_reactions(player: "Player", game: "Game") -> None:
        targets = [p for p in game.alive_players() if p is not player]
        numbers = "".join(f"\n{p.number}- {game.display_name(p)}" for p in targets)
        if deferred:
            intro = f"Optionally, before anything else, select a player to {verb} tonight. Targets:"
        else:
            intro = f"Select a player to {verb} tonight, or {CANCEL_EMOJI} to do nothing. Targets:"
        prompt = game.tell(player, intro + numbers + _uses_left_text(player, max_uses))
        for p in targets:
            game.gateway.react(prompt, number_emoji(p.number))
        game.gateway.react(prompt, CANCEL_EMOJI)
        
        def on_reaction(reaction: Reaction) -> None:
            if reaction.emoji == CANCEL_EMOJI:
                game.tell(player, "Action cancelled.")
                cancel(player, game)
                return
            number = emoji_number(reaction.emoji)
            if number is None:
                return
            if number == player.number:
                game.tell(player, f"You can't {verb} yourself.")
                return
            target = game.players.get(number)
            if target is None:
                game.tell(player, "Invalid target.")
                return
            player.action.close("target chosen")
            player.action.target = target
            player.action_pending = False
            player.action_report_pending = True
            game.gateway.edit(prompt, f"{prompt.content}\nYou chose to {verb} {target.name}.")
            game.update_night()
        
        player.action.prompt = prompt
        player.action.collector = game.gateway.create_reaction_collector(
            prompt, on_reaction, lambda r: r.user.id == player.member.id
        )
    
    def request_in_secret_channel(player: "Player", game: "Game") -> None:
        if deferred:
            intro = f"Optionally, before anything else, select a player to {verb} tonight with `;{verb} <number>`."
        else:
            intro = (f"Select a player to {verb} tonight with `;{verb} <number>`, "
                     f"or `;{verb}` to do nothing.")
        player.action.prompt = game.tell_mafia(f"{player.mention} {intro}{_uses_left_text(player, max_uses)}")
        
        def on_message(message: Message) -> None:
            command = parse_action_command(message.content, verb)
            if command is None:
                return
            if command.target is None:
                game.gateway.reply(message, "Action cancelled.")
                cancel(player, game)
                return
            if command.target == player.number:
                game.gateway.reply(message, f"You can't {verb} yourself.")
                return
            target = game.players.get(command.target)
            if target is None:
                game.gateway.reply(message, "Invalid target.")
                return
            player.action.close("target chosen")
            player.action.target = target
            player.action_pending = False
            player.action_report_pending = False
            game.gateway.reply(message, f"You chose to {verb} {target.name}.")
            resolve(player, game, target)
            game.update_night()
        
        player.action.collector = game.gateway.create_message_collector(
            game.config.mafia_channel, on_message, lambda m: m.author.id == player.member.id
        )
    
    def night(player: "Player", game: "Game") -> None:
        if exhausted(player):
            return
        player.action_pending = not deferred
        player.action_report_pending = deferred
        if via_secret_channel:
            request_in_secret_channel(player, game)
        else:
            request_by_reactions(player, game)
    
    def night_report(player: "Player", game: "Game") -> None:
        if player.action_pending or not player.action_report_pending:
            return
        player.action_report_pending = False
        target = player.action.target
        if target is None:
            if on_cancel:
                on_cancel(player, game)
            return
        resolve(player, game, target)
    
    def night_end(player: "Player", game: "Game") -> None:
        if player.action_pending:
            player.action_pending = False
            if not deferred:
                notify(player, game, "The night is over. Action cancelled.")
        player.action.close("night end")
    
    return {
        State.NIGHT: night,
        State.NIGHT_REPORT: night_report,
        State.NIGHT_END: night_end,
    }


def automatic_report_action(on_resolve: PlayerAction,
                            on_hooked: Union[PlayerAction, bool, None] = None) -> Actions:
    """
    Build the callbacks of a night action that needs no input, only a report.
    
    on_hooked works as in targeted_action.
    """
    
    def night(player: "Player", game: "Game") -> None:
        player.action_report_pending = True
    
    def night_report(player: "Player", game: "Game") -> None:
        if not player.action_report_pending:
            return
        player.action_report_pending = False
        if player.hooked:
            if on_hooked is True:
                game.tell(player, "You were hooked.")
            elif callable(on_hooked):
                on_hooked(player, game)
        else:
            on_resolve(player, game)
    
    return {
        State.NIGHT: night,
        State.NIGHT_REPORT: night_report,
    }
