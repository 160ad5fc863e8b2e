"""
Web chat server: a Socket.IO chat that the game plays in.
"""

import logging
import os
import secrets
from typing import Any, Dict, Optional

from flask import Flask, render_template, request
from flask_socketio import SocketIO, emit, join_room

from ..config.game_config import GameConfig, default_config
from ..core.game_engine import Game
from ..core.scheduler import ThreadingScheduler
from ..exceptions import MafiaError
from ..gateway.base import Member, Message, PermissionTarget, Permissions
from ..gateway.memory import InMemoryGateway
from .event_emitter import EventEmitter

logger = logging.getLogger(__name__)


class ChatServer(InMemoryGateway):
    """
    Chat gateway served to browser clients over Socket.IO.

    Every channel is a Socket.IO room. Clients join the day channel and
    their own DM channel; the mafia channel room follows the channel's
    view permission. Inbound events and timer callbacks all run under the
    gateway lock.
    """

    def __init__(self, config: GameConfig = default_config, port: int = 5000, host: str = '127.0.0.1',
                 event_emitter: Optional[EventEmitter] = None, secret_key: Optional[str] = None):
        super().__init__()
        self.config = config
        self.port = port
        self.host = host

        base_dir = os.path.dirname(os.path.abspath(__file__))
        self.app = Flask(__name__, template_folder=os.path.join(base_dir, 'templates'))
        self.app.config['SECRET_KEY'] = secret_key or secrets.token_hex(16)
        self.socketio = SocketIO(self.app, cors_allowed_origins="*", async_mode='threading')

        self.event_emitter = event_emitter or EventEmitter()
        self.event_emitter.register_listener(self._broadcast_event)
        self.scheduler = ThreadingScheduler(self.lock)
        self.game = Game(self, self.scheduler, config, self.event_emitter)

        self.members: Dict[str, Member] = {}
        self.sessions: Dict[str, str] = {}  # socket sid -> member id
        self.clients_connected = 0

        self._setup_routes()
        self._setup_socketio()

    # Transport: record, then push to the channel's room

    def send(self, channel: str, content: str) -> Message:
        message = super().send(channel, content)
        self.socketio.emit('chat_message', self._serialize(message), to=channel)
        return message

    def edit(self, message: Message, content: str) -> None:
        super().edit(message, content)
        self.socketio.emit('message_edit', self._serialize(message), to=message.channel)

    def react(self, message: Message, emoji: str) -> None:
        super().react(message, emoji)
        self.socketio.emit('reaction', {"message_id": message.id, "emoji": emoji}, to=message.channel)

    def set_permissions(self, channel: str, target: PermissionTarget, permissions: Permissions) -> None:
        super().set_permissions(channel, target, permissions)
        if channel == self.config.mafia_channel:
            self._sync_secret_rooms()

    def clear_permissions(self, channel: str, target: PermissionTarget) -> None:
        super().clear_permissions(channel, target)
        if channel == self.config.mafia_channel:
            self._sync_secret_rooms()

    def post(self, channel: str, author: Member, content: str) -> Message:
        message = Message(self.next_message_id(), channel, author, content)
        self.sent.append(message)
        self.socketio.emit('chat_message', self._serialize(message), to=channel)
        self.dispatch_message(message)
        return message

    def _serialize(self, message: Message) -> Dict[str, Any]:
        return {
            "id": message.id,
            "channel": message.channel,
            "author": message.author.name if message.author else None,
            "author_id": message.author.id if message.author else None,
            "content": message.content,
            "reactions": list(message.reactions),
        }

    def _sync_secret_rooms(self) -> None:
        """Put exactly the members who can view the mafia channel in its room."""
        room = self.config.mafia_channel
        for sid, member_id in list(self.sessions.items()):
            member = self.members[member_id]
            if self.can_view(room, member):
                self.socketio.server.enter_room(sid, room, namespace='/')
            else:
                self.socketio.server.leave_room(sid, room, namespace='/')

    def _broadcast_event(self, event_type: str, data: Dict[str, Any]) -> None:
        """Broadcast a game event to all connected clients."""
        if self.clients_connected > 0:
            self.socketio.emit(event_type, data)

    # Flask and Socket.IO handlers

    def _setup_routes(self):
        """Setup Flask routes."""
        @self.app.route('/')
        def index():
            return render_template('chat.html', day_channel=self.config.day_channel,
                                   mafia_channel=self.config.mafia_channel)

    def _member(self) -> Optional[Member]:
        member_id = self.sessions.get(request.sid)
        return self.members.get(member_id) if member_id else None

    def _setup_socketio(self):
        """Setup SocketIO event handlers."""
        @self.socketio.on('connect')
        def handle_connect(auth=None):
            with self.lock:
                self.clients_connected += 1
            logger.info("Client connected. Total clients: %d", self.clients_connected)

        @self.socketio.on('disconnect')
        def handle_disconnect(reason=None):
            with self.lock:
                self.clients_connected -= 1
                self.sessions.pop(request.sid, None)
            logger.info("Client disconnected. Total clients: %d", self.clients_connected)

        @self.socketio.on('join')
        def handle_join(data):
            data = data or {}
            member_id = str(data.get('id') or request.sid)
            member = Member(member_id, str(data.get('name') or member_id))
            with self.lock:
                current = self.sessions.get(request.sid)
                if current is not None and current != member_id:
                    emit('chat_error', {"message": f"You already joined as {self.members[current].name}."})
                    return
                # an id belongs to one connected client until it disconnects
                if any(mid == member_id and sid != request.sid for sid, mid in self.sessions.items()):
                    logger.warning("Refused join as %s: id already in use", member_id)
                    emit('chat_error', {"message": f"{member_id} is already taken."})
                    return
                self.members[member_id] = member
                self.sessions[request.sid] = member_id
                join_room(self.config.day_channel)
                join_room(self.dm_channel(member))
                self._sync_secret_rooms()
            logger.info("%s joined as %s", member.name, member.id)
            emit('joined', {"id": member.id, "name": member.name, "dm_channel": self.dm_channel(member)})

        @self.socketio.on('chat_message')
        def handle_message(data):
            member = self._member()
            if member is None:
                emit('chat_error', {"message": "Join first."})
                return
            channel = data.get('channel') or self.config.day_channel
            if channel == 'dm':
                channel = self.dm_channel(member)
            with self.lock:
                if not self.can_send(channel, member):
                    emit('chat_error', {"message": f"You cannot send messages in {channel} right now."})
                    return
                self.post(channel, member, str(data.get('content', '')))

        @self.socketio.on('reaction')
        def handle_reaction(data):
            member = self._member()
            if member is None:
                return
            with self.lock:
                message = next((m for m in self.sent if m.id == data.get('message_id')), None)
                if message is None or not self.can_view(message.channel, member):
                    return
                self.add_reaction(message, str(data.get('emoji', '')), member)

        @self.socketio.on('start')
        def handle_start(data=None):
            with self.lock:
                try:
                    self.game.start(list(self.members.values()))
                except MafiaError as e:
                    logger.warning("Could not start game: %s", e)
                    emit('chat_error', {"message": str(e)})

        @self.socketio.on('cleanup')
        def handle_cleanup(data=None):
            with self.lock:
                self.game.force_stop()
            self.socketio.emit('cleanup', {})

    def start(self) -> None:
        """Start the web server."""
        logger.info("Starting chat server on http://%s:%d", self.host, self.port)
        self.socketio.run(self.app, host=self.host, port=self.port, debug=False, allow_unsafe_werkzeug=True)
