"""
FastAPI WebSocket server for the 99 game.
"""

import logging
import uuid
from collections import defaultdict
from typing import Dict, Optional, Set

import orjson
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..constants import STATUS_ENDED, STATUS_WAITING
from ..errors import GAME_ALREADY_STARTED, ROOM_FULL, ROOM_NOT_FOUND
from ..serialization import get_public_room_info, serialize_card
from ..store import GameStore, Room
from ..validate import PlayResult
from .events import (
    ChatEvent, CreateRoomEvent, CreateSinglePlayerEvent, ErrorCode, JoinRoomEvent, PlayEvent,
    RequestStateEvent, RestartEvent, StartEvent, create_chat_event, create_error_event,
    create_game_state_event, create_hand_event, create_log_event, create_room_created_event,
    create_room_joined_event, error_code_for, parse_inbound_event,
)

logger = logging.getLogger(__name__)

SYSTEM_SENDER = "System"


def dump_event(event: BaseModel) -> str:
    return orjson.dumps(event.model_dump(mode="json")).decode()


class ConnectionManager:
    """Manages WebSocket connections and room membership."""

    def __init__(self):
        self.connections: Dict[str, WebSocket] = {}
        self.room_members: Dict[str, Set[str]] = defaultdict(set)
        self.player_rooms: Dict[str, str] = {}

    def connect(self, websocket: WebSocket, player_id: str):
        self.connections[player_id] = websocket

    def join(self, room_id: str, player_id: str):
        self.room_members[room_id].add(player_id)
        self.player_rooms[player_id] = room_id
        logger.info(f"Player {player_id} joined room {room_id}")

    def disconnect(self, player_id: str) -> Optional[str]:
        """Forget a connection; returns the room it was in."""
        self.connections.pop(player_id, None)
        room_id = self.player_rooms.pop(player_id, None)
        if room_id:
            members = self.room_members.get(room_id)
            if members is not None:
                members.discard(player_id)
                if not members:
                    del self.room_members[room_id]
        logger.info(f"Player {player_id} disconnected from room {room_id}")
        return room_id

    async def send(self, player_id: str, event: BaseModel):
        websocket = self.connections.get(player_id)
        if websocket is None:
            return
        try:
            await websocket.send_text(dump_event(event))
        except Exception as e:
            logger.error(f"Error sending to player {player_id}: {e}")

    async def broadcast(self, room_id: str, event: BaseModel):
        for player_id in list(self.room_members.get(room_id, ())):
            await self.send(player_id, event)


class GameServer:
    """Routes inbound events for one FastAPI app to the rooms of a store."""

    def __init__(self, store: GameStore):
        self.store = store
        self.manager = ConnectionManager()

    # ------------------------------------------------------------------
    # outbound helpers

    async def send_error(self, player_id: str, code: ErrorCode, message: str):
        await self.manager.send(player_id, create_error_event(code, message))

    async def send_hand(self, room: Room, player_id: str):
        cards = [serialize_card(c).model_dump() for c in room.engine.get_hand(player_id)]
        await self.manager.send(player_id, create_hand_event(cards))

    async def send_state(self, room: Room, player_id: str):
        snapshot = room.engine.get_snapshot(player_id)
        await self.manager.send(player_id, create_game_state_event(snapshot.model_dump(mode="json")))

    async def broadcast_state(self, room: Room, with_hands: bool = False):
        """Send every member its own projection of the room."""
        for player_id in list(self.manager.room_members.get(room.id, ())):
            await self.send_state(room, player_id)
            if with_hands:
                await self.send_hand(room, player_id)

    async def system_message(self, room: Room, message: str):
        await self.manager.broadcast(room.id, create_chat_event(SYSTEM_SENDER, message))

    async def flush_logs(self, room: Room):
        """Forward engine narration as log lines and system chat."""
        for line in room.drain_logs():
            await self.manager.broadcast(room.id, create_log_event(line))
            await self.system_message(room, line)

    def attach_scheduler(self, room: Room):
        async def on_bot_update(seat_id: str, result: PlayResult):
            await self.broadcast_state(room)
            await self.flush_logs(room)

        async def on_bot_state(bot_state: str):
            await self.broadcast_state(room)

        room.scheduler.on_update = on_bot_update
        room.scheduler.on_state = on_bot_state

    def get_player_room(self, player_id: str) -> Optional[Room]:
        room_id = self.manager.player_rooms.get(player_id)
        return self.store.get_room(room_id) if room_id else None

    # ------------------------------------------------------------------
    # connection lifecycle

    async def handle_websocket(self, websocket: WebSocket):
        await websocket.accept()
        player_id = uuid.uuid4().hex
        self.manager.connect(websocket, player_id)
        logger.info(f"WebSocket connection accepted: {player_id}")

        try:
            while True:
                raw_data = await websocket.receive_text()
                try:
                    event = parse_inbound_event(orjson.loads(raw_data))
                    await self.handle_event(player_id, event)
                except (ValueError, orjson.JSONDecodeError) as e:
                    await self.send_error(player_id, ErrorCode.INVALID_EVENT, str(e))
                except Exception as e:
                    logger.error(f"Error handling event from {player_id}: {e}")
                    await self.send_error(player_id, ErrorCode.INTERNAL, "Internal server error")
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected: {player_id}")
        finally:
            await self.handle_disconnect(player_id)

    async def handle_disconnect(self, player_id: str):
        room_id = self.manager.disconnect(player_id)
        room = self.store.get_room(room_id) if room_id else None
        if room is None:
            return

        room.engine.remove_seat(player_id)

        humans = room.human_seat_ids()
        if not humans:
            self.store.evict_room(room.id)
            return
        if room.host_id == player_id:
            room.host_id = humans[0]

        await self.broadcast_state(room)
        await self.flush_logs(room)
        room.scheduler.schedule()

    async def handle_event(self, player_id: str, event):
        if isinstance(event, CreateRoomEvent):
            await self.handle_create_room(player_id, event)
        elif isinstance(event, CreateSinglePlayerEvent):
            await self.handle_create_single_player(player_id, event)
        elif isinstance(event, JoinRoomEvent):
            await self.handle_join_room(player_id, event)
        elif isinstance(event, StartEvent):
            await self.handle_start(player_id, restart=False)
        elif isinstance(event, RestartEvent):
            await self.handle_start(player_id, restart=True)
        elif isinstance(event, PlayEvent):
            await self.handle_play(player_id, event)
        elif isinstance(event, ChatEvent):
            await self.handle_chat(player_id, event)
        elif isinstance(event, RequestStateEvent):
            await self.handle_request_state(player_id)
        else:
            raise ValueError(f"Unhandled event type: {type(event)}")

    # ------------------------------------------------------------------
    # handlers

    async def _enter_new_room(self, player_id: str, player_name: str) -> Optional[Room]:
        if self.get_player_room(player_id):
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Already in a room")
            return None
        room = self.store.create_room(host_id=player_id)
        self.attach_scheduler(room)
        room.engine.add_seat(player_id, player_name)
        self.manager.join(room.id, player_id)
        await self.manager.send(player_id, create_room_created_event(room.id, player_id))
        return room

    async def handle_create_room(self, player_id: str, event: CreateRoomEvent):
        room = await self._enter_new_room(player_id, event.player_name)
        if room:
            await self.broadcast_state(room, with_hands=True)

    async def handle_create_single_player(self, player_id: str, event: CreateSinglePlayerEvent):
        room = await self._enter_new_room(player_id, event.player_name)
        if room is None:
            return
        added = sum(1 for _ in range(event.bot_count) if room.engine.add_bot(event.difficulty))
        logger.info(f"Single player room {room.id}: {added} {event.difficulty} bots")
        await self.broadcast_state(room, with_hands=True)
        await self.system_message(
            room, f"Single Player Game Created with {added} {event.difficulty} bots."
        )

    async def handle_join_room(self, player_id: str, event: JoinRoomEvent):
        if self.get_player_room(player_id):
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Already in a room")
            return
        room = self.store.get_room(event.room_id)
        if room is None:
            await self.send_error(player_id, ErrorCode(ROOM_NOT_FOUND), "Room not found")
            return
        if room.engine.status != STATUS_WAITING:
            await self.send_error(player_id, ErrorCode(GAME_ALREADY_STARTED), "Game already started")
            return
        if not room.engine.add_seat(player_id, event.player_name):
            await self.send_error(player_id, ErrorCode(ROOM_FULL), "Room full")
            return

        self.manager.join(room.id, player_id)
        await self.manager.send(player_id, create_room_joined_event(room.id, player_id))
        await self.broadcast_state(room, with_hands=True)
        await self.system_message(room, f"{event.player_name} joined the room.")

    async def handle_start(self, player_id: str, restart: bool):
        room = self.get_player_room(player_id)
        if room is None:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Not in a room")
            return
        if room.host_id != player_id:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Only the host can start")
            return

        room.scheduler.cancel()
        started = room.engine.restart_game() if restart else room.engine.start_game()
        if not started:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Need at least 2 players")
            return

        await self.broadcast_state(room, with_hands=True)
        await self.flush_logs(room)
        room.scheduler.schedule()

    async def handle_play(self, player_id: str, event: PlayEvent):
        room = self.get_player_room(player_id)
        if room is None:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Not in a room")
            return

        result = room.engine.play_card(player_id, event.card_id, event.options)
        if not result.success:
            await self.send_error(player_id, error_code_for(result.code), result.message)
            return

        await self.broadcast_state(room)
        await self.send_hand(room, player_id)
        await self.flush_logs(room)
        if room.engine.status != STATUS_ENDED:
            room.scheduler.schedule()

    async def handle_chat(self, player_id: str, event: ChatEvent):
        room = self.get_player_room(player_id)
        if room is None:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Not in a room")
            return
        seat = room.engine.state.get_seat(player_id)
        sender = seat.name if seat else player_id
        logger.info(f"Chat from {sender} in {room.id}: {event.message}")
        await self.manager.broadcast(room.id, create_chat_event(sender, event.message))

    async def handle_request_state(self, player_id: str):
        room = self.get_player_room(player_id)
        if room is None:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Not in a room")
            return
        await self.send_state(room, player_id)
        await self.send_hand(room, player_id)


def create_app(store: Optional[GameStore] = None) -> FastAPI:
    """Build the FastAPI app around an explicit room store."""
    store = store or GameStore()
    server = GameServer(store)

    app = FastAPI(title="99 Game Engine", version="1.0.0")
    app.state.store = store
    app.state.server = server

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": "99 Game Engine API", "version": "1.0.0"}

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "rooms": len(store),
            "connections": len(server.manager.connections)
        }

    @app.get("/rooms")
    async def list_rooms():
        return [
            get_public_room_info(room.engine.state, room.engine.rules.max_seats)
            for room in store.rooms()
        ]

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await server.handle_websocket(websocket)

    return app
