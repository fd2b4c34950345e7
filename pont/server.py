"""The websocket game server: room tasks, player connections and the command line."""

from __future__ import annotations

import argparse
import asyncio
import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, AsyncIterator, Hashable, MutableMapping, Optional, Sequence

import websockets
from websockets.exceptions import ConnectionClosed

from pont.protocol import (
    CreateRoom,
    DecodeError,
    Disconnected,
    JoinFailed,
    JoinRoom,
    decode_client,
    encode_server,
)
from pont.room import Room, next_room_name

log = logging.getLogger(__name__)

MESSAGE_LIMIT = 1024 * 1024
DEFAULT_ADDR = "0.0.0.0:8080"
DEFAULT_WORDS = "words.txt"
REPORT_INTERVAL = 60.0


def load_words(path) -> list[str]:
    """Read a word list with one word per line, skipping blank lines."""
    text = Path(path).read_text(encoding="utf-8")
    return [word.strip() for word in text.split("\n") if word.strip()]


@dataclass(eq=False)
class RoomHandle:
    """A room together with the queue of client messages addressed to it.

    Each connected player has an outbox here; the room closes it once the
    player's disconnection has been applied.
    """

    room: Room
    queue: asyncio.Queue = field(default_factory=asyncio.Queue)
    outboxes: dict = field(default_factory=dict)

    async def run_room(self) -> None:
        """Apply queued client messages until no player is left."""
        while True:
            addr, msg = await self.queue.get()
            running = self.room.on_message(addr, msg)
            if isinstance(msg, Disconnected):
                outbox = self.outboxes.pop(addr, None)
                if outbox is not None:
                    outbox.put_nowait(None)
            if not running:
                break


async def _binary_messages(websocket, addr: Hashable) -> AsyncIterator[bytes]:
    """Yield binary frames until the peer closes or sends anything else."""
    try:
        async for data in websocket:
            if not isinstance(data, (bytes, bytearray)):
                return
            yield bytes(data)
    except ConnectionClosed as exc:
        log.info("[%s] Connection closed: %s", addr, exc)


async def _send_outgoing(
    addr: Hashable, player_name: str, outbox: asyncio.Queue, websocket
) -> None:
    while True:
        msg = await outbox.get()
        if msg is None:
            return
        try:
            await websocket.send(encode_server(msg))
        except ConnectionClosed as exc:
            log.error("[%s] Got error %s from player %s's rx queue", addr, exc, player_name)
            return


async def _read_incoming(addr: Hashable, handle: RoomHandle, websocket) -> None:
    async with aclosing(_binary_messages(websocket, addr)) as messages:
        async for data in messages:
            try:
                msg = decode_client(data, MESSAGE_LIMIT)
            except DecodeError:
                break
            handle.queue.put_nowait((addr, msg))
    handle.queue.put_nowait((addr, Disconnected()))


async def run_player(player_name: str, addr: Hashable, handle: RoomHandle, websocket) -> None:
    """Seat a player in the room and relay messages until they leave."""
    outbox: asyncio.Queue = asyncio.Queue()
    handle.outboxes[addr] = outbox
    try:
        handle.room.add_player(addr, player_name, outbox.put_nowait)
    except Exception as exc:
        handle.outboxes.pop(addr, None)
        log.error("[%s] Failed to add player: %r", handle.room.name, exc)
        return

    await asyncio.gather(
        _send_outgoing(addr, player_name, outbox, websocket),
        _read_incoming(addr, handle, websocket),
    )
    log.info("[%s] Finished session with %s", addr, player_name)


async def _host_room(
    rooms: MutableMapping[str, RoomHandle],
    websocket,
    addr: Hashable,
    player_name: str,
    words: Sequence[str],
) -> None:
    handle = RoomHandle(Room())
    room_name = next_room_name(rooms, handle, words)
    log.info("[%s] Creating room '%s' for player %s", addr, room_name, player_name)
    handle.room.name = room_name
    try:
        await asyncio.gather(
            handle.run_room(),
            run_player(player_name, addr, handle, websocket),
        )
    finally:
        log.info("[%s] All players left, closing room.", room_name)
        if rooms.get(room_name) is handle:
            del rooms[room_name]


async def handle_connection(
    rooms: MutableMapping[str, RoomHandle], websocket, words: Sequence[str]
) -> None:
    """Serve one client: create or join a room, then play in it.

    Raises DecodeError if the client's first messages cannot be decoded.
    """
    addr = websocket.remote_address
    log.info("[%s] WebSocket connection established", addr)
    async with aclosing(_binary_messages(websocket, addr)) as messages:
        async for data in messages:
            msg = decode_client(data)
            match msg:
                case CreateRoom(name=player_name):
                    await _host_room(rooms, websocket, addr, player_name, words)
                    return
                case JoinRoom(name=player_name, room=room_name):
                    log.info("[%s] Player %s sent JoinRoom(%s)", addr, player_name, room_name)
                    handle: Optional[RoomHandle] = rooms.get(room_name)
                    if handle is None:
                        reason = f"Could not find room '{room_name}'"
                    elif handle.room.game.bag:
                        await run_player(player_name, addr, handle, websocket)
                        return
                    else:
                        reason = "Not enough pieces left"
                    await websocket.send(encode_server(JoinFailed(reason)))
                case _:
                    log.warning("[%s] Got unexpected message %r", addr, msg)
                    break
    log.info("[%s] Dropping connection", addr)


async def _report_rooms(rooms: MutableMapping[str, Any]) -> None:
    previous = 0
    while True:
        await asyncio.sleep(REPORT_INTERVAL)
        count = len(rooms)
        if count != previous:
            log.info("%d rooms open", count)
            previous = count


async def serve(host: str, port: int, words: Sequence[str]) -> None:
    """Accept websocket clients on host:port forever."""
    rooms: dict[str, RoomHandle] = {}

    async def handler(websocket, *_):
        addr = websocket.remote_address
        log.info("[%s] Incoming TCP connection", addr)
        try:
            await handle_connection(rooms, websocket, words)
        except Exception as exc:
            log.warning("Failed to handle connection from %s: %s", addr, exc)

    log.info("Listening on: %s:%d", host, port)
    async with websockets.serve(handler, host, port):
        await _report_rooms(rooms)


def _parse_addr(text: str) -> tuple[str, int]:
    host, sep, port = text.rpartition(":")
    if not sep or not port.isdigit() or not 0 <= int(port) <= 65535:
        raise ValueError(f"invalid address {text!r}, expected HOST:PORT")
    return host.strip("[]"), int(port)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="pont-server", description="Run the game server.")
    parser.add_argument("addr", nargs="?", default=DEFAULT_ADDR, help="address to listen on")
    parser.add_argument("--words", type=Path, default=Path(DEFAULT_WORDS),
                        help="word list used to name rooms")
    args = parser.parse_args(argv)

    try:
        host, port = _parse_addr(args.addr)
    except ValueError as exc:
        parser.error(str(exc))
    try:
        words = load_words(args.words)
    except OSError as exc:
        parser.error(f"could not read word list: {exc}")
    if not words:
        parser.error("word list is empty")

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    try:
        asyncio.run(serve(host, port, words))
    except KeyboardInterrupt:
        pass
    return 0