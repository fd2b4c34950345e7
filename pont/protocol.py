"""Messages between client and server and their binary wire format.

Integers are little-endian and fixed width, enum variants are a u32 index,
strings and lists carry a u64 length prefix.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, fields
from typing import Optional, Union

from pont.game import Color, Piece, Placement, Pos, Shape


class DecodeError(ValueError):
    """Raised when bytes do not hold a valid message."""


# Client to server


@dataclass(frozen=True)
class CreateRoom:
    name: str


@dataclass(frozen=True)
class JoinRoom:
    name: str
    room: str


@dataclass(frozen=True)
class ClientChat:
    text: str


@dataclass(frozen=True)
class Play:
    pieces: list[Placement]


@dataclass(frozen=True)
class Swap:
    pieces: list[Piece]


@dataclass(frozen=True)
class Disconnected:
    pass


# Server to client


@dataclass(frozen=True)
class JoinedRoom:
    room_name: str
    players: list[tuple[str, int, bool]]
    active_player: int
    player_index: int
    board: list[tuple[Pos, Piece]]
    pieces: list[Piece]


@dataclass(frozen=True)
class JoinFailed:
    reason: str


@dataclass(frozen=True)
class ServerChat:
    sender: str
    message: str


@dataclass(frozen=True)
class Information:
    message: str


@dataclass(frozen=True)
class NewPlayer:
    name: str


@dataclass(frozen=True)
class PlayerReconnected:
    index: int


@dataclass(frozen=True)
class PlayerDisconnected:
    index: int


@dataclass(frozen=True)
class PlayerTurn:
    index: int


@dataclass(frozen=True)
class Played:
    pieces: list[Placement]


@dataclass(frozen=True)
class Swapped:
    count: int


@dataclass(frozen=True)
class MoveAccepted:
    pieces: list[Piece]


@dataclass(frozen=True)
class MoveRejected:
    pass


@dataclass(frozen=True)
class PlayerScore:
    delta: int
    total: int


@dataclass(frozen=True)
class PiecesRemaining:
    count: int


@dataclass(frozen=True)
class ItsOver:
    winner: int


ClientMessage = Union[CreateRoom, JoinRoom, ClientChat, Play, Swap, Disconnected]
ServerMessage = Union[
    JoinedRoom, JoinFailed, ServerChat, Information, NewPlayer,
    PlayerReconnected, PlayerDisconnected, PlayerTurn, Played, Swapped,
    MoveAccepted, MoveRejected, PlayerScore, PiecesRemaining, ItsOver,
]

_STR = "str"
_BOOL = "bool"
_PIECE = "piece"
_SCALARS = {
    "u32": struct.Struct("<I"),
    "usize": struct.Struct("<Q"),
    "i32": struct.Struct("<i"),
}
_LEN = _SCALARS["usize"]
_U32 = _SCALARS["u32"]

_PLACEMENTS = ("list", ("tuple", _PIECE, "i32", "i32"))
_PIECES = ("list", _PIECE)

_CLIENT_VARIANTS = (
    (CreateRoom, (_STR,)),
    (JoinRoom, (_STR, _STR)),
    (ClientChat, (_STR,)),
    (Play, (_PLAYCEMENTS := _PLACEMENTS,)),
    (Swap, (_PIECES,)),
    (Disconnected, ()),
)

_SERVER_VARIANTS = (
    (
        JoinedRoom,
        (
            _STR,
            ("list", ("tuple", _STR, "u32", _BOOL)),
            "usize",
            "usize",
            ("list", ("tuple", ("tuple", "i32", "i32"), _PIECE)),
            _PIECES,
        ),
    ),
    (JoinFailed, (_STR,)),
    (ServerChat, (_STR, _STR)),
    (Information, (_STR,)),
    (NewPlayer, (_STR,)),
    (PlayerReconnected, ("usize",)),
    (PlayerDisconnected, ("usize",)),
    (PlayerTurn, ("usize",)),
    (Played, (_PLACEMENTS,)),
    (Swapped, ("usize",)),
    (MoveAccepted, (_PIECES,)),
    (MoveRejected, ()),
    (PlayerScore, ("u32", "u32")),
    (PiecesRemaining, ("usize",)),
    (ItsOver, ("usize",)),
)


def _write(kind, value, out: bytearray) -> None:
    if isinstance(kind, str):
        if kind == _STR:
            raw = value.encode("utf-8")
            out += _LEN.pack(len(raw))
            out += raw
        elif kind == _BOOL:
            out.append(1 if value else 0)
        elif kind == _PIECE:
            shape, color = value
            out += _U32.pack(shape.value)
            out += _U32.pack(color.value)
        else:
            try:
                out += _SCALARS[kind].pack(value)
            except struct.error as exc:
                raise ValueError(f"{value!r} does not fit in {kind}") from exc
    elif kind[0] == "list":
        out += _LEN.pack(len(value))
        for item in value:
            _write(kind[1], item, out)
    else:
        parts = kind[1:]
        if len(parts) != len(value):
            raise ValueError(f"expected {len(parts)} items, got {value!r}")
        for sub, item in zip(parts, value):
            _write(sub, item, out)


class _Reader:
    def __init__(self, data: bytes, limit: Optional[int]):
        self.data = bytes(data)
        self.pos = 0
        self.limit = limit

    def take(self, n: int) -> bytes:
        end = self.pos + n
        if self.limit is not None and end > self.limit:
            raise DecodeError("message exceeds the size limit")
        if end > len(self.data):
            raise DecodeError("unexpected end of message")
        chunk = self.data[self.pos:end]
        self.pos = end
        return chunk

    def read(self, kind):
        if isinstance(kind, str):
            if kind == _STR:
                (length,) = _LEN.unpack(self.take(_LEN.size))
                try:
                    return self.take(length).decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise DecodeError("string is not valid UTF-8") from exc
            if kind == _BOOL:
                byte = self.take(1)[0]
                if byte > 1:
                    raise DecodeError(f"invalid bool byte {byte}")
                return bool(byte)
            if kind == _PIECE:
                shape = self.read("u32")
                color = self.read("u32")
                try:
                    return (Shape(shape), Color(color))
                except ValueError as exc:
                    raise DecodeError(f"invalid piece ({shape}, {color})") from exc
            scalar = _SCALARS[kind]
            return scalar.unpack(self.take(scalar.size))[0]
        if kind[0] == "list":
            (length,) = _LEN.unpack(self.take(_LEN.size))
            items = []
            for _ in range(length):
                items.append(self.read(kind[1]))
            return items
        return tuple(self.read(sub) for sub in kind[1:])


def _encode(table, msg) -> bytes:
    for index, (cls, kinds) in enumerate(table):
        if type(msg) is cls:
            out = bytearray(_U32.pack(index))
            for kind, f in zip(kinds, fields(msg)):
                _write(kind, getattr(msg, f.name), out)
            return bytes(out)
    raise TypeError(f"cannot encode {type(msg).__name__} here")


def _decode(table, data: bytes, limit: Optional[int]):
    reader = _Reader(data, limit)
    (index,) = _U32.unpack(reader.take(_U32.size))
    if index >= len(table):
        raise DecodeError(f"unknown message variant {index}")
    cls, kinds = table[index]
    return cls(*(reader.read(kind) for kind in kinds))


def encode_client(msg: ClientMessage) -> bytes:
    return _encode(_CLIENT_VARIANTS, msg)


def decode_client(data: bytes, limit: Optional[int] = None) -> ClientMessage:
    """Decode a client message; trailing bytes are ignored."""
    return _decode(_CLIENT_VARIANTS, data, limit)


def encode_server(msg: ServerMessage) -> bytes:
    return _encode(_SERVER_VARIANTS, msg)


def decode_server(data: bytes) -> ServerMessage:
    """Decode a server message; trailing bytes are ignored."""
    return _decode(_SERVER_VARIANTS, data, None)