"""The client's game session: joining a room, the score table, chat and turns."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from pont.board import BoardModel
from pont.game import Piece, Placement
from pont.protocol import (
    ClientChat,
    CreateRoom,
    Information,
    ItsOver,
    JoinFailed,
    JoinRoom,
    JoinedRoom,
    MoveAccepted,
    MoveRejected,
    NewPlayer,
    PiecesRemaining,
    Played,
    PlayerDisconnected,
    PlayerReconnected,
    PlayerScore,
    PlayerTurn,
    ServerChat,
    ServerMessage,
    Swapped,
)


def join_message(name: str, room: str) -> CreateRoom | JoinRoom:
    """The message that creates a room (empty room name) or joins one."""
    if not room:
        return CreateRoom(name)
    return JoinRoom(name, room)


@dataclass
class PlayerRow:
    """One line of the score table."""

    name: str
    score: int = 0
    connected: bool = True
    is_you: bool = False

    @property
    def label(self) -> str:
        return f"{self.name} (you)" if self.is_you else self.name


@dataclass
class Session:
    """A client's view of a room, updated from server messages.

    Chat lines are kept as (sender, text); information lines have no sender.
    """

    board: BoardModel = field(default_factory=BoardModel)
    joined: bool = False
    room_name: str = ""
    join_error: Optional[str] = None
    player_index: int = 0
    active_player: Optional[int] = None
    players: list[PlayerRow] = field(default_factory=list)
    messages: list[tuple[Optional[str], str]] = field(default_factory=list)
    count_html: str = ""
    exchange_html: str = ""
    exchange_disabled: bool = True
    finished: bool = False

    def _require(self, joined: bool) -> None:
        if self.joined != joined:
            raise RuntimeError("Invalid state transition")

    def on_message(self, msg: ServerMessage) -> None:
        """Apply one message from the server."""
        match msg:
            case JoinFailed(reason=reason):
                self.on_join_failed(reason)
            case JoinedRoom():
                self.on_joined_room(msg)
            case ServerChat(sender=sender, message=text):
                self.on_chat(sender, text)
            case Information(message=text):
                self.on_information(text)
            case NewPlayer(name=name):
                self.on_new_player(name)
            case PlayerDisconnected(index=index):
                self.on_player_disconnected(index)
            case PlayerReconnected(index=index):
                self.on_player_reconnected(index)
            case PlayerTurn(index=index):
                self.on_player_turn(index)
            case PiecesRemaining(count=count):
                self.on_pieces_remaining(count)
            case Played(pieces=pieces):
                self._on_played(pieces)
            case Swapped(count=count):
                self.on_swapped(count)
            case MoveAccepted(pieces=pieces):
                self._on_move_accepted(pieces)
            case MoveRejected():
                self._require(True)
            case PlayerScore(delta=delta, total=total):
                self.on_player_score(delta, total)
            case ItsOver(winner=winner):
                self.on_finished(winner)
            case _:
                raise TypeError(f"unexpected message {msg!r}")

    def on_joined_room(self, msg: JoinedRoom) -> None:
        self._require(False)
        self.joined = True
        self.join_error = None
        self.room_name = msg.room_name
        self.player_index = msg.player_index
        for (x, y), piece in msg.board:
            self.board.grid[(x, y)] = piece
        self.board.hand = list(msg.pieces)
        for i, (name, score, connected) in enumerate(msg.players):
            self._add_row(name, score, connected, i == msg.player_index)
        self.on_information(f"Welcome, {msg.players[msg.player_index][0]}!")
        self.on_player_turn(msg.active_player)

    def on_join_failed(self, reason: str) -> None:
        self._require(False)
        self.join_error = reason

    def on_chat(self, sender: str, text: str) -> None:
        self._require(True)
        self.messages.append((sender, text))

    def on_information(self, text: str) -> None:
        self._require(True)
        self.messages.append((None, text))

    def _add_row(self, name: str, score: int, connected: bool, is_you: bool) -> None:
        self.players.append(PlayerRow(name, score, connected, is_you))

    def on_new_player(self, name: str) -> None:
        self._require(True)
        self._add_row(name, 0, True, False)
        self.on_information(f"{name} joined the room")

    def on_player_disconnected(self, index: int) -> None:
        self._require(True)
        row = self.players[index]
        row.connected = False
        self.on_information(f"{row.name} disconnected")

    def on_player_reconnected(self, index: int) -> None:
        self._require(True)
        row = self.players[index]
        row.connected = True
        self.on_information(f"{row.name} reconnected")

    def _active_name(self) -> str:
        if self.active_player == self.player_index:
            return "You"
        return self.players[self.active_player].name

    def _set_my_turn(self, my_turn: bool) -> None:
        self.board.my_turn = my_turn
        self._refresh_exchange(my_turn)

    def _refresh_exchange(self, my_turn: bool) -> None:
        self.exchange_html, self.exchange_disabled = self.board.exchange_text(my_turn)

    def on_player_turn(self, active_player: int) -> None:
        self._require(True)
        if not 0 <= active_player < len(self.players):
            raise IndexError(f"no player {active_player}")
        self.active_player = active_player
        if active_player == self.player_index:
            self.on_information("It's your turn!")
        else:
            self.on_information(f"It's {self.players[active_player].name}'s turn!")
        self._set_my_turn(active_player == self.player_index)

    def _on_played(self, pieces: Sequence[Placement]) -> None:
        self._require(True)
        for piece, x, y in pieces:
            self.board.grid[(x, y)] = piece

    def _on_move_accepted(self, dealt: Sequence[Piece]) -> None:
        self._require(True)
        self.board.on_move_accepted(list(dealt))

    def on_swapped(self, count: int) -> None:
        self._require(True)
        plural = "s" if count > 1 else ""
        self.on_information(f"{self._active_name()} swapped {count} piece{plural}")

    def on_player_score(self, delta: int, total: int) -> None:
        self._require(True)
        self.players[self.active_player].score = total
        plural = "" if delta == 1 else "s"
        self.on_information(f"{self._active_name()} scored {delta} point{plural}")

    def on_finished(self, winner: int) -> None:
        self._require(True)
        self._set_my_turn(False)
        self.active_player = None
        self.finished = True
        if winner == self.player_index:
            self.on_information("You win!")
        else:
            self.on_information(f"{self.players[winner].name} wins!")

    def on_pieces_remaining(self, remaining: int) -> None:
        self._require(True)
        self.board.pieces_remaining = remaining
        self.count_html = self.board.count_text()
        self._refresh_exchange(self.board.my_turn)

    def chat_message(self, text: str) -> Optional[ClientChat]:
        """The chat message to send for the typed text, or None if it is empty."""
        if not text:
            return None
        return ClientChat(text)