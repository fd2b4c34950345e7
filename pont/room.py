"""A game room: its players, their hands, and the turn rules."""

from __future__ import annotations

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, MutableMapping, Optional, Sequence

from pont.game import Game, Piece, Placement
from pont.protocol import (
    ClientChat,
    ClientMessage,
    CreateRoom,
    Disconnected,
    ItsOver,
    JoinRoom,
    JoinedRoom,
    MoveAccepted,
    MoveRejected,
    NewPlayer,
    PiecesRemaining,
    Play,
    Played,
    PlayerDisconnected,
    PlayerReconnected,
    PlayerScore,
    PlayerTurn,
    ServerChat,
    ServerMessage,
    Swap,
    Swapped,
)

log = logging.getLogger(__name__)

HAND_SIZE = 6
GAME_OVER_BONUS = 6

Sink = Callable[[ServerMessage], Any]


@dataclass
class Player:
    name: str
    score: int = 0
    hand: Counter = field(default_factory=Counter)
    ws: Optional[Sink] = None

    def try_remove(self, pieces: Sequence[Piece]) -> bool:
        """Remove the pieces from the hand if all are held; report success."""
        wanted = Counter(pieces)
        if any(self.hand.get(piece, 0) < n for piece, n in wanted.items()):
            return False
        for piece, n in wanted.items():
            self.hand[piece] -= n
        return True

    def hand_is_empty(self) -> bool:
        return all(n == 0 for n in self.hand.values())

    def hand_size(self) -> int:
        return sum(self.hand.values())


@dataclass
class Room:
    name: str = ""
    started: bool = False
    ended: bool = False
    connections: dict = field(default_factory=dict)
    players: list = field(default_factory=list)
    active_player: int = 0
    game: Game = field(default_factory=Game)

    def running(self) -> bool:
        return bool(self.connections)

    def _deliver(self, i: int, msg: ServerMessage) -> None:
        player = self.players[i]
        try:
            player.ws(msg)
        except Exception as exc:  # a dead connection must not stop the room
            log.error("[%s] Failed to send message to %s: %s", self.name, player.name, exc)

    def broadcast(self, msg: ServerMessage) -> None:
        for i in list(self.connections.values()):
            if self.players[i].ws is not None:
                self._deliver(i, msg)

    def broadcast_except(self, i: int, msg: ServerMessage) -> None:
        for j, player in enumerate(self.players):
            if j != i and player.ws is not None:
                self._deliver(j, msg)

    def send(self, i: int, msg: ServerMessage) -> None:
        if self.players[i].ws is None:
            log.error("[%s] Tried sending message to inactive player", self.name)
        else:
            self._deliver(i, msg)

    def add_player(self, addr: Hashable, player_name: str, sink: Sink) -> None:
        """Seat a player, reclaiming a disconnected seat with the same name."""
        hand = self.game.deal(HAND_SIZE)
        pieces = list(hand.elements())

        index = next(
            (
                i
                for i, p in enumerate(self.players)
                if p.name == player_name and p.ws is None
            ),
            None,
        )
        if index is not None:
            self.broadcast(PlayerReconnected(index))
            self.players[index].hand = hand
            self.players[index].ws = sink
        else:
            self.broadcast(NewPlayer(player_name))
            index = len(self.players)
            self.players.append(Player(name=player_name, hand=hand, ws=sink))

        self.connections[addr] = index
        self.started = True

        sink(
            JoinedRoom(
                room_name=self.name,
                players=[(p.name, p.score, p.ws is not None) for p in self.players],
                active_player=self.active_player,
                player_index=index,
                board=list(self.game.board.items()),
                pieces=pieces,
            )
        )
        self.broadcast(PiecesRemaining(len(self.game.bag)))

    def next_player(self) -> None:
        if not self.connections:
            return
        count = len(self.players)
        self.active_player = (self.active_player + 1) % count
        while self.players[self.active_player].ws is None:
            self.active_player = (self.active_player + 1) % count
        log.debug(
            "[%s] Active player changed to %s",
            self.name,
            self.players[self.active_player].name,
        )
        self.broadcast(PlayerTurn(self.active_player))

    def on_client_disconnected(self, addr: Hashable) -> None:
        index = self.connections.pop(addr, None)
        if index is None:
            log.error("[%s] Tried to remove non-existent player at %s", self.name, addr)
            return
        player = self.players[index]
        log.info("[%s] Removed disconnected player '%s'", self.name, player.name)
        player.ws = None
        self.game.bag.extend(player.hand.elements() if isinstance(player.hand, Counter)
                             else Counter(player.hand).elements())
        player.hand = Counter()
        self.game.shuffle()
        self.broadcast(PlayerDisconnected(index))
        self.broadcast(PiecesRemaining(len(self.game.bag)))
        if index == self.active_player:
            self.next_player()

    def on_play(self, pieces: Sequence[Placement]) -> None:
        player = self.players[self.active_player]

        board = dict(self.game.board)
        for piece, x, y in pieces:
            board[(x, y)] = piece
        played = [(x, y) for _, x, y in pieces]
        if Game.invalid(board) or not Game.is_linear_connected(board, played):
            log.warning("[%s] Player %s tried to make an illegal move", self.name, player.name)
            self.send(self.active_player, MoveRejected())
            return

        if not player.try_remove([piece for piece, _, _ in pieces]):
            log.warning("[%s] Player %s tried to play an unowned piece", self.name, player.name)
            self.send(self.active_player, MoveRejected())
            return

        delta = self.game.play(pieces)
        if delta is None:
            log.warning(
                "[%s] Player %s snuck an illegal move past the first filters",
                self.name,
                player.name,
            )
            self.send(self.active_player, MoveRejected())
            return

        dealt = self.game.deal(HAND_SIZE - player.hand_size())
        player.hand.update(dealt)
        deal = list(dealt.elements())

        over = player.hand_is_empty() and not self.game.bag
        if over:
            delta += GAME_OVER_BONUS
        player.score += delta

        self.broadcast(PlayerScore(delta=delta, total=player.score))
        self.broadcast(PiecesRemaining(len(self.game.bag)))
        self.send(self.active_player, MoveAccepted(deal))
        self.broadcast_except(self.active_player, Played(list(pieces)))

        if over:
            # Ties go to the later seat.
            winner = max(range(len(self.players)), key=lambda i: (self.players[i].score, i))
            self.broadcast(ItsOver(winner))
            self.ended = True

    def on_swap(self, pieces: Sequence[Piece]) -> None:
        player = self.players[self.active_player]
        if not player.try_remove(pieces):
            log.warning("[%s] Player %s tried to play an unowned piece", self.name, player.name)
            self.send(self.active_player, MoveRejected())
            return
        deal = self.game.swap(pieces)
        if deal is None:
            log.warning(
                "[%s] Player %s couldn't be dealt %d pieces",
                self.name,
                player.name,
                len(pieces),
            )
            return
        player.hand.update(deal)
        self.send(self.active_player, MoveAccepted(deal))
        self.broadcast(Swapped(len(pieces)))

    def _may_move(self, addr: Hashable) -> bool:
        if self.ended:
            log.warning("[%s] Got play after move ended", self.name)
            return False
        index = self.connections.get(addr)
        if index is None:
            log.warning("[%s] Invalid player %s", self.name, addr)
            return False
        if index != self.active_player:
            log.warning("[%s] Player %s out of turn", self.name, addr)
            return False
        return True

    def on_message(self, addr: Hashable, msg: ClientMessage) -> bool:
        """Apply one client message; return whether the room is still running."""
        log.debug("[%s] Got message %r from %s", self.name, msg, addr)
        match msg:
            case Disconnected():
                self.on_client_disconnected(addr)
            case ClientChat(text=text):
                index = self.connections.get(addr)
                sender = "unknown" if index is None else self.players[index].name
                self.broadcast(ServerChat(sender=sender, message=text))
            case CreateRoom() | JoinRoom():
                log.warning("[%s] Invalid client message %r", self.name, msg)
            case Play(pieces=pieces):
                if self._may_move(addr):
                    self.on_play(pieces)
                    if not self.ended:
                        self.next_player()
            case Swap(pieces=pieces):
                if self._may_move(addr):
                    self.on_swap(pieces)
                    self.next_player()
        return self.running()


def next_room_name(rooms: MutableMapping[str, Any], handle: Any, words: Sequence[str]) -> str:
    """Pick an unused three-word name, register handle under it and return it."""
    while True:
        name = " ".join(random.choice(words) for _ in range(3))
        if name not in rooms:
            rooms[name] = handle
            return name