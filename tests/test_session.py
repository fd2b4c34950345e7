import pytest

from pont.game import Color, Shape
from pont.protocol import (
    ClientChat,
    CreateRoom,
    Information,
    ItsOver,
    JoinFailed,
    JoinRoom,
    JoinedRoom,
    MoveAccepted,
    NewPlayer,
    PiecesRemaining,
    Played,
    PlayerDisconnected,
    PlayerReconnected,
    PlayerScore,
    PlayerTurn,
    ServerChat,
    Swapped,
)
from pont.session import PlayerRow, Session, join_message

A = (Shape.CIRCLE, Color.RED)
B = (Shape.SQUARE, Color.RED)
C = (Shape.STAR, Color.BLUE)
D = (Shape.CROSS, Color.GREEN)


def joined(active=0, player_index=0):
    s = Session()
    s.on_message(
        JoinedRoom(
            room_name="alpha beta gamma",
            players=[("Ann", 3, True), ("Bob", 5, False)],
            active_player=active,
            player_index=player_index,
            board=[((0, 0), D)],
            pieces=[A, B, C],
        )
    )
    return s


def texts(s):
    return [text for sender, text in s.messages if sender is None]


def test_join_message():
    assert join_message("Ann", "") == CreateRoom("Ann")
    assert join_message("Ann", "a b c") == JoinRoom("Ann", "a b c")


def test_joined_room_sets_up_state():
    s = joined()
    assert s.joined
    assert s.room_name == "alpha beta gamma"
    assert s.board.grid == {(0, 0): D}
    assert s.board.hand == [A, B, C]
    assert [r.label for r in s.players] == ["Ann (you)", "Bob"]
    assert [r.connected for r in s.players] == [True, False]
    assert texts(s) == ["Welcome, Ann!", "It's your turn!"]
    assert s.board.my_turn is True


def test_other_players_turn():
    s = joined(active=1)
    assert texts(s)[-1] == "It's Bob's turn!"
    assert s.board.my_turn is False


def test_join_failed_before_joining():
    s = Session()
    s.on_message(JoinFailed("Not enough pieces left"))
    assert s.join_error == "Not enough pieces left"
    assert not s.joined


def test_invalid_state_transitions():
    with pytest.raises(RuntimeError):
        Session().on_message(Information("hi"))
    with pytest.raises(RuntimeError):
        joined().on_message(JoinFailed("x"))


def test_chat_and_information():
    s = joined()
    s.on_message(ServerChat(sender="Bob", message="hello"))
    s.on_message(Information("note"))
    assert s.messages[-2:] == [("Bob", "hello"), (None, "note")]


def test_new_player_and_connection_changes():
    s = joined()
    s.on_message(NewPlayer("Cy"))
    assert s.players[-1] == PlayerRow("Cy", 0, True, False)
    assert texts(s)[-1] == "Cy joined the room"
    s.on_message(PlayerDisconnected(2))
    assert s.players[2].connected is False
    assert texts(s)[-1] == "Cy disconnected"
    s.on_message(PlayerReconnected(2))
    assert s.players[2].connected is True
    assert texts(s)[-1] == "Cy reconnected"


def test_swapped_messages():
    s = joined()
    s.on_message(Swapped(1))
    assert texts(s)[-1] == "You swapped 1 piece"
    s.on_message(PlayerTurn(1))
    s.on_message(Swapped(3))
    assert texts(s)[-1] == "Bob swapped 3 pieces"


def test_player_score_updates_active_row():
    s = joined(active=1)
    s.on_message(PlayerScore(delta=1, total=6))
    assert s.players[1].score == 6
    assert texts(s)[-1] == "Bob scored 1 point"
    s.on_message(PlayerTurn(0))
    s.on_message(PlayerScore(delta=4, total=7))
    assert s.players[0].score == 7
    assert texts(s)[-1] == "You scored 4 points"


def test_finished():
    s = joined()
    s.on_message(ItsOver(1))
    assert texts(s)[-1] == "Bob wins!"
    assert s.finished and s.active_player is None
    assert s.board.my_turn is False
    s2 = joined()
    s2.on_message(ItsOver(0))
    assert texts(s2)[-1] == "You win!"


def test_pieces_remaining_updates_divs():
    s = joined()
    s.on_message(PiecesRemaining(1))
    assert s.board.pieces_remaining == 1
    assert s.count_html == s.board.count_text()
    assert "1 piece left" in s.count_html
    s.on_message(PiecesRemaining(0))
    assert s.exchange_disabled is True
    assert s.exchange_html == "<p>No pieces<br>left in bag</p>"


def test_played_adds_to_grid():
    s = joined()
    s.on_message(Played([(A, 1, 0), (B, 2, 0)]))
    assert s.board.grid == {(0, 0): D, (1, 0): A, (2, 0): B}


def test_move_accepted_commits_staged_tiles():
    s = joined()
    s.board.tentative = {(1, 0): 0}
    s.on_message(MoveAccepted([D]))
    assert s.board.grid[(1, 0)] == A
    assert s.board.hand == [B, C, D]
    assert s.board.tentative == {}


def test_chat_message():
    s = joined()
    assert s.chat_message("") is None
    assert s.chat_message("hi there") == ClientChat("hi there")


def test_turn_out_of_range():
    with pytest.raises(IndexError):
        joined().on_message(PlayerTurn(5))