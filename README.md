# pont

A multiplayer tile-matching board game. Players take turns laying tiles in
rows and columns on a shared grid. Every line must share a single colour or a
single shape, with no tile repeated; a line of six earns a bonus, and the
player who empties their hand once the bag is exhausted ends the game.

## What is in the package

- `pont.game` – the rules. `Shape` and `Color` name the six shapes and six
  colours, `full_bag()` returns the 108 tiles of a new game (three of each),
  and `Game` holds the board and the bag: `play` scores a placement,
  `deal` and `swap` draw from the bag, `invalid` finds tiles that break the
  line rules and `is_linear_connected` checks that a play lies in one row or
  column.
- `pont.protocol` – the client and server messages as frozen dataclasses
  (`CreateRoom`, `JoinRoom`, `ClientChat`, `Play`, `Swap`, `Disconnected`;
  `JoinedRoom`, `JoinFailed`, `ServerChat`, `PlayerTurn`, `Played`,
  `MoveAccepted`, `PlayerScore`, `ItsOver` and the rest) and their binary
  encoding: `encode_client` / `decode_client` and `encode_server` /
  `decode_server`. Bad input raises `DecodeError`.
- `pont.room` – `Room` and `Player`: seating players (a player rejoining
  under the name of a disconnected player takes that seat back), turn order,
  checking and applying plays and swaps, and broadcasting the results.
  `next_room_name` picks an unused three-word room name.
- `pont.server` – the WebSocket server: `serve`, `handle_connection`,
  `run_player`, `RoomHandle`, `load_words` and the `main` command.
- `pont.board`, `pont.session`, `pont.anim`, `pont.svg` – a client-side
  model. `BoardModel` decides where a dragged tile drops, marks invalid staged
  tiles, estimates the score and builds the `Play` or `Swap` to send;
  `Session` follows server messages to keep the score table, chat and turn
  state; `TileAnimation` and the transform helpers time tile slides; and
  `new_piece` builds a tile's SVG as an `xml.etree.ElementTree.Element`.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Running the server

The server names rooms with three words drawn from a word list, one word per
line. The package does not include a word list: by default `pont-server`
reads `words.txt` from the current directory, and `--words PATH` points it
elsewhere. It refuses to start if the file is missing or empty.

```
pont-server --words words.txt
```

The server listens on `0.0.0.0:8080` unless a `HOST:PORT` address is given:

```
pont-server 127.0.0.1:9000 --words words.txt
```

A client connects over WebSocket and sends binary messages. Its first message
is either `CreateRoom`, which opens a new room, or `JoinRoom`, naming an
existing room; a join fails with `JoinFailed` if the room is unknown or its
bag is empty. Any other first message drops the connection. Once seated, a
client's messages are limited to 1 MiB. A room closes when its last player
leaves. Every 60 seconds the server logs the number of open rooms if it has
changed.

## Using the rules engine

```python
from pont.game import Game, Shape, Color

game = Game()
score = game.play([((Shape.CIRCLE, Color.RED), 0, 0),
                   ((Shape.SQUARE, Color.RED), 1, 0)])
print(score)  # 2
```

`Game.play` returns `None` if any tile lands on an occupied square.

## What the package does not do

There is no playable client here. The client modules are a model of the
board, the score table and the tile artwork, with no window, browser page or
input handling, and `Session` does not open a connection to the server itself:
a program using it must send the messages it builds and pass it the
messages it receives.