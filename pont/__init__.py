"""Tile-matching board game: rules, binary protocol, WebSocket room server and a client-side board model."""

__version__ = "0.1.0"