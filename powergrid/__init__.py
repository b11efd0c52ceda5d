"""Board maps, game actions, wire protocol, WebSocket client and display helpers for Power Grid."""

__version__ = "0.1.0"

__all__ = ["actions", "labels", "map", "market_display", "protocol", "ws"]