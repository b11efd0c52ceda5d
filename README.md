# powergrid

Building blocks for playing the Power Grid board game over a network:

- `powergrid.map`: the board. It holds cities, regions and weighted
  connections, loads them from TOML (`Map.load`) and finds the cheapest route
  from a player's network (`Map.shortest_path_to`, `Map.connection_cost_to`).
  `Map.to_dict` and `Map.from_dict` convert a map to and from its JSON form.
- `powergrid.actions`: every in-game action a player can take (`JoinGame`,
  `PlaceBid`, `BuildCities` and the others), `action_from_dict`, and the
  `ActionError` exception with its `ActionErrorKind` reasons.
- `powergrid.protocol`: the JSON messages that pass between client and lobby
  server (`ClientMessage`, `LobbyAction`, `ServerMessage` and their subclasses),
  with `dumps`, `loads_client` and `loads_server`.
- `powergrid.ws`: a background WebSocket connection that reconnects by itself
  and hands you events (`spawn_ws`, `WsChannels`).
- `powergrid.labels` and `powergrid.market_display`: text and layout helpers
  for showing players, resources and markets.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Loading a map

```python
from powergrid.map import Map

board = Map.load("""
name = "Test"
regions = ["r"]

[[cities]]
id = "a"
name = "A"
region = "r"

[[cities]]
id = "b"
name = "B"
region = "r"

[[connections]]
from = "a"
to = "b"
cost = 5
""")

path = board.shortest_path_to(["a"], "b")
print(path.cost, path.edges)   # 5 [('a', 'b')]
```

`shortest_path_to` returns `None` when the target does not exist or cannot be
reached. It returns a path of cost 0 with no edges when the player owns no city
yet or already owns the target. Each edge is stored as `(smaller_id, larger_id)`.
`connection_cost_to` returns only the cost, or `None` when the target cannot be
reached. Malformed map data raises `powergrid.map.MapError`.

## Actions and errors

Actions are frozen dataclasses that check their fields when they are created.
`to_dict()` gives the form tagged with `"type"`, and `action_from_dict` turns
it back into an action:

```python
from powergrid.actions import ActionError, ActionErrorKind, PlaceBid, action_from_dict

assert action_from_dict(PlaceBid(amount=12).to_dict()) == PlaceBid(amount=12)

err = ActionError(ActionErrorKind.BID_TOO_LOW, 10, 11)
print(err)            # bid of 10 is too low; minimum is 11
print(err.to_dict())  # {'BidTooLow': [10, 11]}
```

## Messages on the wire

Messages are JSON objects tagged with a `"type"` field in snake case. Lobby
actions are inlined into the client envelope and tagged with `"action"`:

```python
from powergrid.protocol import CreateRoom, LobbyMessage, dumps, loads_client

text = dumps(LobbyMessage(CreateRoom(name="test-room")))
# {"type":"lobby","action":"create_room","name":"test-room"}
assert loads_client(text) == LobbyMessage(CreateRoom(name="test-room"))
```

Malformed input raises `powergrid.protocol.ProtocolError`. Passing anything
other than a message to `dumps` raises `TypeError`.

## Talking to a server

```python
from powergrid.actions import StartGame
from powergrid.protocol import ListRooms
from powergrid.ws import MessageReceived, spawn_ws

with spawn_ws("ws://localhost:3000/ws") as channels:
    channels.send_lobby(ListRooms())
    channels.send_action("friday", StartGame())
    for event in channels.poll_events():
        if isinstance(event, MessageReceived):
            print(event.message)
```

The connection runs on its own daemon thread. After a failed connect or a
disconnect it emits `Disconnected` and tries again two seconds later. It keeps
doing so until the channels are closed. Outgoing messages are queued and sent
while a connection is open. `send_action` with a room of `None` does nothing.
`poll_events` never blocks. Incoming frames that cannot be decoded are logged
and skipped.

## Display helpers

- `labels.resource_name` and `labels.color_label` give the upper-case names
  of resources and player colours.
- `labels.dim_color` darkens an RGB(A) colour to 30% and sets a fixed alpha
  of 180.
- `labels.highlight_names` splits an event-log line into plain runs and
  runs that match player names.
- `market_display.replenish_rates` gives the resources added to the market
  each round for a step and a player count.
- `market_display.cog_slots` and `market_display.uranium_slots` list the
  market spaces, cheapest first, with their prices and whether each is filled.
- `market_display.plant_columns` arranges the plant market into columns.
  Before step 3 these are the actual and future markets. From step 3 on they
  are two halves of the actual market.

## What this package does not do

It does not enforce the game rules or track game state. A `StateUpdate`
carries the state as a plain dictionary. It contains no lobby server, no
graphical client and no bundled board, so you must load maps from your own
TOML.