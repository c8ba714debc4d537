# mazeshooter

An authoritative game server for a small multiplayer first-person shooter
played in a randomly generated maze.

The server generates a maze map and scatters weapon crates across it. It then
runs the game simulation at a fixed tick rate of 144 ticks per second. The
simulation covers:

- player movement from client inputs
- shooting, with per-weapon spread, cooldowns and ammo
- wall collisions
- bullet hits, with damage drop-off
- deaths and respawns
- the kill/death scoreboard

Changes to the game state are recorded as messages and broadcast to joined
clients over UDP.

## Installation

```
pip install .
```

The package has no runtime dependencies beyond the standard library.

## Running a server

```
mazeshooter-server
```

By default the server listens on `127.0.0.1`, port `1337`. Both can be
changed with `-i/--ip` and `-p/--port`:

```
mazeshooter-server --ip 0.0.0.0 --port 4000
```

Press Ctrl+C to stop it.

The server prints log lines with a UTC timestamp. It logs when:

- a player joins or leaves
- a client pings the server
- a weapon is picked up
- a datagram cannot be decoded

## Using it from Python

```python
from mazeshooter.server import run_server

run_server("127.0.0.1", 1337)
```

For finer control, build a `Server` yourself. It is also a context manager:

```python
from mazeshooter.server import Server

with Server(("127.0.0.1", 1337), False) as server:
    server.run()  # returns after server.stop() is called from another thread
```

`Server` provides these methods:

- `handle_datagram(data, endpoint)` decodes and dispatches one client datagram.
- `handle_tick()` advances the simulation and broadcasts its changes.
- `send(endpoint, payload)` sends one datagram.
- `send_all(payload)` sends one datagram to every registered client.

Passing `True` as the second argument also queues every log line on
`server.logger`. Collect the queued lines with `server.logger.drain()`.

Lower-level pieces can be used on their own:

- `mazeshooter.gamemap.Map.generate(width, height, rng)` builds a maze map
  with odd dimensions. `Map.render()` returns an ASCII picture of the map.
- `mazeshooter.maze.Maze` generates the underlying perfect maze.
- `mazeshooter.gun.Gun` describes each weapon's damage, range, bullet speed,
  spread, pellets, magazine size and fire rate.
- `mazeshooter.protocol.encode` and `mazeshooter.protocol.decode` convert
  client and server messages to and from bytes. The bytes are compact JSON.
  `decode` raises `DecodeError` on invalid input.
- `mazeshooter.world.World` is the entity-component store.
- `mazeshooter.observer.Observer` records changes to a `World` as
  `Insert`, `Remove` and `Despawn` messages.
- `mazeshooter.ecs.ServerEcs` holds the world, the observer and shared
  resources. `tick(dt)` advances it by `dt` seconds.

## Messages

Clients send `Ping`, `Join(username)`, `Leave` and `UpdateInputs(input_state)`.

The server replies with these messages:

- `Pong`
- `OwnId`, the player's entity id
- `SendMap`, the game map
- `EcsChanges`, a list of `Insert`, `Remove` and `Despawn` instructions that
  keep a client's copy of the world in step with the server

A joining client receives `OwnId`, then `SendMap`, then the full current
world state as one `EcsChanges`.

## What it does not include

This package is only the server side. It has no game client: nothing renders
the maze, reads a keyboard or plays the game. There is also no graphical
console for watching a running server.

Only changes recorded in the observer's reliable queue are broadcast. The
unreliable queue is filled but never sent.

## Running the tests

```
pip install .[test]
pytest
```