"""Handlers for the messages clients send to the server."""

from __future__ import annotations

import dataclasses
from typing import Any

from .components import InputState
from .defaults import DEFAULT_PLAYER_NAME
from .gamemap import Map
from .logger import Logger
from .protocol import EcsChanges, OwnId, Pong, SendMap, encode
from .spawn import spawn_player
from .world import ComponentError, NoSuchEntity


class JoinError(Exception):
    """A client could not be joined to the game."""

    def __str__(self) -> str:
        return f"JoinError: {super().__str__()}"


class LeaveError(Exception):
    """A client could not be removed from the game."""


class InputError(Exception):
    """A client's input update could not be applied."""


def _addr(endpoint: Any) -> str:
    if isinstance(endpoint, tuple) and len(endpoint) >= 2:
        return f"{endpoint[0]}:{endpoint[1]}"
    return str(endpoint)


def join(server: Any, endpoint: Any, username: str) -> None:
    """Register a client, spawn its player and send it the game state."""
    logger = server.ecs.resources.get(Logger)

    if server.is_registered(endpoint):
        logger.log(f"Participant with IP {_addr(endpoint)} already exists")
        return

    try:
        _, entity = spawn_player(server.ecs, username or DEFAULT_PLAYER_NAME)
        server.send(endpoint, encode(OwnId(entity)))

        logger.log(f"Added participant with ip {_addr(endpoint)}")
        server.registered_clients[endpoint] = entity

        logger.log(f"Sending map to IP {_addr(endpoint)}")
        server.send(endpoint, encode(SendMap(server.ecs.resources.get(Map))))
        server.send(endpoint, encode(EcsChanges(server.ecs.init_client())))
    except (KeyError, TypeError) as exc:
        raise JoinError(exc) from exc


def leave(server: Any, endpoint: Any) -> None:
    """Unregister a client and despawn its player."""
    if not server.is_registered(endpoint):
        return
    try:
        entity = server.registered_clients.pop(endpoint)
    except KeyError:
        raise LeaveError("Can't unregister a non-existent participant") from None
    try:
        server.ecs.observed_world().despawn(entity)
    except NoSuchEntity as exc:
        raise LeaveError(str(exc)) from exc

    server.ecs.resources.get(Logger).log(
        f"Unregistered participant with ip {_addr(endpoint)}"
    )


def ping(server: Any, endpoint: Any) -> None:
    """Answer a ping with a pong."""
    server.ecs.resources.get(Logger).log(f"Ping from {_addr(endpoint)}")
    server.send(endpoint, encode(Pong()))


def update_inputs(server: Any, input_state: InputState, endpoint: Any) -> None:
    """Replace the input state of the client's player."""
    entity = server.registered_clients.get(endpoint)
    if entity is None:
        raise InputError("tried to update input for unregistered client")
    try:
        server.ecs.world.get(entity, InputState)
    except ComponentError as exc:
        raise InputError(f"client is registered but not found in ecs: {exc}") from exc
    server.ecs.world.insert_one(entity, dataclasses.replace(input_state))