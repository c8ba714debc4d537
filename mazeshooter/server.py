"""The UDP game server: receives client messages and broadcasts world changes."""

from __future__ import annotations

import argparse
import ipaddress
import select
import socket
import threading
import time
from typing import Any, Sequence

from . import events
from .components import SHARED_COMPONENTS
from .defaults import IP, MAP_HEIGHT, MAP_WIDTH, PORT, TICKS_PER_SECOND
from .ecs import ServerEcs
from .gamemap import Map
from .logger import Logger
from .protocol import (
    DecodeError,
    EcsChanges,
    Join,
    Leave,
    Ping,
    UpdateInputs,
    decode,
    encode,
)
from .spawn import spawn_weapon_crates_init

TICK_INTERVAL = (1000 // TICKS_PER_SECOND) / 1000.0
_MAX_DATAGRAM = 65535


def _format_address(host: str, port: int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def _family(host: str) -> socket.AddressFamily:
    try:
        is_v6 = ipaddress.ip_address(host).version == 6
    except ValueError:
        is_v6 = False
    return socket.AF_INET6 if is_v6 else socket.AF_INET


class Server:
    """Game state plus the UDP socket it is served on.

    ``registered_clients`` maps each joined client's address to its player entity.
    """

    def __init__(
        self, address: tuple[str, int], enable_logging_channels: bool = False
    ) -> None:
        host, port = address[0], address[1]
        self._socket = socket.socket(_family(host), socket.SOCK_DGRAM)
        try:
            self._socket.bind((host, port))
        except OSError:
            self._socket.close()
            raise

        self.registered_clients: dict[Any, int] = {}
        self.ecs = ServerEcs()
        self.ecs.resources.insert(Map.generate(MAP_WIDTH, MAP_HEIGHT, self.ecs.rng))
        spawn_weapon_crates_init(self.ecs)
        self.logger = Logger(enable_logging_channels)
        self.ecs.resources.insert(self.logger)

        self._last_tick = time.monotonic()
        self._running = threading.Event()
        self._closed = False

    def __enter__(self) -> Server:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def address(self) -> tuple:
        """The address the socket is actually bound to."""
        return self._socket.getsockname()

    @property
    def is_running(self) -> bool:
        return self._running.is_set()

    def send(self, endpoint: Any, payload: bytes) -> None:
        """Send one datagram; delivery failures are ignored as UDP would."""
        if self._closed:
            return
        try:
            self._socket.sendto(payload, endpoint)
        except OSError:
            pass

    def send_all(self, payload: bytes) -> None:
        """Send one datagram to every registered client."""
        for endpoint in list(self.registered_clients):
            self.send(endpoint, payload)

    def is_registered(self, endpoint: Any) -> bool:
        return endpoint in self.registered_clients

    def handle_tick(self) -> None:
        """Advance the simulation and broadcast the reliable changes it made."""
        now = time.monotonic()
        dt = now - self._last_tick
        self._last_tick = now
        self.ecs.tick(dt)

        changes = self.ecs.observer.drain_reliable()
        if changes:
            self.send_all(encode(EcsChanges(changes)))

    def handle_datagram(self, data: bytes, endpoint: Any) -> None:
        """Decode one client datagram and dispatch it to its event handler."""
        try:
            message = decode(data)
        except DecodeError:
            self.logger.log("Warning: Invalid message sent to server")
            return

        if isinstance(message, Ping):
            events.ping(self, endpoint)
        elif isinstance(message, Leave):
            events.leave(self, endpoint)
        elif isinstance(message, Join):
            events.join(self, endpoint, message.username)
        elif isinstance(message, UpdateInputs):
            try:
                events.update_inputs(self, message.input_state, endpoint)
            except events.InputError as err:
                self.logger.log(f"Warning: {err}")
        else:
            self.logger.log("Warning: Invalid message sent to server")

    def run(self) -> None:
        """Serve until :meth:`stop` or :meth:`close` is called."""
        self._running.set()
        self.handle_tick()
        next_tick = time.monotonic() + TICK_INTERVAL

        while self._running.is_set():
            wait = next_tick - time.monotonic()
            if wait <= 0.0:
                self.handle_tick()
                next_tick = time.monotonic() + TICK_INTERVAL
                continue
            try:
                readable, _, _ = select.select([self._socket], [], [], wait)
                if not readable:
                    continue
                data, endpoint = self._socket.recvfrom(_MAX_DATAGRAM)
            except (OSError, ValueError):
                if self._closed:
                    break
                continue
            self.handle_datagram(data, endpoint)

        self._running.clear()

    def stop(self) -> None:
        """Ask a running :meth:`run` loop to return."""
        self._running.clear()

    def close(self) -> None:
        """Stop serving and release the socket."""
        self.stop()
        if not self._closed:
            self._closed = True
            self._socket.close()


def run_server(ip: Any, port: int) -> None:
    """Start a server on ``ip``:``port`` and serve until interrupted."""
    host = str(ip)
    print(f"Starting server on {_format_address(host, port)}")
    with Server((host, port), False) as server:
        server.run()


def _ip(text: str) -> str:
    return str(ipaddress.ip_address(text))


def _port(text: str) -> int:
    value = int(text)
    if not 0 <= value <= 65535:
        raise ValueError(f"port out of range: {value}")
    return value


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Host a multiplayer maze shooter server.")
    parser.add_argument(
        "-p", "--port", type=_port, default=PORT, help="Port to host server on"
    )
    parser.add_argument("-i", "--ip", type=_ip, default=IP, help="IP to host server on")
    args = parser.parse_args(argv)

    try:
        run_server(args.ip, args.port)
    except KeyboardInterrupt:
        pass
    return 0


# Keeps the replicated component registry loaded alongside the server.
_ = SHARED_COMPONENTS