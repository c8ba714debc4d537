import pytest

from mazeshooter.components import Despawn, InputState, Player
from mazeshooter.defaults import DEFAULT_PLAYER_NAME
from mazeshooter.ecs import ServerEcs
from mazeshooter.events import (
    InputError,
    JoinError,
    LeaveError,
    join,
    leave,
    ping,
    update_inputs,
)
from mazeshooter.gamemap import Map
from mazeshooter.logger import Logger
from mazeshooter.protocol import EcsChanges, OwnId, Pong, SendMap, decode

ENDPOINT = ("127.0.0.1", 5000)


class FakeServer:
    def __init__(self, ecs):
        self.ecs = ecs
        self.registered_clients = {}
        self.sent = []

    def send(self, endpoint, payload):
        self.sent.append((endpoint, payload))

    def is_registered(self, endpoint):
        return endpoint in self.registered_clients


@pytest.fixture
def server():
    ecs = ServerEcs()
    ecs.rng.seed(3)
    ecs.resources.insert(Map.default())
    ecs.resources.insert(Logger(True))
    return FakeServer(ecs)


def test_join_registers_and_sends_state(server):
    join(server, ENDPOINT, "alice")
    entity = server.registered_clients[ENDPOINT]
    assert server.ecs.world.get(entity, Player).name == "alice"

    messages = [decode(payload) for endpoint, payload in server.sent]
    assert all(endpoint == ENDPOINT for endpoint, _ in server.sent)
    assert messages[0] == OwnId(entity)
    assert messages[1] == SendMap(Map.default())
    assert isinstance(messages[2], EcsChanges)
    names = [c.component.name for c in messages[2].changes if isinstance(c.component, Player)]
    assert names == ["alice"]


def test_join_empty_name_uses_default(server):
    join(server, ENDPOINT, "")
    entity = server.registered_clients[ENDPOINT]
    assert server.ecs.world.get(entity, Player).name == DEFAULT_PLAYER_NAME


def test_join_twice_is_ignored(server):
    join(server, ENDPOINT, "alice")
    sent = len(server.sent)
    join(server, ENDPOINT, "alice")
    assert len(server.sent) == sent
    assert len(server.ecs.world.query(Player)) == 1


def test_join_without_map_raises(server):
    ecs = ServerEcs()
    ecs.resources.insert(Logger(False))
    bare = FakeServer(ecs)
    with pytest.raises(JoinError):
        join(bare, ENDPOINT, "alice")


def test_leave_despawns_player(server):
    join(server, ENDPOINT, "alice")
    entity = server.registered_clients[ENDPOINT]
    server.ecs.observer.drain_reliable()
    leave(server, ENDPOINT)
    assert ENDPOINT not in server.registered_clients
    assert not server.ecs.world.contains(entity)
    assert server.ecs.observer.drain_reliable() == [Despawn(entity)]


def test_leave_unregistered_does_nothing(server):
    leave(server, ENDPOINT)
    assert server.ecs.observer.drain_reliable() == []
    assert server.registered_clients == {}


def test_leave_missing_entity_raises(server):
    server.registered_clients[ENDPOINT] = 999
    with pytest.raises(LeaveError):
        leave(server, ENDPOINT)


def test_ping_replies_with_pong(server):
    ping(server, ENDPOINT)
    assert [decode(payload) for _, payload in server.sent] == [Pong()]
    assert any("Ping from 127.0.0.1:5000" in line for line in server.ecs.resources.get(Logger).drain())


def test_update_inputs_replaces_state(server):
    join(server, ENDPOINT, "alice")
    entity = server.registered_clients[ENDPOINT]
    state = InputState(forward=True, look_angle=0.5, shoot=True)
    update_inputs(server, state, ENDPOINT)
    assert server.ecs.world.get(entity, InputState) == state


def test_update_inputs_unregistered_raises(server):
    with pytest.raises(InputError, match="unregistered"):
        update_inputs(server, InputState(), ENDPOINT)


def test_update_inputs_missing_component_raises(server):
    entity = server.ecs.world.reserve_entity()
    server.registered_clients[ENDPOINT] = entity
    with pytest.raises(InputError, match="not found in ecs"):
        update_inputs(server, InputState(), ENDPOINT)