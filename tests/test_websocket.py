import anyio

from fruteria.routers.websocket import ConnectionManager, manager, notify_movement


class FakeSocket:
    def __init__(self):
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_text(self, message):
        self.sent.append(message)


class ClosedSocket(FakeSocket):
    async def send_text(self, message):
        raise RuntimeError("Cannot call send once a close message has been sent")


def test_broadcast_reaches_every_connection():
    connections = ConnectionManager()
    first, second = FakeSocket(), FakeSocket()
    anyio.run(connections.connect, first)
    anyio.run(connections.connect, second)

    anyio.run(connections.broadcast, "Nueva entrada: Manzana +5 kg")

    assert first.accepted and second.accepted
    assert first.sent == second.sent == ["Nueva entrada: Manzana +5 kg"]


def test_broadcast_skips_and_drops_closed_connection():
    connections = ConnectionManager()
    closed, healthy = ClosedSocket(), FakeSocket()
    anyio.run(connections.connect, closed)
    anyio.run(connections.connect, healthy)

    anyio.run(connections.broadcast, "Nueva salida (Venta): Pera -2 kg")

    assert healthy.sent == ["Nueva salida (Venta): Pera -2 kg"]
    assert connections.active_connections == [healthy]


def test_disconnect_removes_connection():
    connections = ConnectionManager()
    socket = FakeSocket()
    anyio.run(connections.connect, socket)

    connections.disconnect(socket)
    connections.disconnect(socket)

    assert connections.active_connections == []


def test_notify_without_clients_does_nothing():
    assert manager.active_connections == []
    notify_movement("Salida eliminada: Pera +2")
