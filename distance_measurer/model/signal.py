"""Typed notification channels.

Each component owns the signals it emits; listeners connect to a specific
signal and keep the returned Connection so they can release it exactly
once. There is no shared global dispatcher.

Example:
    inserted = Signal("inserted")  # (index, coord)
    conn = inserted.connect(lambda index, coord: ...)
    inserted.emit(0, coord)
    conn.disconnect()
"""

from collections.abc import Callable


class Connection:
    """Handle for one listener registration on a Signal."""

    def __init__(self, signal: "Signal", handler: Callable[..., None]) -> None:
        self._signal: Signal | None = signal
        self._handler = handler

    @property
    def connected(self) -> bool:
        return self._signal is not None

    def disconnect(self) -> None:
        """Release the registration. Disconnecting twice is a contract violation."""
        assert self._signal is not None, "Connection already disconnected"
        self._signal._remove(self)
        self._signal = None

    def __call__(self, *args: object) -> None:
        self._handler(*args)


class Signal:
    """Synchronous, ordered, single-threaded notification channel."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._connections: list[Connection] = []

    def connect(self, handler: Callable[..., None]) -> Connection:
        conn = Connection(self, handler)
        self._connections.append(conn)
        return conn

    def emit(self, *args: object) -> None:
        # Snapshot so handlers may disconnect (or connect) while emitting
        for conn in list(self._connections):
            if conn.connected:
                conn(*args)

    @property
    def listener_count(self) -> int:
        return len(self._connections)

    def _remove(self, conn: Connection) -> None:
        self._connections.remove(conn)

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, listeners={len(self._connections)})"


class ConnectionGroup:
    """Tracks every Connection a component makes so teardown releases each once."""

    def __init__(self) -> None:
        self._connections: list[Connection] = []
        self._released = False

    def add(self, conn: Connection) -> Connection:
        assert not self._released, "Cannot register listeners after release"
        self._connections.append(conn)
        return conn

    def release(self) -> int:
        """Disconnect everything. Returns number of connections released."""
        count = 0
        while self._connections:
            self._connections.pop().disconnect()
            count += 1
        self._released = True
        return count

    @property
    def released(self) -> bool:
        return self._released

    def __len__(self) -> int:
        return len(self._connections)
