"""ID generators for Urithi."""

import threading

from ulid import monotonic

from urithi.interfaces.id_generator import IdGenerator

# pylint: disable=too-few-public-methods


class ULIDGenerator(IdGenerator):
    """Thread-safe monotonic ULID generator.

    ULIDs sort by creation time, which keeps outbox event ids in write order.
    Backed by the `ulid-py` library.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def new_id(self) -> str:
        """Generate a new ULID (serialized across threads)."""
        with self._lock:
            return str(monotonic.new())


class SimpleIdGenerator(IdGenerator):
    """Sequential, zero-padded ids for tests and demos.

    The default width matches a ULID so the ids are accepted as event ids.
    """

    def __init__(self, length: int = 26, prefix: str = "") -> None:
        self._lock = threading.Lock()
        self._counter = 0
        self._length = length - len(prefix)
        self._prefix = prefix

    def new_id(self) -> str:
        with self._lock:
            self._counter += 1
            return f"{self._prefix}{self._counter:0{self._length}d}"
