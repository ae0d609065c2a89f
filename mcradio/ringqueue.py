"""Fixed-capacity circular FIFO queue."""

from __future__ import annotations


class QueueFullError(Exception):
    """Raised when enqueueing into a full queue."""


class QueueEmptyError(Exception):
    """Raised when dequeueing from an empty queue."""


class RingQueue:
    """A FIFO queue over a fixed ring of slots."""

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._slots: list = [None] * capacity
        self._front = 0
        self._count = 0

    def empty(self) -> bool:
        return self._count == 0

    def full(self) -> bool:
        return self._count == self.capacity

    def enqueue(self, item) -> None:
        if self.full():
            raise QueueFullError("queue is full")
        tail = (self._front + self._count) % self.capacity
        self._slots[tail] = item
        self._count += 1

    def dequeue(self):
        if self.empty():
            raise QueueEmptyError("queue is empty")
        item = self._slots[self._front]
        self._slots[self._front] = None
        self._front = (self._front + 1) % self.capacity
        self._count -= 1
        return item

    def __len__(self) -> int:
        return self._count