"""Thread pool with a bounded task queue and an admin thread that resizes it."""

from __future__ import annotations

import logging
import threading

from mcradio.ringqueue import RingQueue

log = logging.getLogger(__name__)


class ThreadPool:
    """Runs submitted callables on worker threads.

    The pool starts with `min_free_threads` idle workers. An admin thread
    adds a worker whenever every live worker is busy (up to `max_threads`)
    and retires idle workers beyond `min_free_threads`. Tasks wait in a
    queue of `queue_size` slots; `submit` blocks while it is full.
    """

    ADMIN_INTERVAL = 1.0

    def __init__(self, max_threads: int, min_free_threads: int, queue_size: int):
        if max_threads <= 0:
            raise ValueError("max_threads must be positive")
        if not 0 <= min_free_threads <= max_threads:
            raise ValueError("min_free_threads must be between 0 and max_threads")
        if queue_size <= 0:
            raise ValueError("queue_size must be positive")
        self.max_threads = max_threads
        self.min_free_threads = min_free_threads
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)
        self._changed = threading.Condition(self._lock)
        self._tasks = RingQueue(queue_size)
        self._workers: set[threading.Thread] = set()
        self._free = 0
        self._busy = 0
        self._exit_requests = 0
        self._closing = False
        self._stopped = threading.Event()
        with self._lock:
            for _ in range(min_free_threads):
                self._spawn()
        self._admin = threading.Thread(
            target=self._admin_loop, name="pool-admin", daemon=True
        )
        self._admin.start()

    def _spawn(self) -> None:
        worker = threading.Thread(target=self._work, name="pool-worker", daemon=True)
        self._workers.add(worker)
        self._free += 1
        worker.start()

    def _retire(self, worker: threading.Thread) -> None:
        self._free -= 1
        self._workers.discard(worker)
        self._changed.notify()

    def _next_task(self):
        me = threading.current_thread()
        while True:
            if self._exit_requests > 0:
                self._exit_requests -= 1
                self._retire(me)
                return None
            if self._closing:
                self._retire(me)
                return None
            if not self._tasks.empty():
                task = self._tasks.dequeue()
                self._not_full.notify()
                self._free -= 1
                self._busy += 1
                self._changed.notify()
                return task
            self._not_empty.wait()

    def _work(self) -> None:
        while True:
            with self._lock:
                task = self._next_task()
            if task is None:
                return
            func, args = task
            try:
                func(*args)
            except Exception:
                log.exception("task %r failed", func)
            with self._lock:
                self._busy -= 1
                self._free += 1
                self._changed.notify()

    def _needs_resize(self) -> bool:
        alive = self._free + self._busy
        if self._busy == alive and alive < self.max_threads:
            return True
        return (
            self._tasks.empty()
            and self._free - self._exit_requests > self.min_free_threads
        )

    def _resize(self) -> None:
        alive = self._free + self._busy
        if self._busy == alive and alive < self.max_threads:
            self._spawn()
        if self._tasks.empty():
            surplus = self._free - self._exit_requests - self.min_free_threads
            if surplus > 0:
                self._exit_requests += surplus
                self._not_empty.notify(surplus)

    def _admin_loop(self) -> None:
        while True:
            with self._lock:
                while not self._closing and not self._needs_resize():
                    self._changed.wait()
                if self._closing:
                    return
                self._resize()
            if self._stopped.wait(self.ADMIN_INTERVAL):
                return

    def submit(self, func, *args) -> None:
        """Queue `func(*args)`, blocking while the task queue is full."""
        with self._lock:
            while True:
                if self._closing:
                    raise RuntimeError("thread pool is shut down")
                if not self._tasks.full():
                    break
                self._not_full.wait()
            self._tasks.enqueue((func, args))
            self._not_empty.notify()

    def shutdown(self) -> None:
        """Stop accepting tasks and wait for running tasks and threads to end.

        Tasks still waiting in the queue are dropped.
        """
        with self._lock:
            self._closing = True
            workers = list(self._workers)
            self._not_empty.notify_all()
            self._not_full.notify_all()
            self._changed.notify_all()
        self._stopped.set()
        current = threading.current_thread()
        for worker in workers:
            if worker is not current:
                worker.join()
        if self._admin is not current:
            self._admin.join()

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()