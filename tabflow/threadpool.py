"""A worker pool whose tasks wait, grouped by id, until they are released."""

from __future__ import annotations

import threading
import time
from collections import deque
from concurrent.futures import Future
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Tuple

from tabflow.dataframe import DataFrame, Value

_print_lock = threading.Lock()


def log_thread(label: str, state: str, start: Optional[float] = None) -> str:
    """Print and return an aligned log line for the calling thread.

    ``start`` is a ``time.monotonic()`` reading; on an ``END`` line it adds
    the elapsed time in milliseconds.
    """
    tid = str(threading.get_ident())
    line = f"[{state:<5}] | Thread ID: {tid:<10} | {label}"
    if state == "END" and start is not None:
        elapsed_ms = int((time.monotonic() - start) * 1000)
        line += f" | Duration: {elapsed_ms} ms"
    with _print_lock:
        print(line, flush=True)
    return line


def add_records_task(df: DataFrame, thread_index: int, num_records: int) -> None:
    """Append ``num_records`` generated rows (int, float, bool, string) to ``df``."""
    label = f"AddRecords T{thread_index}"
    start = time.monotonic()
    log_thread(label, "START")
    for i in range(num_records):
        df.add_record(
            [
                str(thread_index * 100 + i),
                f"{3.14 + i:f}",
                "true" if i % 2 == 0 else "false",
                f"str_{i}",
            ]
        )
        time.sleep(0.005)
    log_thread(label, "END", start)


def add_column_task(
    df: DataFrame, col_name: str, col_type: str, values: Iterable[Value]
) -> None:
    """Add a column to ``df``, logging start and end."""
    label = f"AddColumn {col_name}"
    start = time.monotonic()
    log_thread(label, "START")
    df.add_column(values, col_name, col_type)
    log_thread(label, "END", start)


_Job = Callable[[], None]


class ThreadPool:
    """Fixed set of worker threads.

    Tasks are submitted under an id and held back until :meth:`release` is
    called with that id; only then do workers pick them up.
    """

    def __init__(self, num_threads: int) -> None:
        if num_threads < 1:
            raise ValueError("a thread pool needs at least one thread")
        self._condition = threading.Condition()
        self._ready: Deque[_Job] = deque()
        self._waiting: List[Tuple[int, _Job, Future]] = []
        self._stopped = False
        self._active = 0
        self._workers = [
            threading.Thread(target=self._work, name=f"pool-worker-{i}", daemon=True)
            for i in range(num_threads)
        ]
        for worker in self._workers:
            worker.start()

    @property
    def size(self) -> int:
        """Number of worker threads."""
        return len(self._workers)

    @property
    def active_threads(self) -> int:
        """Number of workers currently running a task."""
        with self._condition:
            return self._active

    @property
    def waiting(self) -> int:
        """Number of submitted tasks not yet released."""
        with self._condition:
            return len(self._waiting)

    def _work(self) -> None:
        while True:
            with self._condition:
                self._condition.wait_for(lambda: self._stopped or bool(self._ready))
                if not self._ready:
                    return
                job = self._ready.popleft()
                self._active += 1
            try:
                job()
            finally:
                with self._condition:
                    self._active -= 1

    def submit(self, task_id: int, fn: Callable[[], Any]) -> Future:
        """Queue ``fn`` under ``task_id``; it runs only after ``release(task_id)``."""
        future: Future = Future()

        def job() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                result = fn()
            except BaseException as exc:
                future.set_exception(exc)
            else:
                future.set_result(result)

        with self._condition:
            if self._stopped:
                raise RuntimeError("cannot submit to a pool that has been shut down")
            self._waiting.append((task_id, job, future))
        return future

    def release(self, task_id: int) -> None:
        """Move every waiting task with ``task_id`` to the run queue, in order."""
        with self._condition:
            kept = []
            for entry in self._waiting:
                if entry[0] == task_id:
                    self._ready.append(entry[1])
                else:
                    kept.append(entry)
            self._waiting = kept
            self._condition.notify_all()

    def shutdown(self) -> None:
        """Finish released tasks, cancel unreleased ones and join the workers."""
        with self._condition:
            if self._stopped:
                abandoned: List[Future] = []
            else:
                self._stopped = True
                abandoned = [future for _, _, future in self._waiting]
                self._waiting = []
            self._condition.notify_all()
        for future in abandoned:
            future.cancel()
        current = threading.current_thread()
        for worker in self._workers:
            if worker is not current:
                worker.join()

    def __enter__(self) -> "ThreadPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()