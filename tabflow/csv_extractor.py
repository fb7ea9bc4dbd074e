"""Concurrent loading of comma-separated files into a :class:`DataFrame`."""

from __future__ import annotations

import concurrent.futures
import itertools
import os
import queue
import time
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Union

from tabflow.dataframe import DataFrame
from tabflow.threadpool import ThreadPool

STORAGE_BLOCKSIZE = 30000
PROCESS_BLOCKSIZE = 1000


def split_line(line: str) -> List[str]:
    """Split a line on commas; a trailing empty field is dropped, as is an empty line."""
    if not line:
        return []
    fields = line.split(",")
    if fields[-1] == "":
        fields.pop()
    return fields


def _strip_newline(line: str) -> str:
    return line[:-1] if line.endswith("\n") else line


def _load_blocks(
    df: DataFrame,
    produce: Callable[[], Iterator[List[List[str]]]],
    num_threads: int,
    pool: Optional[ThreadPool],
    task_id: int,
) -> None:
    """Run one producer and ``num_threads - 1`` consumers appending blocks to ``df``."""
    blocks: "queue.Queue[Optional[List[List[str]]]]" = queue.Queue()
    consumers = num_threads - 1

    def reader() -> None:
        try:
            for block in produce():
                blocks.put(block)
        finally:
            for _ in range(consumers):
                blocks.put(None)

    def consumer() -> None:
        while (block := blocks.get()) is not None:
            df.add_records(block)

    def run(target: ThreadPool) -> None:
        futures = [target.submit(-task_id, reader)]
        futures.extend(target.submit(-task_id, consumer) for _ in range(consumers))
        target.release(-task_id)
        concurrent.futures.wait(futures)
        for future in futures:
            future.result()

    if pool is None:
        with ThreadPool(num_threads) as own_pool:
            run(own_pool)
    else:
        run(pool)


def read_csv(
    path: Union[str, Path],
    num_threads: int = 2,
    col_types: Sequence[str] = (),
    pool: Optional[ThreadPool] = None,
    task_id: int = 1,
) -> DataFrame:
    """Read a CSV file with a header line into a new :class:`DataFrame`.

    Columns without a type in ``col_types`` are read as strings. One thread
    reads the file while the others parse blocks of lines; rows therefore may
    not keep the file's order. With ``pool`` the work runs there under the id
    ``-task_id``; otherwise a private pool is used.
    """
    num_threads = max(num_threads, 2)
    read_block = PROCESS_BLOCKSIZE * num_threads

    with open(path, encoding="utf-8") as handle:
        headers = split_line(_strip_newline(handle.readline()))
        types = list(col_types)[: len(headers)]
        types.extend("string" for _ in range(len(headers) - len(types)))
        df = DataFrame(headers, types)

        def produce() -> Iterator[List[List[str]]]:
            while True:
                lines = list(itertools.islice(handle, read_block))
                if not lines:
                    return
                for start in range(0, len(lines), PROCESS_BLOCKSIZE):
                    yield [
                        split_line(_strip_newline(line))
                        for line in lines[start:start + PROCESS_BLOCKSIZE]
                    ]

        _load_blocks(df, produce, num_threads, pool, task_id)
    return df


def benchmark_csv(
    path: Union[str, Path],
    col_types: Sequence[str] = (),
    max_threads: Optional[int] = None,
    repeats: int = 10,
) -> DataFrame:
    """Time :func:`read_csv` for 2..``max_threads`` threads.

    Returns a table with the columns numThreads, meanTime, minTime and
    maxTime, times in milliseconds.
    """
    if max_threads is None:
        max_threads = os.cpu_count() or 2
    result = DataFrame(
        ["numThreads", "meanTime", "minTime", "maxTime"],
        ["int", "float", "float", "float"],
    )
    for threads in range(2, max_threads + 1):
        durations = []
        for _ in range(repeats):
            start = time.perf_counter()
            read_csv(path, threads, col_types)
            durations.append(int((time.perf_counter() - start) * 1000))
        mean = sum(durations) / len(durations) if durations else 0.0
        result.add_record(
            [
                str(threads),
                f"{mean:f}",
                str(min(durations, default=0)),
                str(max(durations, default=0)),
            ]
        )
    return result