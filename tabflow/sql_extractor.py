"""Concurrent loading of SQLite tables into a :class:`DataFrame`."""

from __future__ import annotations

import concurrent.futures
import os
import queue
import sqlite3
import time
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Union

from tabflow.dataframe import DataFrame
from tabflow.threadpool import ThreadPool

DBSTORAGE_BLOCKSIZE = 30000
DBPROCESS_BLOCKSIZE = 1000


def _as_text(value: object) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    return str(value)


def _load_blocks(
    df: DataFrame,
    produce: Callable[[], Iterator[List[List[str]]]],
    num_threads: int,
    pool: Optional[ThreadPool],
    task_id: int,
) -> None:
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


def read_db(
    path: Union[str, Path],
    table_name: str,
    num_threads: int = 2,
    col_types: Sequence[str] = (),
    pool: Optional[ThreadPool] = None,
    task_id: int = 1,
) -> DataFrame:
    """Read every row of ``table_name`` from an SQLite file.

    The table gets one column per entry of ``col_types``, named col0, col1,
    ... and renamed after the table's columns once a row arrives. NULL cells
    are read as the text ``NULL``. Rows may not keep the table's order.
    """
    num_threads = max(num_threads, 2)
    uri = Path(path).resolve().as_uri() + "?mode=rw"
    connection = sqlite3.connect(uri, uri=True, check_same_thread=False)

    types = list(col_types)
    df = DataFrame([f"col{i}" for i in range(len(types))], types)
    sql = f"SELECT * FROM {table_name};"

    def produce() -> Iterator[List[List[str]]]:
        try:
            cursor = connection.execute(sql)
            names_done = False
            while True:
                rows = cursor.fetchmany(DBSTORAGE_BLOCKSIZE)
                if not rows:
                    return
                if not names_done:
                    for i, column in enumerate(cursor.description):
                        df.rename_column(f"col{i}", column[0])
                    names_done = True
                records = [[_as_text(value) for value in row] for row in rows]
                for start in range(0, len(records), DBPROCESS_BLOCKSIZE):
                    yield records[start:start + DBPROCESS_BLOCKSIZE]
        finally:
            connection.close()

    _load_blocks(df, produce, num_threads, pool, task_id)
    return df


def benchmark_db(
    path: Union[str, Path],
    table_name: str,
    col_types: Sequence[str] = (),
    max_threads: Optional[int] = None,
    repeats: int = 10,
) -> DataFrame:
    """Time :func:`read_db` for 2..``max_threads`` threads.

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
            read_db(path, table_name, threads, col_types)
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