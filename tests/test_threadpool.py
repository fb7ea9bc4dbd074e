import threading
import time

import pytest

from tabflow.dataframe import DataFrame
from tabflow.threadpool import (
    ThreadPool,
    add_column_task,
    add_records_task,
    log_thread,
)


def _frame():
    return DataFrame(["id", "value", "flag", "text"], ["int", "float", "bool", "string"])


def test_released_task_returns_result():
    with ThreadPool(2) as pool:
        future = pool.submit(1, lambda: 21 * 2)
        pool.release(1)
        assert future.result(timeout=5) == 42


def test_task_waits_until_released():
    started = threading.Event()
    with ThreadPool(2) as pool:
        future = pool.submit(7, started.set)
        time.sleep(0.05)
        assert not started.is_set()
        assert pool.waiting == 1
        pool.release(7)
        future.result(timeout=5)
        assert started.is_set()
        assert pool.waiting == 0


def test_release_only_matching_id():
    with ThreadPool(2) as pool:
        first = pool.submit(1, lambda: "one")
        second = pool.submit(2, lambda: "two")
        pool.release(2)
        assert second.result(timeout=5) == "two"
        assert not first.done()
        pool.release(1)
        assert first.result(timeout=5) == "one"


def test_exception_reaches_future():
    def boom():
        raise ValueError("bad task")

    with ThreadPool(1) as pool:
        future = pool.submit(3, boom)
        pool.release(3)
        with pytest.raises(ValueError, match="bad task"):
            future.result(timeout=5)
        # the worker survives and keeps serving tasks
        after = pool.submit(4, lambda: "still alive")
        pool.release(4)
        assert after.result(timeout=5) == "still alive"


def test_shutdown_cancels_unreleased_tasks():
    pool = ThreadPool(2)
    future = pool.submit(5, lambda: "never")
    pool.shutdown()
    assert future.cancelled()


def test_submit_after_shutdown_raises():
    pool = ThreadPool(1)
    pool.shutdown()
    with pytest.raises(RuntimeError):
        pool.submit(1, lambda: None)


def test_zero_threads_rejected():
    with pytest.raises(ValueError):
        ThreadPool(0)


def test_size_and_idle_active_count():
    with ThreadPool(3) as pool:
        assert pool.size == 3
        assert pool.active_threads == 0


def test_tasks_run_concurrently_on_several_workers():
    barrier = threading.Barrier(2, timeout=5)
    with ThreadPool(2) as pool:
        futures = [pool.submit(9, barrier.wait) for _ in range(2)]
        pool.release(9)
        results = sorted(f.result(timeout=5) for f in futures)
        assert results == [0, 1]


def test_log_thread_start_line(capsys):
    line = log_thread("Job", "START")
    assert line.startswith("[START] | Thread ID: ")
    assert line.endswith(" | Job")
    assert capsys.readouterr().out == line + "\n"


def test_log_thread_end_has_duration():
    line = log_thread("Job", "END", time.monotonic())
    assert line.startswith("[END  ] | Thread ID: ")
    assert " | Job | Duration: " in line
    assert line.endswith(" ms")


def test_log_thread_end_without_start_has_no_duration():
    line = log_thread("Job", "END")
    assert "Duration" not in line


def test_add_records_task_values():
    df = _frame()
    add_records_task(df, 2, 2)
    assert df.num_records == 2
    assert df.record(0) == [200, pytest.approx(3.14), True, "str_0"]
    assert df.record(1)[0] == 201
    assert df.record(1)[2] is False
    assert df.record(1)[3] == "str_1"


def test_parallel_add_records_through_pool():
    df = _frame()
    num_tasks, per_task = 4, 5
    with ThreadPool(4) as pool:
        futures = [
            pool.submit(i, lambda i=i: add_records_task(df, i, per_task))
            for i in range(num_tasks)
        ]
        for i in range(num_tasks):
            pool.release(i)
        for f in futures:
            f.result(timeout=10)
    assert df.num_records == num_tasks * per_task
    ids = sorted(df.column(0))
    expected = sorted(t * 100 + i for t in range(num_tasks) for i in range(per_task))
    assert ids == expected


def test_add_column_task_appends_column():
    df = _frame()
    add_records_task(df, 0, 2)
    add_column_task(df, "extra_col", "string", ["extraA", "extraB"])
    assert df.num_cols == 5
    assert df.column(df.column_index("extra_col")) == ["extraA", "extraB"]


def test_add_column_task_length_mismatch():
    df = _frame()
    add_records_task(df, 0, 2)
    with pytest.raises(ValueError):
        add_column_task(df, "extra_col", "string", ["only one"])