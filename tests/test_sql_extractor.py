import sqlite3

import pytest

from tabflow.sql_extractor import benchmark_db, read_db
from tabflow.threadpool import ThreadPool

COLUMNS = [
    "transation_id", "account_id", "recipient_id", "amount", "type",
    "time_start", "location", "processed_at", "date",
]
TYPES = ["int", "int", "int", "float", "string", "string", "string", "string", "string"]


def _make_db(path, rows):
    with sqlite3.connect(path) as conn:
        conn.execute(
            "CREATE TABLE transactions (transation_id INTEGER, account_id INTEGER, "
            "recipient_id INTEGER, amount REAL, type TEXT, time_start TEXT, "
            "location TEXT, processed_at TEXT, date TEXT)"
        )
        conn.executemany("INSERT INTO transactions VALUES (?,?,?,?,?,?,?,?,?)", rows)
    conn.close()


@pytest.fixture
def database(tmp_path):
    path = tmp_path / "data.db"
    rows = [(0, 1, 9810, 4467.93, "retirada", "13:10:01.847319", "Abbottchester", "13:10:49.847319", "2025-03-21")]
    rows += [(i, i + 1, i * 10, i + 0.5, "deposito", "10:00:00", f"City{i}", "10:01:00", "2025-03-22") for i in range(1, 5)]
    _make_db(path, rows)
    return path


def test_read_db_renames_columns(database):
    df = read_db(database, "transactions", 2, TYPES)
    assert df.col_names == COLUMNS
    assert df.num_records == 5


def test_read_db_values(database):
    df = read_db(database, "transactions", 3, TYPES)
    rows = {row[0]: row for row in (df.record(i) for i in range(df.num_records))}
    assert rows[0][2] == 9810
    assert rows[0][3] == pytest.approx(4467.93)
    assert rows[0][6] == "Abbottchester"
    assert rows[3][3] == pytest.approx(3.5)


def test_null_in_string_column_is_text(tmp_path):
    path = tmp_path / "n.db"
    with sqlite3.connect(path) as conn:
        conn.execute("CREATE TABLE t (id INTEGER, name TEXT)")
        conn.execute("INSERT INTO t VALUES (1, NULL)")
    conn.close()
    df = read_db(path, "t", 2, ["int", "string"])
    assert df.record(0) == [1, "NULL"]


def test_null_in_int_column_raises(tmp_path):
    path = tmp_path / "n.db"
    with sqlite3.connect(path) as conn:
        conn.execute("CREATE TABLE t (id INTEGER)")
        conn.execute("INSERT INTO t VALUES (NULL)")
    conn.close()
    with pytest.raises(ValueError):
        read_db(path, "t", 2, ["int"])


def test_empty_table_keeps_placeholder_names(tmp_path):
    path = tmp_path / "e.db"
    _make_db(path, [])
    df = read_db(path, "transactions", 2, TYPES)
    assert df.num_records == 0
    assert df.col_names == [f"col{i}" for i in range(9)]


def test_too_few_types_raises(database):
    with pytest.raises(ValueError):
        read_db(database, "transactions", 2, ["int", "int"])


def test_missing_table_raises(database):
    with pytest.raises(sqlite3.OperationalError):
        read_db(database, "no_such_table", 2, TYPES)


def test_missing_file_raises(tmp_path):
    with pytest.raises(sqlite3.OperationalError):
        read_db(tmp_path / "absent.db", "transactions", 2, TYPES)
    assert not (tmp_path / "absent.db").exists()


def test_many_rows_with_shared_pool(tmp_path):
    path = tmp_path / "big.db"
    with sqlite3.connect(path) as conn:
        conn.execute("CREATE TABLE t (id INTEGER, v REAL)")
        conn.executemany("INSERT INTO t VALUES (?, ?)", [(i, i * 1.5) for i in range(2500)])
    conn.close()
    with ThreadPool(4) as pool:
        df = read_db(path, "t", 4, ["int", "float"], pool=pool, task_id=3)
    assert df.col_names == ["id", "v"]
    assert sorted(df.column(0)) == list(range(2500))


def test_benchmark_db(database):
    result = benchmark_db(database, "transactions", TYPES, max_threads=3, repeats=2)
    assert result.column(0) == [2, 3]
    for i in range(result.num_records):
        _, mean, low, high = result.record(i)
        assert low <= mean <= high