# tabflow

tabflow is a small in-memory table with typed columns (`int`, `float`,
`bool`, `string`). It comes with a thread pool whose tasks wait, grouped by
an integer id, until they are released. It also has loaders that fill a
table from a CSV file or an SQLite table using several threads at once.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Tables: `tabflow.dataframe`

`DataFrame(col_names, col_types)` makes an empty table. It raises
`ValueError` if the two lists differ in length. Data is kept column by
column in `columns`. `num_records`, `num_cols` and `len()` give its size.

- `add_record(record)` takes one row of strings, converts each value to its
  column's type and appends the row. A bool must be `true`, `1`, `false`
  or `0`. A wrong row length, a bad value or an unknown type raises
  `ValueError`.
- `add_records(records)` converts and appends many rows. Nothing is added
  if any row is invalid. Here any bool text other than `true` or `1` reads
  as false.
- `add_column(values, name, col_type)` adds a column of values that already
  have their type. If a column with the same name and type exists, its
  values are replaced. The length must match the number of records, unless
  the table is still empty.
- `record(i)`, `column(i)`, `column_name(i)`, `column_type(i)` and
  `column_index(name)` read data and metadata back.
- `get_records(indexes)` returns a new table holding the given rows.
  Indexes that are out of range are skipped.
- `rename_column(old, new)` renames a column. It raises `ValueError` if
  `old` does not exist or `new` is already taken.
- `copy()` returns an independent copy.
- `format_table()` renders a bordered text grid, and `print()` writes it to
  standard output.
- `to_csv(path)` writes `<path>.csv` and returns that path. String fields
  are quoted, with inner quotes doubled.

`value_to_string(value)` renders a cell as text: bools as `1`/`0`, floats
with six decimals.

## Thread pool: `tabflow.threadpool`

```python
from tabflow.threadpool import ThreadPool

with ThreadPool(4) as pool:
    future = pool.submit(7, lambda: 6 * 7)
    pool.release(7)          # only now may a worker run it
    print(future.result())   # 42
```

`submit(task_id, fn)` returns a `concurrent.futures.Future`. Tasks run only
after `release(task_id)`, and tasks with the same id run in the order they
were submitted. `shutdown()` (also called when the `with` block ends) lets
released tasks finish, cancels tasks that were never released and joins
the workers. The properties `size`, `active_threads` and `waiting` report
the pool's state.

The module also has `log_thread(label, state, start)`, which prints an
aligned log line naming the current thread. There are two logged tasks
that use it: `add_records_task(df, thread_index, num_records)` and
`add_column_task(df, col_name, col_type, values)`.

## Loading CSV files: `tabflow.csv_extractor`

```python
from tabflow.csv_extractor import read_csv

df = read_csv("transactions.csv", 4, ["int", "int", "int", "float"])
df.print()
```

`read_csv(path, num_threads=2, col_types=(), pool=None, task_id=1)` reads
the header line, then hands blocks of lines from one reader thread to
`num_threads - 1` parsing threads. It always uses at least 2 threads.
Columns without a type in `col_types` are read as strings. Rows may not
keep the file's order. If you pass a `pool`, the work runs there under the
id `-task_id`; otherwise a private pool is used. Lines are split on plain
commas (`split_line`), so quoted fields that contain commas are not
supported.

`benchmark_csv(path, col_types=(), max_threads=None, repeats=10)` times
`read_csv` for 2 up to `max_threads` threads. `max_threads` defaults to
the CPU count. The result is a table with the columns `numThreads`,
`meanTime`, `minTime` and `maxTime`, in milliseconds.

## Loading SQLite tables: `tabflow.sql_extractor`

`read_db(path, table_name, num_threads=2, col_types=(), pool=None,
task_id=1)` reads every row of an existing SQLite file's table. It makes
one column per entry of `col_types` and names the columns after the query
result once rows arrive. NULL cells become the text `NULL`.
`benchmark_db(path, table_name, col_types=(), max_threads=None,
repeats=10)` times it in the same way as `benchmark_csv`.

## What tabflow does not do

tabflow has no command-line program. It has no analysis functions either:
no grouping, joins, value counts, sorting, quantiles or summary statistics.
It provides the table, the thread pool and the loaders; any analysis is
yours to write on top of `DataFrame` and `ThreadPool`.