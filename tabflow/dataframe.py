"""A column-oriented, thread-safe table with typed columns."""

from __future__ import annotations

import re
import threading
from pathlib import Path
from typing import Iterable, List, Sequence, Union

Value = Union[int, float, bool, str]

COLUMN_TYPES = ("int", "float", "bool", "string")

_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1

_INT_RE = re.compile(r"\s*([+-]?\d+)")
_FLOAT_RE = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def value_to_string(value: Value) -> str:
    """Render a cell value as text: bools as 1/0, floats with six decimals."""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return f"{value:f}"
    return str(value)


def _parse_int(text: str) -> int:
    match = _INT_RE.match(text)
    if match is None:
        raise ValueError(f"invalid int value: {text!r}")
    number = int(match.group(1))
    if not _INT_MIN <= number <= _INT_MAX:
        raise ValueError(f"int value out of range: {text!r}")
    return number


def _parse_float(text: str) -> float:
    match = _FLOAT_RE.match(text)
    if match is None:
        raise ValueError(f"invalid float value: {text!r}")
    return float(match.group(1))


def _convert(text: str, col_type: str, col_name: str, strict_bool: bool) -> Value:
    if col_type == "int":
        return _parse_int(text)
    if col_type == "float":
        return _parse_float(text)
    if col_type == "bool":
        if text in ("true", "1"):
            return True
        if not strict_bool or text in ("false", "0"):
            return False
        raise ValueError(f"invalid bool value in column {col_name}")
    if col_type == "string":
        return text
    raise ValueError(f"unknown data type in column {col_name}")


class DataFrame:
    """Named, typed columns of equal length, safe to append to from threads."""

    def __init__(self, col_names: Sequence[str], col_types: Sequence[str]) -> None:
        col_names = list(col_names)
        col_types = list(col_types)
        if len(col_names) != len(col_types):
            raise ValueError("column names and column types differ in length")
        self.col_names: List[str] = col_names
        self.idx_columns = {name: i for i, name in enumerate(col_names)}
        self.col_types = dict(zip(col_names, col_types))
        self.columns: List[List[Value]] = [[] for _ in col_names]
        self._num_records = 0
        self._lock = threading.Lock()

    @property
    def num_records(self) -> int:
        return self._num_records

    @property
    def num_cols(self) -> int:
        return len(self.col_names)

    def __len__(self) -> int:
        return self._num_records

    def copy(self) -> "DataFrame":
        """Return an independent copy of the table."""
        with self._lock:
            other = DataFrame([], [])
            other.col_names = list(self.col_names)
            other.idx_columns = dict(self.idx_columns)
            other.col_types = dict(self.col_types)
            other.columns = [list(column) for column in self.columns]
            other._num_records = self._num_records
        return other

    def add_column(self, values: Iterable[Value], name: str, col_type: str) -> None:
        """Add a column, or replace an existing one of the same name and type."""
        values = list(values)
        with self._lock:
            if self._num_records == 0:
                self._num_records = len(values)
            elif self._num_records != len(values):
                raise ValueError("column length does not match the number of records")

            if self.col_types.get(name) == col_type:
                self.columns[self.idx_columns[name]] = values
                return

            self.col_names.append(name)
            self.idx_columns[name] = len(self.col_names) - 1
            self.col_types[name] = col_type
            self.columns.append(values)

    def add_record(self, record: Sequence[str]) -> None:
        """Parse one row of text values by column type and append it."""
        record = list(record)
        if len(record) != self.num_cols:
            raise ValueError("the number of values in the record must equal the number of columns")
        converted = [
            _convert(text, self.col_types[name], name, strict_bool=True)
            for text, name in zip(record, self.col_names)
        ]
        with self._lock:
            for column, value in zip(self.columns, converted):
                column.append(value)
            self._num_records += 1

    def add_records(self, records: Iterable[Sequence[str]]) -> None:
        """Parse and append many rows; nothing is added if any row is invalid."""
        rows = [list(row) for row in records]
        if not rows:
            return
        for position, row in enumerate(rows):
            if len(row) != self.num_cols:
                raise ValueError(
                    f"the number of values in record {position} does not equal the number of columns"
                )
        new_columns = [
            [_convert(row[j], self.col_types[name], name, strict_bool=False) for row in rows]
            for j, name in enumerate(self.col_names)
        ]
        with self._lock:
            for column, values in zip(self.columns, new_columns):
                column.extend(values)
            self._num_records += len(rows)

    def get_records(self, indexes: Iterable[int]) -> "DataFrame":
        """Return a new table with the given rows; out-of-range indexes are skipped."""
        with self._lock:
            types = [self.col_types[name] for name in self.col_names]
            result = DataFrame(self.col_names, types)
            for index in indexes:
                if not 0 <= index < self._num_records:
                    continue
                for target, source in zip(result.columns, self.columns):
                    target.append(source[index])
                result._num_records += 1
        return result

    def format_table(self) -> str:
        """Render the table as a bordered text grid."""
        with self._lock:
            if self._num_records == 0:
                return "Empty DataFrame."
            cells = [
                [value_to_string(column[i]) for column in self.columns]
                for i in range(self._num_records)
            ]
            widths = [
                max([len(name)] + [len(row[j]) for row in cells])
                for j, name in enumerate(self.col_names)
            ]
            names = list(self.col_names)

        separator = "+" + "".join("-" * (w + 2) + "+" for w in widths)

        def line(values: Sequence[str]) -> str:
            return "|" + "".join(f" {v.ljust(w)} |" for v, w in zip(values, widths))

        lines = [separator, line(names), separator]
        lines.extend(line(row) for row in cells)
        lines.append(separator)
        return "\n".join(lines)

    def print(self) -> None:
        """Write the formatted table to standard output."""
        print(self.format_table())

    def to_csv(self, path: Union[str, Path]) -> Path:
        """Write the table to ``path`` + '.csv', quoting string columns."""
        target = Path(f"{path}.csv")
        with self._lock, target.open("w", encoding="utf-8", newline="") as out:
            out.write(",".join(self.col_names) + "\n")
            quoted = [self.col_types[name] == "string" for name in self.col_names]
            for i in range(self._num_records):
                fields = []
                for column, is_string in zip(self.columns, quoted):
                    text = value_to_string(column[i])
                    if is_string:
                        text = '"' + text.replace('"', '""') + '"'
                    fields.append(text)
                out.write(",".join(fields) + "\n")
        return target

    def record(self, index: int) -> List[Value]:
        """Return row ``index`` as a list of values."""
        return [column[index] for column in self.columns]

    def column(self, index: int) -> List[Value]:
        """Return a copy of column ``index``."""
        return list(self.columns[index])

    def column_name(self, index: int) -> str:
        return self.col_names[index]

    def column_type(self, index: int) -> str:
        return self.col_types[self.col_names[index]]

    def column_index(self, name: str) -> int:
        try:
            return self.idx_columns[name]
        except KeyError:
            raise KeyError(f"column '{name}' not found") from None

    def rename_column(self, old_name: str, new_name: str) -> None:
        """Rename a column, refusing unknown old names and taken new names."""
        with self._lock:
            if old_name not in self.idx_columns:
                raise ValueError(f"column '{old_name}' not found")
            if new_name in self.idx_columns:
                raise ValueError(f"a column named '{new_name}' already exists")
            index = self.idx_columns.pop(old_name)
            self.col_names[index] = new_name
            self.idx_columns[new_name] = index
            if old_name in self.col_types:
                self.col_types[new_name] = self.col_types.pop(old_name)