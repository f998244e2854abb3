"""Tests for the column-major table store."""

import io

import pandas as pd
import pytest

from tablestat.core.table import ColumnType, SplitResult, Table


class TestColumnType:
    """Tests for ColumnType parsing and inference."""

    @pytest.mark.parametrize("value", [ColumnType.NUMERIC, "numeric", "NUMERIC", "Numeric"])
    def test_parse(self, value) -> None:
        """Test that enum members, values and names are accepted."""
        assert ColumnType.parse(value) == ColumnType.NUMERIC

    def test_parse_unknown(self) -> None:
        """Test that unknown type names raise KeyError."""
        with pytest.raises(KeyError):
            ColumnType.parse("float")

    def test_from_dtype(self) -> None:
        """Test inference from pandas dtypes."""
        df = pd.DataFrame({"i": [1, 2], "f": [0.5, 1.5], "s": ["a", "b"], "b": [True, False]})
        assert [ColumnType.from_dtype(d) for d in df.dtypes] == [
            ColumnType.NUMERIC,
            ColumnType.NUMERIC,
            ColumnType.CHARACTER,
            ColumnType.BOOLEAN,
        ]


class TestLoadRecords:
    """Tests for loading from records."""

    def test_reserved_keys_dropped(self, car_table: Table) -> None:
        """Test that _id is not a data column."""
        assert car_table.categories == ["Model", "Color", "Price", "Mileage"]
        assert car_table.size == 12
        assert car_table.column_count == 4
        assert len(car_table) == 12

    def test_plain_id_dropped(self) -> None:
        """Test that id is also dropped."""
        table = Table.from_records([{"id": 1, "v": 3.0}, {"id": 2, "v": 4.0}], ["numeric"])
        assert table.categories == ["v"]
        assert table.get_column("v") == [3.0, 4.0]

    def test_types_recorded(self, car_table: Table, car_types: list) -> None:
        """Test that column types are kept per column."""
        assert car_table.data_types == car_types
        assert car_table.column_type("Price") == ColumnType.NUMERIC
        assert car_table.column_type("Color") == ColumnType.CHARACTER
        assert car_table.column_type("Nope") is None

    def test_type_count_mismatch_is_noop(self, car_table: Table, car_records: list) -> None:
        """Test that a wrong number of types leaves the table unchanged."""
        assert car_table.load_records(car_records, ["numeric"]) is False
        assert car_table.categories == ["Model", "Color", "Price", "Mileage"]
        assert car_table.size == 12

    def test_unknown_type_is_noop(self, car_records: list) -> None:
        """Test that an unknown type name rejects the load."""
        table = Table()
        assert table.load_records(car_records, ["character", "character", "float", "numeric"]) is False
        assert table.size == 0
        assert table.categories == []

    def test_empty_records_is_noop(self) -> None:
        """Test that no records means no change."""
        table = Table()
        assert table.load_records([], ["numeric"]) is False
        assert table.size == 0


class TestLoadRows:
    """Tests for loading from header plus rows."""

    def test_header_and_rows(self, numeric_table: Table) -> None:
        """Test that the first row is the header."""
        assert numeric_table.categories == ["x", "y", "k"]
        assert numeric_table.size == 5
        assert numeric_table.get_column("x") == [1.0, 2.0, 3.0, 4.0, 10.0]

    def test_needs_data_row(self) -> None:
        """Test that a header alone is rejected."""
        table = Table()
        assert table.load_rows([["a", "b"]], ["numeric", "numeric"]) is False
        assert table.load_rows([], ["numeric"]) is False

    def test_header_type_mismatch_is_noop(self, numeric_table: Table) -> None:
        """Test that a header/type mismatch leaves the table unchanged."""
        assert numeric_table.load_rows([["a"], [1]], ["numeric", "numeric"]) is False
        assert numeric_table.categories == ["x", "y", "k"]

    def test_duplicate_header_is_noop(self, numeric_table: Table) -> None:
        """Test that repeated column names reject the load."""
        assert numeric_table.load_rows([["a", "a"], [1, 2]], ["numeric", "numeric"]) is False
        assert numeric_table.categories == ["x", "y", "k"]
        assert Table.from_rows([["a", "a"], [1, 2]], ["numeric", "numeric"]).size == 0

    def test_short_rows_padded(self) -> None:
        """Test that missing trailing values become None."""
        table = Table.from_rows([["a", "b"], [1, 2], [3]], ["numeric", "numeric"])
        assert table.get_column("b") == [2, None]

    def test_reload_replaces_everything(self, numeric_table: Table) -> None:
        """Test that a successful load replaces the previous table."""
        assert numeric_table.get_column("x")
        assert numeric_table.load_rows([["z"], [9]], ["numeric"]) is True
        assert numeric_table.categories == ["z"]
        assert numeric_table.get_column("x") == []


class TestColumnAccess:
    """Tests for get_column, remove_column and copies."""

    def test_get_column_returns_copy(self, car_table: Table) -> None:
        """Test that the returned column does not alias the table."""
        prices = car_table.get_column("Price")
        prices.append(0)
        assert len(car_table.get_column("Price")) == 12

    def test_get_column_repeated(self, car_table: Table) -> None:
        """Test that repeated access returns equal data."""
        first = car_table.get_column("Mileage")
        assert car_table.get_column("Mileage") == first
        assert car_table.get_column("Model")[:3] == ["SE", "SE", "SE"]

    def test_get_unknown_column(self, car_table: Table) -> None:
        """Test that unknown names give an empty list."""
        assert car_table.get_column("Nope") == []

    def test_names_are_case_sensitive(self, car_table: Table) -> None:
        """Test that column names are case sensitive."""
        assert "Price" in car_table
        assert "price" not in car_table
        assert car_table.get_column("price") == []

    def test_table_is_deep_copy(self, numeric_table: Table) -> None:
        """Test that the table property copies every column."""
        data = numeric_table.table
        data[0][0] = 999.0
        assert numeric_table.get_column("x")[0] == 1.0

    def test_remove_column(self, car_table: Table) -> None:
        """Test that removing a column drops its data, name and type."""
        car_table.get_column("Color")
        car_table.remove_column("Color")
        assert car_table.categories == ["Model", "Price", "Mileage"]
        assert car_table.data_types == [ColumnType.CHARACTER, ColumnType.NUMERIC, ColumnType.NUMERIC]
        assert car_table.column_count == 3
        assert car_table.get_column("Color") == []
        assert car_table.get_column("Price")[0] == 21992

    def test_remove_unknown_column(self, car_table: Table) -> None:
        """Test that removing an unknown column is a no-op."""
        car_table.remove_column("Nope")
        assert car_table.column_count == 4


class TestSplit:
    """Tests for train/test splitting."""

    def test_split(self, car_table: Table) -> None:
        """Test that rows 0..row go to train."""
        result = car_table.split(3)
        assert isinstance(result, SplitResult)
        assert [len(c) for c in result.train] == [4, 4, 4, 4]
        assert [len(c) for c in result.test] == [8, 8, 8, 8]
        assert result.train[2] == [21992, 20995, 19995, 17809]

    def test_split_last_row(self, car_table: Table) -> None:
        """Test that splitting at the last row leaves an empty test set."""
        result = car_table.split(11)
        assert all(len(c) == 12 for c in result.train)
        assert all(c == [] for c in result.test)

    @pytest.mark.parametrize("row", [-1, 12, 100])
    def test_split_out_of_range(self, car_table: Table, row: int) -> None:
        """Test that out-of-range rows give an empty result."""
        assert car_table.split(row) == SplitResult()

    def test_split_external_data(self, car_table: Table) -> None:
        """Test splitting caller-supplied column data."""
        result = car_table.split(0, data=[[0.1, 0.2, 0.3]])
        assert result.to_dict() == {"train": [[0.1]], "test": [[0.2, 0.3]]}


class TestInterop:
    """Tests for DataFrame and CSV interop."""

    def test_from_dataframe_infers_types(self) -> None:
        """Test loading from a DataFrame with inferred types."""
        df = pd.DataFrame({"n": [1, 2, 3], "s": ["a", "b", "a"], "b": [True, False, True]})
        table = Table.from_dataframe(df)
        assert table.categories == ["n", "s", "b"]
        assert table.data_types == [ColumnType.NUMERIC, ColumnType.CHARACTER, ColumnType.BOOLEAN]
        assert table.get_column("n") == [1, 2, 3]
        assert table.get_column("s") == ["a", "b", "a"]

    def test_from_dataframe_explicit_types(self) -> None:
        """Test that explicit types override inference."""
        df = pd.DataFrame({"code": [10, 20]})
        table = Table.from_dataframe(df, ["character"])
        assert table.data_types == [ColumnType.CHARACTER]

    def test_read_csv(self) -> None:
        """Test loading delimited text."""
        table = Table.read_csv(io.StringIO("a;b\n1;x\n2;y\n"), sep=";")
        assert table.categories == ["a", "b"]
        assert table.data_types == [ColumnType.NUMERIC, ColumnType.CHARACTER]
        assert table.get_column("a") == [1, 2]

    def test_to_dataframe(self, numeric_table: Table) -> None:
        """Test conversion back to a DataFrame."""
        df = numeric_table.to_dataframe()
        assert list(df.columns) == ["x", "y", "k"]
        assert df["y"].tolist() == [2.0, 4.1, 5.9, 8.2, 19.5]

    def test_repr(self, numeric_table: Table) -> None:
        """Test the string form."""
        assert repr(numeric_table) == "Table(columns=['x', 'y', 'k'], rows=5)"
