"""Tests for one-way tables, cross tables and normalization."""

import math

import numpy as np
import pandas as pd
import pytest
from scipy import stats

from tablestat.analysis.table_analysis import (
    Cell,
    CrossTableResult,
    CrossTabulationResult,
    TableAnalysis,
)
from tablestat.core.table import ColumnType, Table

GROUPING = ["Black Silver White Gray", "Blue Gold Green Red Yellow"]
NAMES = ["Simple-Color", "Bold-Color"]


@pytest.fixture
def analysis() -> TableAnalysis:
    """Return a fresh TableAnalysis."""
    return TableAnalysis()


@pytest.fixture
def letters() -> Table:
    """Return a single character column."""
    return Table.from_rows([["v"], ["A"], ["B"], ["A"], ["C"], ["A"]], [ColumnType.CHARACTER])


@pytest.fixture
def counts_table() -> Table:
    """Return a label column followed by two rows of counts per group."""
    return Table.from_rows(
        [
            ["Group", "A", "B", "C"],
            ["g1", 10, 20, 30],
            ["g2", 20, 20, 10],
        ],
        [ColumnType.CHARACTER, ColumnType.NUMERIC, ColumnType.NUMERIC, ColumnType.NUMERIC],
    )


class TestOneWayTable:
    """Tests for one_way_table."""

    def test_counts(self, analysis: TableAnalysis, letters: Table) -> None:
        """Test frequency counts in first-seen order."""
        result = analysis.one_way_table(letters, "v")
        assert result == {"A": 3, "B": 1, "C": 1}
        assert list(result) == ["A", "B", "C"]

    def test_percentages(self, analysis: TableAnalysis, letters: Table) -> None:
        """Test percentages of the total."""
        assert analysis.one_way_table(letters, "v", as_percentage=True) == {
            "A": 60.0,
            "B": 20.0,
            "C": 20.0,
        }

    def test_percentages_are_rounded(self, analysis: TableAnalysis) -> None:
        """Test that percentages keep two decimals."""
        table = Table.from_rows([["v"], ["a"], ["b"], ["b"]], ["character"])
        assert analysis.one_way_table(table, "v", as_percentage=True) == {"a": 33.33, "b": 66.67}

    def test_counts_sum_to_rows(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test that the counts add up to the number of rows."""
        result = analysis.one_way_table(car_table, "Color")
        assert sum(result.values()) == car_table.size
        assert result["Silver"] == 3

    def test_unknown_column(self, analysis: TableAnalysis, letters: Table) -> None:
        """Test that an unknown column gives an empty table."""
        assert analysis.one_way_table(letters, "nope") == {}

    def test_to_array(self, analysis: TableAnalysis, letters: Table) -> None:
        """Test conversion to item/count records."""
        frequencies = analysis.one_way_table(letters, "v")
        assert TableAnalysis.to_array(frequencies) == [
            {"item": "A", "count": 3},
            {"item": "B", "count": 1},
            {"item": "C", "count": 1},
        ]


class TestCrossTable:
    """Tests for cross_table."""

    def test_grouped_counts(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test counting colors into named groups per model."""
        result = analysis.cross_table(car_table, "Model", "Color", GROUPING, NAMES)

        assert result.columns == NAMES
        assert list(result.rows) == ["SE", "SEL", "SES"]
        assert [c.n for c in result.rows["SE"].cells] == [2, 2]
        assert [c.n for c in result.rows["SEL"].cells] == [3, 1]
        assert [c.n for c in result.rows["SES"].cells] == [2, 2]
        assert result.rows["SEL"].total == 4
        assert result.unmatched == 0

    def test_cell_fractions(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test row, column and table fractions of a cell."""
        result = analysis.cross_table(car_table, "Model", "Color", GROUPING, NAMES)
        cell = result.rows["SEL"].cells[0]
        assert cell.r == pytest.approx(3 / 4)
        assert cell.c == pytest.approx(3 / 7)
        assert cell.t == pytest.approx(3 / 12)

    def test_marginals(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test that row totals add up to the number of observations."""
        result = analysis.cross_table(car_table, "Model", "Color", GROUPING, NAMES)
        for row in result.rows.values():
            assert sum(c.n for c in row.cells) == row.total
            assert sum(c.r for c in row.cells) == pytest.approx(1.0)
        assert sum(row.total for row in result.rows.values()) == 12
        for j in range(len(NAMES)):
            assert sum(row.cells[j].c for row in result.rows.values()) == pytest.approx(1.0)

    def test_chi2_matches_scipy(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test chi2, df and q against scipy's contingency test."""
        result = analysis.cross_table(car_table, "Model", "Color", GROUPING, NAMES)
        chi2, p, dof, _ = stats.chi2_contingency([[2, 2], [3, 1], [2, 2]], correction=False)

        assert result.df == dof == 2
        assert result.chi2 == pytest.approx(chi2)
        assert result.q == pytest.approx(p, rel=1e-6)

    def test_ungrouped_matches_scipy(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test that every distinct value is a column without a grouping."""
        result = analysis.cross_table(car_table, "Model", "Color")
        df = car_table.to_dataframe()
        observed = pd.crosstab(df["Model"], df["Color"]).to_numpy()
        chi2, p, dof, _ = stats.chi2_contingency(observed, correction=False)

        assert result.columns == ["Black", "Silver", "Blue", "Red", "White", "Gray", "Gold", "Yellow", "Green"]
        assert result.df == dof == 16
        assert result.chi2 == pytest.approx(chi2)
        assert result.q == pytest.approx(p, rel=1e-6)

    def test_unmatched_values_dropped(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test that values outside every group are counted and dropped."""
        grouping = ["Black Silver White Gray", "Blue Gold Green Yellow"]
        result = analysis.cross_table(car_table, "Model", "Color", grouping, NAMES)
        assert result.unmatched == 1
        assert [c.n for c in result.rows["SE"].cells] == [2, 1]
        assert sum(row.total for row in result.rows.values()) == 11

    def test_empty_group_contributes_nothing(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test that a group with no observations adds nothing to chi2."""
        base = analysis.cross_table(car_table, "Model", "Color", GROUPING)
        widened = analysis.cross_table(car_table, "Model", "Color", [*GROUPING, "Purple"])

        assert widened.chi2 == pytest.approx(base.chi2)
        assert widened.df == 4
        assert all(row.cells[2].n == 0 and row.cells[2].c == 0.0 for row in widened.rows.values())

    def test_default_group_names(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test G0, G1, ... when names are missing or mismatched."""
        assert analysis.cross_table(car_table, "Model", "Color", GROUPING).columns == ["G0", "G1"]
        result = analysis.cross_table(car_table, "Model", "Color", GROUPING, ["only-one"])
        assert result.columns == ["G0", "G1"]

    def test_unknown_column(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test that an unknown column gives an empty result."""
        result = analysis.cross_table(car_table, "Model", "Nope", GROUPING)
        assert isinstance(result, CrossTableResult)
        assert result.is_empty
        assert result.q == -1.0
        assert result.format_for_display() == "Empty cross table."

    def test_independent_table_has_zero_chi2(self, analysis: TableAnalysis) -> None:
        """Test that a perfectly independent table reports q = -1."""
        table = Table.from_rows(
            [["r", "c"], ["a", "x"], ["a", "y"], ["b", "x"], ["b", "y"]],
            ["character", "character"],
        )
        result = analysis.cross_table(table, "r", "c")
        assert result.chi2 == pytest.approx(0.0)
        assert result.q == -1.0

    def test_to_dict(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test the serializable form."""
        data = analysis.cross_table(car_table, "Model", "Color", GROUPING, NAMES).to_dict()
        assert data["columns"] == NAMES
        assert data["df"] == 2
        assert set(data["table"]) == {"SE", "SEL", "SES"}
        se = data["table"]["SE"]
        assert len(se) == 3
        assert se[0]["n"] == 2
        assert se[-1] == 4

    def test_format_for_display(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test the text grid."""
        text = analysis.cross_table(car_table, "Model", "Color", GROUPING, NAMES).format_for_display()
        assert text.splitlines()[0] == " | Simple-Color | Bold-Color | Total"
        assert "SEL | 3 | 1 | 4" in text
        assert "df = 2" in text


class TestCrossTabulation:
    """Tests for cross_tabulation."""

    def test_matches_scipy(self, analysis: TableAnalysis, counts_table: Table) -> None:
        """Test chi2, df and q against scipy's contingency test."""
        result = analysis.cross_tabulation(counts_table)
        chi2, p, dof, _ = stats.chi2_contingency([[10, 20, 30], [20, 20, 10]], correction=False)

        assert isinstance(result, CrossTabulationResult)
        assert result.df == dof == 2
        assert result.chi2 == pytest.approx(chi2)
        assert result.q == pytest.approx(p, rel=1e-6)

    def test_layout(self, analysis: TableAnalysis, counts_table: Table) -> None:
        """Test that cells are grouped by observation column."""
        result = analysis.cross_tabulation(counts_table)
        assert result.labels == ["g1", "g2"]
        assert result.columns == ["A", "B", "C"]
        assert len(result.table) == 3
        assert all(len(column) == 2 for column in result.table)

        cell = result.table[0][1]
        assert isinstance(cell, Cell)
        assert cell.n == 20
        assert cell.r == pytest.approx(20 / 50)
        assert cell.c == pytest.approx(20 / 30)
        assert cell.t == pytest.approx(20 / 110)

    def test_zero_total(self, analysis: TableAnalysis) -> None:
        """Test that an all-zero table gives an empty result."""
        table = Table.from_rows([["g", "a"], ["x", 0], ["y", 0]], ["character", "numeric"])
        result = analysis.cross_tabulation(table)
        assert result.table == []
        assert result.q == -1.0

    def test_needs_two_columns(self, analysis: TableAnalysis, letters: Table) -> None:
        """Test that a single column cannot be cross-tabulated."""
        assert analysis.cross_tabulation(letters) == CrossTabulationResult()

    def test_non_numeric_count_column(self, analysis: TableAnalysis) -> None:
        """Test that character count columns give an empty result."""
        table = Table.from_rows(
            [["g", "label", "n"], ["x", "u", 1], ["y", "v", 2]],
            ["character", "character", "numeric"],
        )
        assert analysis.cross_tabulation(table) == CrossTabulationResult()

    def test_missing_counts_are_zero(self, analysis: TableAnalysis) -> None:
        """Test that short rows count as zero observations."""
        table = Table.from_rows(
            [["Group", "A", "B"], ["g1", 10, 20], ["g2", 30]],
            ["character", "numeric", "numeric"],
        )
        result = analysis.cross_tabulation(table)
        assert result.table[1][1].n == 0
        assert result.df == 1

    def test_to_dict(self, analysis: TableAnalysis, counts_table: Table) -> None:
        """Test the serializable form."""
        data = analysis.cross_tabulation(counts_table).to_dict()
        assert data["table"][2][0] == pytest.approx(
            {"n": 30, "r": 0.5, "c": 0.75, "t": 30 / 110}
        )


class TestNormalize:
    """Tests for normalize."""

    def test_numeric_columns_scaled(self, analysis: TableAnalysis, numeric_table: Table) -> None:
        """Test min-max scaling to [0, 1]."""
        x, y, k = analysis.normalize(numeric_table)
        assert x == pytest.approx([0.0, 1 / 9, 2 / 9, 3 / 9, 1.0])
        assert min(y) == 0.0
        assert max(y) == 1.0

    def test_constant_column_becomes_zeros(self, analysis: TableAnalysis, numeric_table: Table) -> None:
        """Test that a column with no spread becomes all zeros."""
        assert analysis.normalize(numeric_table)[2] == [0.0] * 5

    def test_non_numeric_columns_pass_through(self, analysis: TableAnalysis, car_table: Table) -> None:
        """Test that character columns are copied unchanged."""
        model, color, price, mileage = analysis.normalize(car_table)
        assert model == car_table.get_column("Model")
        assert color == car_table.get_column("Color")
        assert min(price) == 0.0 and max(price) == 1.0
        assert np.argmax(mileage) == 10

    def test_table_unchanged(self, analysis: TableAnalysis, numeric_table: Table) -> None:
        """Test that normalization works on a copy."""
        analysis.normalize(numeric_table)
        assert numeric_table.get_column("x") == [1.0, 2.0, 3.0, 4.0, 10.0]

    def test_missing_cells(self, analysis: TableAnalysis) -> None:
        """Test that missing cells stay NaN and do not affect the scaling."""
        table = Table.from_rows([["a", "b"], [1, 2], [3], [5, 6]], ["numeric", "numeric"])
        a, b = analysis.normalize(table)
        assert a == [0.0, 0.5, 1.0]
        assert b[0] == 0.0 and b[2] == 1.0
        assert math.isnan(b[1])
