"""Pytest configuration and fixtures for tablestat tests."""

import pytest

from tablestat.core.table import ColumnType, Table


@pytest.fixture
def car_records() -> list[dict]:
    """Return used-car records as a record store would hand them over."""
    rows = [
        ("SE", "Black", 21992, 7413),
        ("SE", "Silver", 20995, 10926),
        ("SE", "Blue", 19995, 7351),
        ("SE", "Red", 17809, 11613),
        ("SEL", "White", 17500, 8367),
        ("SEL", "Gray", 17495, 25125),
        ("SEL", "Gold", 17000, 27393),
        ("SEL", "Silver", 16995, 21026),
        ("SES", "Yellow", 16995, 32655),
        ("SES", "Green", 16995, 36116),
        ("SES", "Black", 16992, 40539),
        ("SES", "Silver", 16950, 9199),
    ]
    return [
        {"_id": f"id{i}", "Model": m, "Color": c, "Price": p, "Mileage": mi}
        for i, (m, c, p, mi) in enumerate(rows)
    ]


@pytest.fixture
def car_types() -> list[ColumnType]:
    """Return column types matching car_records (id stripped)."""
    return [
        ColumnType.CHARACTER,
        ColumnType.CHARACTER,
        ColumnType.NUMERIC,
        ColumnType.NUMERIC,
    ]


@pytest.fixture
def car_table(car_records: list[dict], car_types: list[ColumnType]) -> Table:
    """Return the used-car data loaded into a Table."""
    return Table.from_records(car_records, car_types)


@pytest.fixture
def numeric_table() -> Table:
    """Return a small all-numeric table with one constant column."""
    return Table.from_rows(
        [
            ["x", "y", "k"],
            [1.0, 2.0, 5.0],
            [2.0, 4.1, 5.0],
            [3.0, 5.9, 5.0],
            [4.0, 8.2, 5.0],
            [10.0, 19.5, 5.0],
        ],
        [ColumnType.NUMERIC, ColumnType.NUMERIC, ColumnType.NUMERIC],
    )
