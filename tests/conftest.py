# tests/conftest.py
import pytest

from jobs.store import InMemoryJobStore, set_job_store


@pytest.fixture
def scenario_a_rows():
    return [
        {"date": "2022-01-01", "category": "A", "sales": "100"},
        {"date": "2022-01-01", "category": "B", "sales": "50"},
        {"date": "2022-01-02", "category": "A", "sales": "200"},
    ]


@pytest.fixture
def retail_rows():
    return [
        {"Order Date": "2022-01-01", "Product": "Pen", "Region": "North", "Channel": "Web", "Qty": 10, "Unit Price": 2.0},
        {"Order Date": "2022-01-02", "Product": "Book", "Region": "South", "Channel": "Store", "Qty": 2, "Unit Price": 15.0},
        {"Order Date": "2022-01-03", "Product": "Pen", "Region": "South", "Channel": "Web", "Qty": 5, "Unit Price": 2.0},
        {"Order Date": "2022-02-01", "Product": "Bag", "Region": "North", "Channel": "Store", "Qty": 1, "Unit Price": 40.0},
        {"Order Date": "2022-02-02", "Product": "Ink", "Region": "East", "Channel": "Web", "Qty": 4, "Unit Price": 3.0},
    ]


@pytest.fixture
def store():
    s = InMemoryJobStore()
    set_job_store(s)
    yield s
    set_job_store(None)
