"""
Tests for the Streamlit front end, run headless with streamlit's AppTest.
"""

from decimal import Decimal
from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

from bills_tracker.config import get_settings
from bills_tracker.models.expense import Expense
from bills_tracker.services.storage import KeyValueFileStore, encode_expense_list


APP_PATH = Path(__file__).resolve().parent.parent / "app" / "main.py"


@pytest.fixture
def store_dir(monkeypatch, tmp_path):
    """Point the app at an empty store in a temporary directory."""
    monkeypatch.setenv("BILLS_STORAGE_DATA_DIR", str(tmp_path))
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


class TestBillCards:
    """Tests for the bill list cards."""

    def test_names_and_categories_are_escaped(self, store_dir):
        """Test markup in a bill's name or category is shown as text."""
        store = KeyValueFileStore(store_dir / "store.json")
        store.set("bills_v2", encode_expense_list([
            Expense(name="<b>Gym", category="a<b", amount=Decimal("30"), due_day=5),
        ]))

        at = AppTest.from_file(str(APP_PATH), default_timeout=30).run()

        assert not at.exception
        cards = [m.value for m in at.markdown if "bill-card" in m.value]
        assert len(cards) == 1
        assert "&lt;b&gt;Gym" in cards[0]
        assert "a&lt;b" in cards[0]
        assert "<b>Gym" not in cards[0]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
