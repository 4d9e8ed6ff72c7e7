"""Tests for cursor.py — reserve/advance and page-break decisions."""

import pytest

from cvengine.cursor import LayoutCursor


@pytest.fixture
def breaks():
    return []


@pytest.fixture
def cursor(breaks):
    return LayoutCursor(top_margin=50, threshold=800, on_page_break=lambda: breaks.append(1))


class TestReserve:

    def test_fitting_block_does_not_break(self, cursor, breaks):
        cursor.advance(100)
        assert cursor.reserve(600) is False
        assert cursor.offset == 150
        assert breaks == []

    def test_exact_fit_does_not_break(self, cursor):
        cursor.advance(650)
        assert cursor.reserve(100) is False

    def test_overflow_breaks_before_placement(self, cursor, breaks):
        cursor.advance(700)
        assert cursor.reserve(60) is True
        assert cursor.offset == 50
        assert cursor.page_index == 2
        assert breaks == [1]

    def test_oversized_block_at_page_top_is_not_split(self, cursor, breaks):
        assert cursor.reserve(2000) is False
        assert cursor.page_index == 1
        assert breaks == []

    def test_oversized_block_mid_page_gets_fresh_page_once(self, cursor, breaks):
        cursor.advance(10)
        assert cursor.reserve(2000) is True
        assert cursor.reserve(2000) is False
        assert cursor.page_index == 2
        assert breaks == [1]

    def test_negative_height_rejected(self, cursor):
        with pytest.raises(ValueError):
            cursor.reserve(-1)


class TestAdvance:

    def test_advance_moves_offset(self, cursor):
        cursor.advance(12.5)
        cursor.advance(7.5)
        assert cursor.offset == 70
        assert cursor.remaining == 730

    def test_negative_advance_rejected(self, cursor):
        with pytest.raises(ValueError):
            cursor.advance(-5)

    def test_threshold_must_exceed_top_margin(self):
        with pytest.raises(ValueError):
            LayoutCursor(top_margin=100, threshold=100)

    def test_for_config(self, config):
        cursor = LayoutCursor.for_config(config)
        assert cursor.offset == config.top
        assert cursor.threshold == config.threshold
        assert cursor.page_index == 1
