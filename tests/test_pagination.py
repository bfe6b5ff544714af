"""Tests for page/offset/size reconciliation."""

import pytest

from modelrest.rest.pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PageWindow,
    clamp_size,
    reconcile_pagination,
    total_pages,
)


class TestReconcilePagination:
    def test_page_derives_offset(self):
        assert reconcile_pagination(offset=0, page=3, size=10) == PageWindow(20, 2, 10)

    def test_offset_derives_page(self):
        assert reconcile_pagination(offset=45, page=0, size=10) == PageWindow(45, 4, 10)

    def test_offset_wins_over_page(self):
        assert reconcile_pagination(offset=30, page=7, size=10) == PageWindow(30, 3, 10)

    def test_nothing_given(self):
        assert reconcile_pagination(0, 0, 0) == PageWindow(0, 0, DEFAULT_PAGE_SIZE)

    def test_size_clamped_before_offset(self):
        assert reconcile_pagination(offset=0, page=2, size=500) == PageWindow(100, 1, 100)

    def test_negative_offset(self):
        assert reconcile_pagination(offset=-5, page=0, size=10) == PageWindow(0, 0, 10)


class TestClampSize:
    @pytest.mark.parametrize(
        "size,expected",
        [(0, DEFAULT_PAGE_SIZE), (500, MAX_PAGE_SIZE), (100, 100), (1, 1), (-3, 1)],
    )
    def test_clamp(self, size, expected):
        assert clamp_size(size) == expected


class TestTotalPages:
    def test_exact_multiple(self):
        assert total_pages(20, 10) == 2

    def test_remainder(self):
        assert total_pages(21, 10) == 3

    def test_empty(self):
        assert total_pages(0, 10) == 1
