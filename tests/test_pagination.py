"""
Tests for pagination arithmetic and clamping
"""

import pytest

from app.models.pagination import MAX_PAGE_SIZE, PagedResult, clamp_paging


def _page(total_count, page, page_size=10):
    return PagedResult[int](items=[], total_count=total_count, page=page, page_size=page_size)


class TestPagedResult:
    def test_total_pages_rounds_up(self):
        assert _page(95, 1).total_pages == 10

    def test_last_page(self):
        result = _page(95, 10)
        assert result.has_next is False
        assert result.has_previous is True

    def test_first_page(self):
        result = _page(95, 1)
        assert result.has_previous is False
        assert result.has_next is True

    def test_exact_multiple(self):
        assert _page(100, 1).total_pages == 10

    def test_empty(self):
        result = _page(0, 1)
        assert result.total_pages == 0
        assert result.has_next is False
        assert result.has_previous is False

    def test_derived_fields_are_serialized(self):
        dumped = _page(25, 2).model_dump()
        assert dumped["total_pages"] == 3
        assert dumped["has_next"] is True
        assert dumped["has_previous"] is True


class TestClampPaging:
    @pytest.mark.parametrize(
        "page, page_size, expected",
        [
            (1, 10, (1, 10)),
            (0, 10, (1, 10)),
            (-3, 10, (1, 10)),
            (2, 0, (2, 1)),
            (2, 500, (2, MAX_PAGE_SIZE)),
        ],
    )
    def test_clamp(self, page, page_size, expected):
        assert clamp_paging(page, page_size) == expected
