import math

import pytest

from app.core.pagination import PaginationParams, PaginationState, compute_pagination


class TestCompute:
    def test_basic_metadata(self):
        state = compute_pagination(2, 20, 45)
        assert state.total_pages == 3
        assert state.offset == 20
        assert state.has_previous_page is True
        assert state.has_next_page is True
        assert state.previous_page == 1
        assert state.next_page == 3
        assert (state.from_item, state.to_item) == (21, 40)

    def test_last_page_is_partial(self):
        state = compute_pagination(3, 20, 45)
        assert (state.from_item, state.to_item) == (41, 45)
        assert state.has_next_page is False
        assert state.next_page is None
        assert state.is_last_page()

    def test_empty_result(self):
        state = compute_pagination(1, 20, 0)
        assert state.total_pages == 0
        assert (state.from_item, state.to_item) == (0, 0)
        assert state.has_next_page is False
        assert state.is_last_page()
        assert not state.has_items()
        assert state.summary["showing"] == "No items"

    @pytest.mark.parametrize("page", [0, -5])
    def test_page_clamped_to_one(self, page):
        assert compute_pagination(page, 20, 50).current_page == 1

    def test_per_page_clamped(self):
        assert compute_pagination(1, 0, 10).per_page == 1
        assert compute_pagination(1, 500, 10).per_page == 100

    def test_total_clamped(self):
        assert compute_pagination(1, 20, -3).total_items == 0

    def test_page_beyond_last(self):
        state = compute_pagination(10, 20, 45)
        assert state.has_previous_page is True
        assert state.has_next_page is False
        assert not state.is_valid_page(10)

    @pytest.mark.parametrize("per_page", [1, 7, 20, 100])
    @pytest.mark.parametrize("total", [1, 19, 20, 21, 999])
    def test_derived_bounds(self, per_page, total):
        state = compute_pagination(1, per_page, total)
        assert state.total_pages == math.ceil(total / per_page)
        assert state.offset + per_page >= state.to_item


class TestMutation:
    def test_setters_recompute(self):
        state = PaginationState(1, 10, 95)
        state.current_page = 5
        assert state.offset == 40
        assert state.from_item == 41
        state.per_page = 50
        assert state.total_pages == 2
        assert state.offset == 200
        state.total_items = 0
        assert state.total_pages == 0
        assert state.to_item == 0

    def test_with_page_returns_copy(self):
        state = PaginationState(1, 10, 95).add_link("self", "/api/x")
        other = state.with_page(3)
        assert state.current_page == 1
        assert other.current_page == 3
        other.add_link("next", "/api/x?page=4")
        assert "next" not in state.links

    def test_with_per_page(self):
        assert PaginationState(1, 10, 95).with_per_page(25).total_pages == 4


class TestQueries:
    def test_is_valid_page(self):
        state = compute_pagination(1, 10, 30)
        assert state.is_valid_page(1)
        assert state.is_valid_page(3)
        assert not state.is_valid_page(0)
        assert not state.is_valid_page(4)

    def test_page_range_window(self):
        assert compute_pagination(10, 10, 200).page_range(2) == [8, 9, 10, 11, 12]
        assert compute_pagination(1, 10, 30).page_range(5) == [1, 2, 3]
        assert compute_pagination(1, 10, 0).page_range() == []


class TestOutput:
    def test_simple_dict(self):
        assert compute_pagination(2, 10, 25).to_simple_dict() == {
            "current_page": 2,
            "per_page": 10,
            "total": 25,
            "last_page": 3,
            "from": 11,
            "to": 20,
        }

    def test_link_dict_uses_supplied_links(self):
        state = compute_pagination(1, 10, 25)
        state.add_link("first", "/a?page=1").add_link("next", "/a?page=2").add_link("prev", "/a?page=0")
        out = state.to_link_dict([{"id": 1}])
        assert out["data"] == [{"id": 1}]
        assert out["first_page_url"] == "/a?page=1"
        assert out["next_page_url"] == "/a?page=2"
        # no previous page on page 1
        assert out["prev_page_url"] is None

    def test_dict_round_trip_keeps_links(self):
        state = compute_pagination(2, 10, 25).add_link("self", "/a")
        restored = PaginationState.from_dict(state.to_dict())
        assert restored.to_dict() == state.to_dict()


class TestParams:
    def test_limit_takes_precedence_over_per_page(self):
        params = PaginationParams(page=2, limit=5, per_page=50, sort=None)
        assert params.limit == 5
        assert params.offset == 5

    def test_per_page_alias(self):
        assert PaginationParams(page=1, limit=None, per_page=30, sort=None).limit == 30

    def test_defaults_and_clamping(self):
        assert PaginationParams(page=1, limit=None, per_page=None, sort=None).limit == 20
        params = PaginationParams(page=-1, limit=1000, per_page=None, sort=None)
        assert params.page == 1
        assert params.limit == 100

    def test_sort_specs_apply_aliases(self):
        params = PaginationParams(page=1, limit=None, per_page=None, sort="viewCount:asc,id")
        specs = params.sort_specs("createdAt:desc", ["viewCount", "id"], {"viewCount": "view_count"})
        assert [s.actual_field for s in specs] == ["view_count", "id"]
        assert specs[0].is_asc and specs[1].is_desc

    def test_sort_specs_default(self):
        params = PaginationParams(page=1, limit=None, per_page=None, sort=None)
        specs = params.sort_specs("createdAt:desc", [])
        assert specs[0].field == "createdAt"

    def test_state(self):
        state = PaginationParams(page=3, limit=10, per_page=None, sort=None).state(25)
        assert state.current_page == 3
        assert state.to_item == 25
