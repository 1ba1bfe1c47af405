import pytest

from app.core.sorting import SortSpec


class TestParsing:
    def test_field_and_direction(self):
        spec = SortSpec.from_string("name:asc")
        assert spec.field == "name"
        assert spec.direction == "asc"
        assert spec.to_dict()["direction"] == "asc"

    def test_default_direction_is_desc(self):
        assert SortSpec.from_string("name").direction == "desc"

    @pytest.mark.parametrize("raw", ["ASC", " Asc "])
    def test_direction_case_insensitive(self, raw):
        assert SortSpec.from_string(f"name:{raw}").is_asc

    @pytest.mark.parametrize("raw", ["up", "", "descending"])
    def test_unknown_direction_falls_back_to_desc(self, raw):
        assert SortSpec.from_string(f"name:{raw}").direction == "desc"

    def test_splits_on_first_colon_only(self):
        spec = SortSpec.from_string("name:asc:extra")
        assert spec.field == "name"
        assert spec.direction == "desc"

    def test_trims_field(self):
        assert SortSpec.from_string("  name  :asc").field == "name"

    def test_parse_many_assigns_priorities(self):
        specs = SortSpec.parse_many("status:asc, createdAt ,")
        assert [(s.field, s.priority) for s in specs] == [("status", 0), ("createdAt", 1)]


class TestValidity:
    def test_empty_allow_list_accepts_anything(self):
        assert SortSpec("anything").is_field_valid()

    def test_allow_list(self):
        assert SortSpec("name", available_fields=["name"]).is_field_valid()
        assert not SortSpec("secret", available_fields=["name"]).is_field_valid()

    def test_alias_in_allow_list(self):
        spec = SortSpec("viewCount", available_fields=["view_count"], alias="view_count")
        assert spec.is_field_valid()
        assert spec.actual_field == "view_count"

    def test_validate_reports_errors(self):
        assert SortSpec("", available_fields=[]).validate() == {"field": "Sort field must not be empty"}
        assert "field" in SortSpec("x", available_fields=["y"]).validate()
        assert SortSpec("y", available_fields=["y"]).validate() == {}


class TestOutput:
    def test_query_string_uses_alias(self):
        spec = SortSpec("viewCount", "asc", alias="view_count")
        assert spec.to_query_string() == "view_count ASC"
        assert str(spec) == "view_count ASC"

    def test_custom_expression_used_verbatim(self):
        spec = SortSpec("x", custom=True, alias="LENGTH(name) DESC")
        assert spec.to_query_string() == "LENGTH(name) DESC"

    def test_summary_description(self):
        assert SortSpec.asc("name").summary()["description"] == "Sort by name ascending"
        assert SortSpec("name", description="By name").summary()["description"] == "By name"

    def test_from_dict(self):
        spec = SortSpec.from_dict(
            {"field": "name", "direction": "ASC", "priority": 2, "alias": " title ", "availableFields": ["title", 3]}
        )
        assert spec.direction == "asc"
        assert spec.alias == "title"
        assert spec.available_fields == ["title"]


class TestCopies:
    def test_reversed(self):
        spec = SortSpec.asc("name")
        assert spec.reversed().is_desc
        assert spec.is_asc

    def test_with_priority_clamps(self):
        assert SortSpec("a").with_priority(-3).priority == 0

    def test_copies_do_not_share_allow_list(self):
        spec = SortSpec("a", available_fields=["a"])
        clone = spec.with_field("b")
        clone.available_fields.append("b")
        assert spec.available_fields == ["a"]
