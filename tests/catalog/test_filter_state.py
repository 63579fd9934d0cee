"""Tests for the filter state store and serializer."""

import pytest

from storefront.catalog.filter_state import (
    ClearFilters,
    FilterState,
    SetPriceBucket,
    SetSort,
    ToggleAttributeOption,
    ToggleBrand,
    ToggleCategory,
    ToggleColor,
    ToggleSize,
    action_from_payload,
    decode,
    encode,
    from_query_string,
    reduce,
    to_query_string,
)
from storefront.domain.exceptions import UnknownFilterActionError


class TestFilterState:
    """Tests for FilterState."""

    def test_default_state(self) -> None:
        """The empty state has no active filters."""
        state = FilterState()
        assert state.price == "all"
        assert state.sort == "featured"
        assert not state.has_active_filters
        assert state.active_filter_count == 0

    def test_build_normalizes(self) -> None:
        """Blank tokens, empty attribute selections and unknown keys are dropped."""
        state = FilterState.build(
            colors=["Red", ""],
            attributes={"a-2": ["x"], "a-1": ["y", "z"], "a-3": []},
            price="cheap",
            sort="random",
        )
        assert state.colors == frozenset({"Red"})
        assert [attribute_id for attribute_id, _ in state.attributes] == ["a-1", "a-2"]
        assert state.price == "all"
        assert state.sort == "featured"

    def test_active_filter_count_excludes_sort(self) -> None:
        """Every selected value counts, the price bucket counts once, sort never."""
        state = FilterState.build(
            brands=["b1", "b2"],
            sizes=["9"],
            attributes={"a": ["x", "y"]},
            price="0-50",
            sort="newest",
        )
        assert state.active_filter_count == 6

    def test_state_is_hashable(self) -> None:
        """Equal states hash equally."""
        first = FilterState.build(colors=["Red", "Blue"])
        second = FilterState.build(colors=["Blue", "Red"])
        assert first == second
        assert hash(first) == hash(second)

    def test_project(self) -> None:
        """Projection reads the named fields in order."""
        state = FilterState.build(colors=["Red"], sort="newest")
        assert state.project(("sort", "colors")) == ("newest", frozenset({"Red"}))


class TestReduce:
    """Tests for the reducer."""

    def test_toggle_adds_then_removes(self) -> None:
        """Toggling twice returns to the original selection."""
        state = reduce(FilterState(), ToggleColor("Red"))
        assert state.colors == frozenset({"Red"})
        assert reduce(state, ToggleColor("Red")) == FilterState()

    @pytest.mark.parametrize(
        "action,field,value",
        [
            (ToggleCategory("c-1"), "levels", "c-1"),
            (ToggleBrand("b-1"), "brands", "b-1"),
            (ToggleSize("9"), "sizes", "9"),
        ],
    )
    def test_toggles(self, action, field: str, value: str) -> None:
        """Each toggle edits its own field."""
        state = reduce(FilterState(), action)
        assert getattr(state, field) == frozenset({value})

    def test_toggle_attribute_option(self) -> None:
        """Attribute options toggle per attribute; empty selections disappear."""
        state = reduce(FilterState(), ToggleAttributeOption("a-sole", "Foam"))
        state = reduce(state, ToggleAttributeOption("a-sole", "Rubber"))
        assert state.attribute_values("a-sole") == frozenset({"Foam", "Rubber"})

        state = reduce(state, ToggleAttributeOption("a-sole", "Foam"))
        state = reduce(state, ToggleAttributeOption("a-sole", "Rubber"))
        assert state.attributes == ()

    def test_empty_tokens_are_ignored(self) -> None:
        """Toggling an empty value is a no-op returning the same object."""
        state = FilterState.build(colors=["Red"])
        assert reduce(state, ToggleColor("")) is state
        assert reduce(state, ToggleAttributeOption("", "x")) is state
        assert reduce(state, ToggleAttributeOption("a", "")) is state

    def test_no_op_returns_same_object(self) -> None:
        """Setting the current price or sort keeps the state object."""
        state = FilterState()
        assert reduce(state, SetSort("featured")) is state
        assert reduce(state, SetPriceBucket("all")) is state
        assert reduce(state, ClearFilters()) is state

    def test_unknown_keys_fall_back_to_defaults(self) -> None:
        """Unknown price and sort keys reset to the defaults."""
        state = FilterState.build(price="0-50", sort="newest")
        assert reduce(state, SetPriceBucket("cheap")).price == "all"
        assert reduce(state, SetSort("random")).sort == "featured"

    def test_clear_keeps_sort(self) -> None:
        """Clearing drops every selection but keeps the sort order."""
        state = FilterState.build(
            levels=["c"], brands=["b"], colors=["Red"], price="200+", sort="price-high"
        )
        cleared = reduce(state, ClearFilters())
        assert cleared == FilterState(sort="price-high")
        assert not cleared.has_active_filters


class TestActionFromPayload:
    """Tests for building actions from wire names."""

    def test_builds_actions(self) -> None:
        """Wire names map to their action classes."""
        assert action_from_payload("toggle_color", "Red") == ToggleColor("Red")
        assert action_from_payload("set_sort", "newest") == SetSort("newest")
        assert action_from_payload("clear_filters") == ClearFilters()
        assert action_from_payload("toggle_attribute_option", "Foam", "a-sole") == (
            ToggleAttributeOption("a-sole", "Foam")
        )

    def test_unknown_action(self) -> None:
        """Unknown names raise with the allowed names attached."""
        with pytest.raises(UnknownFilterActionError) as exc_info:
            action_from_payload("toggle_everything", "x")
        assert exc_info.value.action_type == "toggle_everything"
        assert "toggle_color" in exc_info.value.details["allowed_actions"]


class TestSerialization:
    """Tests for encode/decode and the query string form."""

    def test_defaults_are_omitted(self) -> None:
        """The empty state serializes to nothing."""
        assert encode(FilterState()) == {}
        assert to_query_string(FilterState()) == ""

    def test_encode_is_canonical(self) -> None:
        """Tokens are sorted so equal states serialize identically."""
        state = FilterState.build(
            colors=["Red", "Blue"],
            attributes={"a-2": ["y"], "a-1": ["x", "w"]},
            sort="newest",
        )
        assert encode(state) == {
            "colors": "Blue,Red",
            "attributes": "a-1:w,x|a-2:y",
            "sort": "newest",
        }

    def test_round_trip_through_query_string(self) -> None:
        """Decoding an encoded state restores it."""
        state = FilterState.build(
            levels=["c-road"],
            brands=["b-nike", "b-acme"],
            colors=["Red"],
            sizes=["9", "10"],
            attributes={"a-sole": ["Foam"]},
            price="100-200",
            sort="price-low",
        )
        assert from_query_string(to_query_string(state)) == state
        assert decode(encode(state)) == state

    def test_round_trip_with_reserved_characters(self) -> None:
        """Values containing separators survive a round trip."""
        state = FilterState.build(
            sizes=["32/34", "W30,L32"],
            attributes={"a:1": ["50% wool", "a|b"]},
        )
        assert from_query_string(to_query_string(state)) == state

    def test_decode_is_tolerant(self) -> None:
        """Malformed keys take their defaults independently."""
        state = decode(
            {
                "colors": "Red,,Blue",
                "attributes": "broken|:x|a-1:|a-2:v",
                "price": "free",
                "sort": "newest",
                "unrelated": "1",
            }
        )
        assert state.colors == frozenset({"Red", "Blue"})
        assert state.attribute_map == {"a-2": frozenset({"v"})}
        assert state.price == "all"
        assert state.sort == "newest"

    def test_last_occurrence_wins(self) -> None:
        """Repeated keys resolve to the last value."""
        state = from_query_string("?sort=newest&sort=price-high")
        assert state.sort == "price-high"
