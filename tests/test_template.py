"""Tests for the identifier template codec."""

import pytest

from machine_registry.services.sequences.exceptions import InvalidTemplate
from machine_registry.services.sequences.template import (
    DecodeStrategy,
    SegmentKind,
    decode,
    encode,
    extract_number,
    match_rendered,
    parse_template,
    swap_category_and_sequence,
)

FULL_TEMPLATE = "{category}-{subcategory}-{sequence}"


class TestParseTemplate:
    def test_segments(self) -> None:
        parsed = parse_template("M-{category}/{sequence}")
        assert [s.kind for s in parsed.segments] == [
            SegmentKind.LITERAL,
            SegmentKind.CATEGORY,
            SegmentKind.LITERAL,
            SegmentKind.SEQUENCE,
        ]
        assert parsed.segments[0].text == "M-"
        assert parsed.segments[2].text == "/"

    @pytest.mark.parametrize("template", ["{sequence}", "{category}", "{subcategory}-{sequence}", "", "PUMP-001"])
    def test_missing_required_placeholder(self, template: str) -> None:
        with pytest.raises(InvalidTemplate):
            parse_template(template)

    def test_unknown_token_is_literal(self) -> None:
        parsed = parse_template("{prefix}-{category}-{sequence}")
        assert parsed.segments[0].kind is SegmentKind.LITERAL
        assert parsed.segments[0].text == "{prefix}-"
        assert encode(parsed.source, "pump", None, 1) == "{prefix}-PUMP-001"


class TestEncode:
    def test_with_subcategory(self) -> None:
        assert encode(FULL_TEMPLATE, "pump", "centrifugal", 7) == "PUMP-CENTRIFUGAL-007"

    def test_without_subcategory_collapses_separators(self) -> None:
        assert encode(FULL_TEMPLATE, "pump", None, 7) == "PUMP-007"
        assert encode(FULL_TEMPLATE, "pump", "", 7) == "PUMP-007"

    def test_strips_leading_hyphen(self) -> None:
        assert encode("{subcategory}-{category}-{sequence}", "pump", None, 12) == "PUMP-012"

    def test_number_is_never_truncated(self) -> None:
        assert encode("{category}-{sequence}", "pump", None, 1234) == "PUMP-1234"

    def test_replaces_every_occurrence(self) -> None:
        assert encode("{category}{sequence}/{sequence}", "pump", None, 5) == "PUMP005/005"

    def test_injective(self) -> None:
        identifiers = {encode(FULL_TEMPLATE, "pump", None, n) for n in range(1, 2000)}
        assert len(identifiers) == 1999


class TestDecode:
    @pytest.mark.parametrize(
        "template, subcategory, number",
        [
            (FULL_TEMPLATE, "centrifugal", 7),
            (FULL_TEMPLATE, None, 42),
            ("{sequence}-{subcategory}-{category}", None, 3),
            ("{sequence}-{category}", None, 1500),
            ("{category}--{sequence}", None, 9),
            ("{category}{sequence}/{sequence}", None, 11),
        ],
    )
    def test_structural_round_trip(self, template: str, subcategory: str | None, number: int) -> None:
        identifier = encode(template, "pump", subcategory, number)
        result = decode(identifier, template, "pump", subcategory)
        assert result is not None
        assert result.number == number
        assert result.strategy is DecodeStrategy.STRUCTURAL

    def test_structural_unknown_subcategory(self) -> None:
        # Subcategory slug not known to the caller
        result = decode("PUMP-CENTRIFUGAL-007", FULL_TEMPLATE, "pump")
        assert result is not None
        assert (result.number, result.strategy) == (7, DecodeStrategy.STRUCTURAL)

    def test_structural_is_case_insensitive(self) -> None:
        result = decode("pump-007", "{category}-{sequence}", "pump")
        assert result is not None
        assert (result.number, result.strategy) == (7, DecodeStrategy.STRUCTURAL)

    def test_padded_fallback(self) -> None:
        result = decode("LEGACY-X-0123", "{category}-{sequence}", "pump")
        assert result is not None
        assert (result.number, result.strategy) == (123, DecodeStrategy.PADDED)

    def test_zero_padded_fallback(self) -> None:
        result = decode("OLD/PUMP/0042", "{category}-{sequence}", "pump")
        assert result is not None
        assert (result.number, result.strategy) == (42, DecodeStrategy.ZERO_PADDED)

    def test_bare_digits_prefers_longer_run(self) -> None:
        result = decode("PUMP-42-V2", "{category}-{sequence}", "pump")
        assert result is not None
        assert (result.number, result.strategy) == (42, DecodeStrategy.BARE_DIGITS)

    def test_bare_digits_single_digit(self) -> None:
        result = decode("PUMP-X7", "{category}-{sequence}", "pump")
        assert result is not None
        assert (result.number, result.strategy) == (7, DecodeStrategy.BARE_DIGITS)

    def test_invalid_old_template_falls_through(self) -> None:
        result = decode("PUMP-007", "no placeholders", "pump")
        assert result is not None
        assert (result.number, result.strategy) == (7, DecodeStrategy.ZERO_PADDED)

    @pytest.mark.parametrize("identifier", ["PUMP-ABC", "", "   "])
    def test_undecodable(self, identifier: str) -> None:
        assert decode(identifier, "{category}-{sequence}", "pump") is None

    def test_extract_number(self) -> None:
        assert extract_number("PUMP-CENTRIFUGAL-015", FULL_TEMPLATE, "pump", "centrifugal") == 15
        assert extract_number("PUMP", FULL_TEMPLATE, "pump") is None

    def test_match_rendered(self) -> None:
        assert match_rendered("1234-PUMP10", "{sequence}-{category}", "pump10") == 1234
        assert match_rendered("007-PUMP-CENTRIFUGAL", "{sequence}-{category}-{subcategory}", "pump", "centrifugal") == 7
        # Digits match but the number is not rendered the way the template would
        assert match_rendered("0007-PUMP", "{sequence}-{category}", "pump") is None
        assert match_rendered("PUMP10-1234", "{sequence}-{category}", "pump10") is None


class TestSwapCategoryAndSequence:
    def test_swaps_when_category_first(self) -> None:
        assert swap_category_and_sequence(FULL_TEMPLATE) == "{sequence}-{subcategory}-{category}"
        assert swap_category_and_sequence("X{category}:{sequence}Y") == "X{sequence}:{category}Y"

    @pytest.mark.parametrize("template", ["{sequence}-{category}", "{sequence}", "PUMP"])
    def test_no_swap_needed(self, template: str) -> None:
        assert swap_category_and_sequence(template) is None
