"""Template codec for machine identifiers.

A template such as ``"{category}-{subcategory}-{sequence}"`` is parsed once
into typed segments and rendered into identifiers like ``"PUMP-CENTRIFUGAL-007"``.

Decoding goes the other way: given an identifier produced by some earlier
template, recover the number embedded in it. Identifiers in the wild were
produced by many template versions, so decoding tries an ordered list of
strategies and the first one that yields a number wins:

1. STRUCTURAL  - rebuild a regex from the old template and match the whole identifier
2. PADDED      - first zero-padded number with at least 3 significant digits ("0+[1-9]\\d{2,}")
3. ZERO_PADDED - first zero-padded number of any length ("0+\\d+")
4. BARE_DIGITS - last digit run of length >= 2, else the last digit run

Known limitation: when literal separators or slugs themselves contain digits
next to the sequence field, structural matching can be ambiguous and the
result is best-effort.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

import structlog

from machine_registry.services.sequences.exceptions import InvalidTemplate

logger = structlog.get_logger(__name__)

SEQUENCE_WIDTH = 3

_TOKEN_RE = re.compile(r"\{(category|subcategory|sequence)\}")
_HYPHEN_RUN_RE = re.compile(r"-{2,}")
_HYPHEN_SPLIT_RE = re.compile(r"-+")

_PADDED_RE = re.compile(r"\b0+([1-9]\d{2,})\b")
_ZERO_PADDED_RE = re.compile(r"\b0+(\d+)\b")
_DIGIT_RUN_RE = re.compile(r"\d+")

# Stand-in for a subcategory slug we cannot know (lazy, so {sequence} keeps its digits)
_ANY_SLUG_PATTERN = "[A-Z0-9-]*?"


class SegmentKind(StrEnum):
    """Kind of a parsed template segment."""

    LITERAL = "literal"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class Segment:
    """One piece of a parsed template. ``text`` is only set for literals."""

    kind: SegmentKind
    text: str = ""


@dataclass(frozen=True)
class ParsedTemplate:
    """Template split into literal and placeholder segments."""

    source: str
    segments: tuple[Segment, ...]

    def has(self, kind: SegmentKind) -> bool:
        return any(segment.kind is kind for segment in self.segments)


@lru_cache(maxsize=256)
def parse_template(template: str) -> ParsedTemplate:
    """Parse a template into segments.

    Raises:
        InvalidTemplate: If ``{category}`` or ``{sequence}`` is missing.
    """
    segments: list[Segment] = []
    position = 0
    for match in _TOKEN_RE.finditer(template):
        if match.start() > position:
            segments.append(Segment(SegmentKind.LITERAL, template[position : match.start()]))
        segments.append(Segment(SegmentKind(match.group(1))))
        position = match.end()
    if position < len(template):
        segments.append(Segment(SegmentKind.LITERAL, template[position:]))

    parsed = ParsedTemplate(source=template, segments=tuple(segments))
    if not parsed.has(SegmentKind.CATEGORY) or not parsed.has(SegmentKind.SEQUENCE):
        raise InvalidTemplate()
    return parsed


def validate_template(template: str) -> str:
    """Return the template unchanged if it parses, raise InvalidTemplate otherwise."""
    parse_template(template)
    return template


def format_number(number: int) -> str:
    """Render a sequence number zero-padded to SEQUENCE_WIDTH (never truncated)."""
    return str(number).zfill(SEQUENCE_WIDTH)


def clean_identifier(value: str) -> str:
    """Collapse hyphen runs and strip a leading/trailing hyphen.

    An absent subcategory leaves an empty segment which would otherwise
    produce "PUMP--007".
    """
    value = _HYPHEN_RUN_RE.sub("-", value.strip())
    return value.removeprefix("-").removesuffix("-")


def encode(template: str, category_slug: str, subcategory_slug: str | None, number: int) -> str:
    """Render an identifier for ``number`` within a category/subcategory scope."""
    parsed = parse_template(template)
    values = {
        SegmentKind.CATEGORY: category_slug.upper(),
        SegmentKind.SUBCATEGORY: (subcategory_slug or "").upper(),
        SegmentKind.SEQUENCE: format_number(number),
    }
    rendered = "".join(
        segment.text if segment.kind is SegmentKind.LITERAL else values[segment.kind] for segment in parsed.segments
    )
    return clean_identifier(rendered)


# =============================================================================
# Decoding
# =============================================================================


class DecodeStrategy(StrEnum):
    """Decode strategies in priority order."""

    STRUCTURAL = "structural"
    PADDED = "padded"
    ZERO_PADDED = "zero_padded"
    BARE_DIGITS = "bare_digits"


@dataclass(frozen=True)
class DecodeContext:
    """What is known about how an identifier was produced."""

    template: str
    category_slug: str
    subcategory_slug: str | None = None


@dataclass(frozen=True)
class DecodeResult:
    """Number recovered from an identifier and the strategy that found it."""

    number: int
    strategy: DecodeStrategy


def _literal_pattern(text: str) -> str:
    # Hyphens may have been collapsed or stripped by clean_identifier()
    return "-*".join(re.escape(part) for part in _HYPHEN_SPLIT_RE.split(text))


def build_structural_pattern(template: str, category_slug: str, subcategory_slug: str | None) -> re.Pattern[str]:
    """Build an anchored, case-insensitive regex matching identifiers rendered by ``template``.

    The first ``{sequence}`` becomes the named group ``sequence``; repeats must
    match the same digits.
    """
    parsed = parse_template(template)
    parts: list[str] = []
    sequence_seen = False
    for segment in parsed.segments:
        if segment.kind is SegmentKind.LITERAL:
            parts.append(_literal_pattern(segment.text))
        elif segment.kind is SegmentKind.CATEGORY:
            parts.append(re.escape(category_slug.upper()))
        elif segment.kind is SegmentKind.SUBCATEGORY:
            parts.append(re.escape(subcategory_slug.upper()) if subcategory_slug else _ANY_SLUG_PATTERN)
        elif sequence_seen:
            parts.append("(?P=sequence)")
        else:
            parts.append(r"(?P<sequence>\d+)")
            sequence_seen = True
    return re.compile("^" + "".join(parts) + "$", re.IGNORECASE)


def decode_structural(identifier: str, context: DecodeContext) -> int | None:
    try:
        pattern = build_structural_pattern(context.template, context.category_slug, context.subcategory_slug)
        match = pattern.match(identifier)
        if match is None:
            return None
        return int(match.group("sequence"))
    except Exception as exc:
        # Historical templates may be malformed; fall through to the heuristics
        logger.debug("Structural decode failed", identifier=identifier, template=context.template, error=str(exc))
        return None


def decode_padded(identifier: str, context: DecodeContext) -> int | None:
    match = _PADDED_RE.search(identifier)
    return int(match.group(1)) if match else None


def decode_zero_padded(identifier: str, context: DecodeContext) -> int | None:
    match = _ZERO_PADDED_RE.search(identifier)
    return int(match.group(1)) if match else None


def decode_bare_digits(identifier: str, context: DecodeContext) -> int | None:
    runs = _DIGIT_RUN_RE.findall(identifier)
    if not runs:
        return None
    # Longer runs are more likely the sequence than short codes like "V2"
    long_runs = [run for run in runs if len(run) >= 2]
    return int((long_runs or runs)[-1])


DecodeFn = Callable[[str, DecodeContext], int | None]

DECODE_STRATEGIES: tuple[tuple[DecodeStrategy, DecodeFn], ...] = (
    (DecodeStrategy.STRUCTURAL, decode_structural),
    (DecodeStrategy.PADDED, decode_padded),
    (DecodeStrategy.ZERO_PADDED, decode_zero_padded),
    (DecodeStrategy.BARE_DIGITS, decode_bare_digits),
)


def decode(
    identifier: str,
    old_template: str,
    category_slug: str,
    subcategory_slug: str | None = None,
) -> DecodeResult | None:
    """Recover the sequence number from an identifier.

    Returns None when no strategy finds a number; callers treat that as a
    per-item skip, never a hard failure.
    """
    identifier = identifier.strip()
    if not identifier:
        return None

    context = DecodeContext(
        template=old_template,
        category_slug=category_slug,
        subcategory_slug=subcategory_slug or None,
    )
    for strategy, decode_fn in DECODE_STRATEGIES:
        number = decode_fn(identifier, context)
        if number is not None:
            return DecodeResult(number=number, strategy=strategy)
    return None


def match_rendered(
    identifier: str,
    template: str,
    category_slug: str,
    subcategory_slug: str | None = None,
) -> int | None:
    """Return the number if ``identifier`` is exactly what ``template`` renders for it.

    Unlike decode(), no heuristics are tried: the identifier must match the
    template structurally and re-encode to the same string.
    """
    identifier = identifier.strip()
    context = DecodeContext(template=template, category_slug=category_slug, subcategory_slug=subcategory_slug or None)
    number = decode_structural(identifier, context)
    if number is None or encode(template, category_slug, subcategory_slug, number) != identifier:
        return None
    return number


def extract_number(
    identifier: str,
    old_template: str,
    category_slug: str,
    subcategory_slug: str | None = None,
) -> int | None:
    result = decode(identifier, old_template, category_slug, subcategory_slug)
    return result.number if result else None


def swap_category_and_sequence(template: str) -> str | None:
    """Move ``{sequence}`` to where ``{category}`` is and vice versa.

    Only applies to templates where the category comes first, e.g.
    ``"{category}-{subcategory}-{sequence}"`` -> ``"{sequence}-{subcategory}-{category}"``.
    Returns None when the template does not need swapping.
    """
    category_at = template.find("{category}")
    sequence_at = template.find("{sequence}")
    if category_at < 0 or sequence_at < 0 or category_at > sequence_at:
        return None

    before = template[:category_at]
    between = template[category_at + len("{category}") : sequence_at]
    after = template[sequence_at + len("{sequence}") :]
    return f"{before}{{sequence}}{between}{{category}}{after}"
