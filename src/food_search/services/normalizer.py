"""Query normalization for external food search."""

import re
from dataclasses import dataclass, field

BRAND_ALIASES: dict[str, str] = {
    "chikfila": "chick-fil-a",
    "chickfila": "chick-fil-a",
    "chick fil a": "chick-fil-a",
    "chik fil a": "chick-fil-a",
    "chic fil a": "chick-fil-a",
    "mcdonalds": "mcdonald's",
    "mc donalds": "mcdonald's",
    "macdonalds": "mcdonald's",
    "mcdonals": "mcdonald's",
    "wendys": "wendy's",
    "arbys": "arby's",
    "reeses": "reese's",
    "dominos": "domino's",
    "papa johns": "papa john's",
    "popeye's": "popeyes",
    "starbuck's": "starbucks",
    "chipolte": "chipotle",
    "kelloggs": "kellogg's",
    "trader joes": "trader joe's",
    "tacobell": "taco bell",
    "burgerking": "burger king",
    "dunkin donuts": "dunkin'",
}

KNOWN_BRANDS: frozenset[str] = frozenset(
    {
        "arby's",
        "burger king",
        "cheerios",
        "chick-fil-a",
        "chipotle",
        "doritos",
        "domino's",
        "dunkin'",
        "five guys",
        "kellogg's",
        "kfc",
        "kirkland",
        "krispy kreme",
        "lay's",
        "mcdonald's",
        "oreo",
        "panera bread",
        "papa john's",
        "popeyes",
        "pringles",
        "quaker",
        "reese's",
        "starbucks",
        "subway",
        "taco bell",
        "trader joe's",
        "wendy's",
    }
)

_WHITESPACE = re.compile(r"\s+")


@dataclass
class QueryNormalizer:
    """Canonicalize raw user input into a search query.

    A ``None`` result means the query is too short to search and no
    request should be issued.
    """

    aliases: dict[str, str] = field(default_factory=lambda: dict(BRAND_ALIASES))
    known_brands: frozenset[str] = KNOWN_BRANDS
    min_length: int = 3

    def __post_init__(self) -> None:
        self._ordered_aliases = sorted(
            self.aliases.items(), key=lambda item: len(item[0]), reverse=True
        )
        self._brand_patterns = [
            re.compile(rf"(?<![\w'-]){re.escape(brand)}(?![\w'-])")
            for brand in sorted(self.known_brands, key=len, reverse=True)
        ]

    def normalize(self, raw: str) -> str | None:
        """Return the normalized query, or None when it is too short."""
        normalized = _WHITESPACE.sub(" ", raw.strip().lower())
        normalized = self._apply_alias(normalized)
        if len(normalized) < self.min_length:
            return None

        if (
            not self.contains_known_brand(normalized)
            and len(normalized) > self.min_length
            and normalized.endswith("s")
            and not normalized.endswith("ss")
            and not normalized.endswith(" s")
            and len(normalized) - 1 >= self.min_length
        ):
            normalized = normalized[:-1]
        return normalized

    def contains_known_brand(self, query: str) -> bool:
        """Return True if the query mentions a known brand name."""
        lowered = query.lower()
        return any(pattern.search(lowered) for pattern in self._brand_patterns)

    def _apply_alias(self, query: str) -> str:
        """Replace the first (longest) alias found; never chains."""
        for alias, canonical in self._ordered_aliases:
            if alias in query:
                return query.replace(alias, canonical, 1)
        return query
