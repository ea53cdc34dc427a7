"""
Web-style full-text query parsing.

Supported syntax, loosely following search-engine conventions:

- ``arduino uno``      both words must appear (AND)
- ``"uno r3"``         the words must appear consecutively
- ``sensor or relay``  either word may appear
- ``arduino -nano``    exclude rows containing ``nano``

Words are matched at word starts against a normalized index text, so
``ardu`` matches ``arduino`` but ``uino`` does not. Common stop words are
dropped from unquoted input.
"""

import re
from dataclasses import dataclass, field

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "for", "from", "in",
    "is", "it", "of", "on", "the", "to", "with",
})

_TOKEN_RE = re.compile(r'(-?)"([^"]*)"?|(\S+)')
_NON_WORD_RE = re.compile(r"[^\w]+", re.UNICODE)


def normalize_words(text: str) -> list[str]:
    """Lower-case and split on anything that is not a word character."""
    return [w for w in _NON_WORD_RE.split((text or "").lower()) if w]


def index_text(*fields: str) -> str:
    """Space-padded word sequence stored for full-text matching."""
    words = []
    for value in fields:
        words.extend(normalize_words(value or ""))
    return f" {' '.join(words)} " if words else ""


@dataclass(frozen=True)
class Term:
    """A word, or a phrase of consecutive words."""
    words: tuple[str, ...]


@dataclass
class Clause:
    """Alternatives joined by OR; the clause itself is AND-ed with the others."""
    alternatives: list[Term] = field(default_factory=list)
    negated: bool = False


@dataclass
class TextQuery:
    clauses: list[Clause] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when nothing positive is left to match."""
        return not any(not c.negated for c in self.clauses)


def parse_websearch(query: str) -> TextQuery:
    """Parse user input into AND-ed clauses of OR-ed terms."""
    parsed = TextQuery()
    pending_or = False

    for match in _TOKEN_RE.finditer(query or ""):
        quote_neg, phrase, bare = match.groups()
        if phrase is not None:
            negated = bool(quote_neg)
            words = normalize_words(phrase)
        else:
            if bare.lower() == "or":
                pending_or = bool(parsed.clauses)
                continue
            negated = bare.startswith("-") and len(bare) > 1
            words = normalize_words(bare[1:] if negated else bare)
            words = [w for w in words if w not in STOP_WORDS]

        if not words:
            continue

        term = Term(tuple(words))
        last = parsed.clauses[-1] if parsed.clauses else None
        if pending_or and last is not None and not last.negated and not negated:
            last.alternatives.append(term)
        else:
            parsed.clauses.append(Clause(alternatives=[term], negated=negated))
        pending_or = False

    return parsed
