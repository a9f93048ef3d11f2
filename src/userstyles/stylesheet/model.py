"""Stylesheet model: Predicate, ParsedBlock, RuleBlock and Stylesheet."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from userstyles.injection.base import StyleHandle


class PredicateKind(Enum):
    """The ``@-moz-document`` sub-rule keywords."""

    URL = "url"
    URL_PREFIX = "url-prefix"
    DOMAIN = "domain"
    REGEXP = "regexp"


@dataclass(frozen=True)
class Predicate:
    """A single match condition of a rule block.

    ``pattern`` is only set for ``regexp`` predicates and is compiled when the
    predicate is created, so a bad expression fails at parse time.  Equality
    compares kind and parameter only.
    """

    kind: PredicateKind
    parameter: str
    pattern: re.Pattern[str] | None = field(default=None, compare=False, repr=False)

    @classmethod
    def create(cls, kind: PredicateKind, parameter: str) -> Predicate:
        """Build a predicate, compiling *parameter* for ``regexp`` kinds.

        Raises ``re.error`` if the expression does not compile.
        """
        if kind is PredicateKind.REGEXP:
            return cls(kind=kind, parameter=parameter, pattern=re.compile(parameter))
        return cls(kind=kind, parameter=parameter)

    @classmethod
    def everything(cls) -> Predicate:
        """The catch-all predicate used for unscoped CSS."""
        return cls(kind=PredicateKind.URL_PREFIX, parameter="")

    def matches(self, text: str) -> bool:
        """Return True if the compiled pattern matches anywhere in *text*."""
        if self.pattern is None:
            return False
        return self.pattern.search(text) is not None

    def describe(self) -> str:
        return f"{self.kind.value} {self.parameter}"


@dataclass(frozen=True)
class ParsedBlock:
    """Parser output: OR-combined predicates plus the verbatim CSS body."""

    predicates: tuple[Predicate, ...]
    css: str


@dataclass(frozen=True)
class RuleBlock:
    """A parsed block bound to the injection handle that carries its CSS."""

    predicates: tuple[Predicate, ...]
    css: str
    handle: StyleHandle = field(compare=False, repr=False)

    def release(self) -> None:
        """Clear the handle's CSS and release it, which deactivates it everywhere."""
        self.handle.set_source("")
        self.handle.release()


@dataclass(eq=False)
class Stylesheet:
    """One loaded stylesheet file."""

    file_id: str
    rule_blocks: tuple[RuleBlock, ...]
    enabled: bool = True

    @property
    def predicates(self) -> list[Predicate]:
        """All predicates across blocks, in source order."""
        return [p for block in self.rule_blocks for p in block.predicates]

    def release(self) -> None:
        for block in self.rule_blocks:
            block.release()
