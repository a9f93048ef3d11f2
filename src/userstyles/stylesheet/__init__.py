from userstyles.stylesheet.errors import (
    LegacyFormatRejected,
    MalformedSection,
    StylesheetError,
)
from userstyles.stylesheet.model import (
    ParsedBlock,
    Predicate,
    PredicateKind,
    RuleBlock,
    Stylesheet,
)
from userstyles.stylesheet.parser import format_predicates, parse_stylesheet

__all__ = [
    "LegacyFormatRejected",
    "MalformedSection",
    "ParsedBlock",
    "Predicate",
    "PredicateKind",
    "RuleBlock",
    "Stylesheet",
    "StylesheetError",
    "format_predicates",
    "parse_stylesheet",
]
