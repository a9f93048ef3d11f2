from userstyles.matching.domains import PageAddress, domain_of, domain_suffixes
from userstyles.matching.engine import (
    Activation,
    applies,
    apply_to_view,
    evaluate,
    predicate_matches,
)

__all__ = [
    "Activation",
    "PageAddress",
    "applies",
    "apply_to_view",
    "domain_of",
    "domain_suffixes",
    "evaluate",
    "predicate_matches",
]
