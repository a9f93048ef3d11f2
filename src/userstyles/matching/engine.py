"""Match engine: decides which rule blocks apply to a page address.

Every evaluation covers all blocks of all stylesheets and the result is
pushed to every handle, active or not.  Handles treat repeated activation as
a no-op, so there is no diffing against previous state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable

from userstyles.matching.domains import PageAddress
from userstyles.stylesheet.model import ParsedBlock, Predicate, PredicateKind, RuleBlock, Stylesheet

if TYPE_CHECKING:
    from userstyles.views import PageView

__all__ = ["Activation", "applies", "apply_to_view", "evaluate", "predicate_matches"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Activation:
    """Evaluation result for one rule block."""

    stylesheet: Stylesheet
    block: RuleBlock
    active: bool


def predicate_matches(predicate: Predicate, address: PageAddress) -> bool:
    """Return True if a single predicate matches *address*."""
    kind = predicate.kind
    if kind is PredicateKind.URL:
        return address.uri == predicate.parameter
    if kind is PredicateKind.URL_PREFIX:
        return address.uri.startswith(predicate.parameter)
    if kind is PredicateKind.REGEXP:
        return predicate.matches(address.uri)
    if kind is PredicateKind.DOMAIN:
        return predicate.parameter in address.domains
    raise ValueError(f"Unknown predicate kind: {kind!r}")


def applies(block: RuleBlock | ParsedBlock, address: PageAddress) -> bool:
    """Return True if any predicate of *block* matches.

    A block without predicates never matches.
    """
    return any(predicate_matches(p, address) for p in block.predicates)


def evaluate(
    stylesheets: Iterable[Stylesheet],
    address: PageAddress,
    global_enabled: bool = True,
) -> list[Activation]:
    """Compute the activation of every rule block for *address*."""
    activations: list[Activation] = []
    for stylesheet in stylesheets:
        for block in stylesheet.rule_blocks:
            active = global_enabled and stylesheet.enabled and applies(block, address)
            activations.append(Activation(stylesheet=stylesheet, block=block, active=active))
    return activations


def apply_to_view(view: PageView, stylesheets: Iterable[Stylesheet]) -> list[Activation]:
    """Evaluate *stylesheets* for *view* and push the result to every handle."""
    address = PageAddress.from_uri(view.uri)
    activations = evaluate(stylesheets, address, global_enabled=view.enable_styles())
    for activation in activations:
        if activation.active:
            activation.block.handle.activate(view.view_id)
        else:
            activation.block.handle.deactivate(view.view_id)
    logger.debug(
        "Applied %d/%d rule blocks to view %s (%s)",
        sum(1 for a in activations if a.active),
        len(activations),
        view.view_id,
        address.uri or "<blank>",
    )
    return activations
