"""Label-anchored field extraction from resolved dashboard islands.

The dashboard has no stable schema. Values are found by locating an element
whose text contains a known caption, then reading the value relative to it:

    <p class="h3">3,5</p>
    <p>Zbývá dat (GB)</p>            -> value in the sibling before the label

    <p>Balíček: <strong>5G</strong></p>  -> value nested in the label

Each field is declared once as a FieldQuery so that the lookup rules are
testable without the network.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from bs4 import Tag

_LOGGER = logging.getLogger(__name__)


class ValueLocation(str, Enum):
    """Where a field value sits relative to its label element."""

    SELF_TEXT = "self_text"
    SIBLING_BEFORE = "sibling_before"
    NESTED_DESCENDANT = "nested_descendant"


def find_labeled_element(root: Tag | None, selector: str, pattern: str) -> Tag | None:
    """Find the first element matching selector whose text contains pattern.

    Matching is a case-insensitive substring test against the element's
    flattened text. A missing root yields None so lookups can be chained.

    Args:
        root: Element to search under (may be None)
        selector: CSS selector for candidate elements
        pattern: Substring to look for in the element text

    Returns:
        First matching element in document order, or None
    """
    if root is None:
        return None

    needle = pattern.casefold()
    for el in root.select(selector):
        if needle in el.get_text().casefold():
            return el
    return None


def text_before_label(label: Tag | None) -> str | None:
    """Return the text of the element immediately preceding label."""
    if label is None:
        return None
    sibling = label.find_previous_sibling(True)
    return sibling.get_text() if sibling is not None else None


def text_nested_in_label(label: Tag | None, selector: str = "strong") -> str | None:
    """Return the text of the first descendant of label matching selector."""
    if label is None:
        return None
    nested = label.select_one(selector)
    return nested.get_text() if nested is not None else None


@dataclass(frozen=True)
class FieldQuery:
    """Declared extraction rule for one status field.

    Attributes:
        name: Field name used in logs and errors (e.g., "tariff.gigs_left")
        selector: CSS selector for label candidates
        label: Case-insensitive substring identifying the label
        location: Where the value sits relative to the label
        nested_selector: Descendant selector for NESTED_DESCENDANT
    """

    name: str
    selector: str
    label: str
    location: ValueLocation = ValueLocation.SELF_TEXT
    nested_selector: str = "strong"

    def find(self, root: Tag | None) -> Tag | None:
        """Locate the label element under root."""
        return find_labeled_element(root, self.selector, self.label)

    def present(self, root: Tag | None) -> bool:
        """Return True if the label element exists under root."""
        return self.find(root) is not None

    def extract(self, root: Tag | None) -> str:
        """Return the field text, or "" when the label or value is missing.

        An empty result is meant to fail in the normalizer with a
        field-level error.
        """
        label = self.find(root)
        if self.location is ValueLocation.SIBLING_BEFORE:
            value = text_before_label(label)
        elif self.location is ValueLocation.NESTED_DESCENDANT:
            value = text_nested_in_label(label, self.nested_selector)
        else:
            value = label.get_text() if label is not None else None

        if value is None:
            _LOGGER.debug(
                "Field %s not found (selector=%s, label=%r, location=%s)",
                self.name,
                self.selector,
                self.label,
                self.location.value,
            )
            return ""
        return value.strip()
