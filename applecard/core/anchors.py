"""
Anchor finding in the statement line stream using fuzzy matching.
"""
from typing import List, Optional
from rapidfuzz import fuzz
import logging

logger = logging.getLogger(__name__)


class AnchorMatch:
    """Represents a found anchor with its line position and confidence."""
    def __init__(self, line_number: int, text: str, confidence: float, target: str):
        self.line_number = line_number
        self.text = text
        self.confidence = confidence
        self.target = target

    def __repr__(self):
        return (f"AnchorMatch('{self.target}', line={self.line_number}, "
                f"confidence={self.confidence:.1f}, text='{self.text}')")


def find_anchor(lines: List[str], target: str, fuzzy_threshold: float = 85) -> Optional[AnchorMatch]:
    """
    Find the line that best matches an anchor text.

    Args:
        lines: Statement lines to search through
        target: Target text to find
        fuzzy_threshold: Minimum confidence score (0-100)

    Returns:
        AnchorMatch if found, None otherwise
    """
    best_match = None
    best_confidence = 0
    target_lower = target.lower()

    for i, line in enumerate(lines, 1):
        text = line.strip()
        if not text:
            continue

        # Try exact match first
        if text.lower() == target_lower:
            return AnchorMatch(i, line, 100.0, target)

        confidence = fuzz.ratio(text.lower(), target_lower)

        if confidence > best_confidence and confidence >= fuzzy_threshold:
            best_confidence = confidence
            best_match = AnchorMatch(i, line, confidence, target)

    return best_match


def find_anchors(lines: List[str], targets: List[str], fuzzy_threshold: float = 85) -> List[AnchorMatch]:
    """
    Find every anchor that is present in the lines.

    Args:
        lines: Statement lines to search through
        targets: Anchor texts to find
        fuzzy_threshold: Minimum confidence score (0-100)

    Returns:
        Matches for the anchors that were found, in target order
    """
    found = []
    for target in targets:
        match = find_anchor(lines, target, fuzzy_threshold)
        if match:
            logger.debug(f"Found anchor: {match}")
            found.append(match)
        else:
            logger.debug(f"Anchor not found: '{target}'")
    return found
