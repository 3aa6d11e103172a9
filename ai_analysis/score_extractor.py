"""
Score Extractor
===============

Finds the single bounded score (-10..+10) a language model put somewhere in
its answer. Patterns are tried from most to least specific; the first one
whose value parses and is in range wins. A pattern that matches but yields
an out-of-range value (e.g. "評分: 100") is skipped, not terminal.

If nothing matches, score-looking lines are scanned token by token.
The function never raises: absence of a score is 0.
"""

import re
from typing import List, Optional, Pattern, Tuple

from ai_analysis.analysis_config import (
    CATEGORY_PROFILES,
    DEFAULT_SCORE,
    SCORE_LINE_KEYWORDS,
    SCORE_MAX,
    SCORE_MIN,
    SCORE_PATTERNS_HEAD,
    SCORE_PATTERNS_TAIL,
    SCORE_SHORT_LINE_KEYWORDS,
    SCORE_SHORT_LINE_MAX,
    SIGNED_INT_TOKEN,
)
from ai_analysis.models import AnalysisCategory
from utils.logger import setup_logger

logger = setup_logger('score_extractor')

ScoreRule = Tuple[str, Pattern]

_TOKEN_RE = re.compile(SIGNED_INT_TOKEN)


def _build_rules(category: AnalysisCategory) -> List[ScoreRule]:
    profile = CATEGORY_PROFILES[category]
    sources = (
        SCORE_PATTERNS_HEAD
        + [('category_label', profile['category_score_pattern'])]
        + SCORE_PATTERNS_TAIL
    )
    return [(name, re.compile(source, re.IGNORECASE)) for name, source in sources]


# Ordered rule list per category, compiled once
SCORE_RULES = {category: _build_rules(category) for category in AnalysisCategory}


def validate_score(raw) -> Optional[int]:
    """Parse a captured token; None unless it is an integer within range."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    if SCORE_MIN <= value <= SCORE_MAX:
        return value
    return None


def clamp_score(value: int) -> int:
    return max(SCORE_MIN, min(SCORE_MAX, value))


def _match_rules(text: str, rules: List[ScoreRule]) -> Optional[int]:
    for name, pattern in rules:
        match = pattern.search(text)
        if not match:
            continue

        value = validate_score(match.group(1))
        if value is None:
            logger.debug(f"Rule '{name}' matched {match.group(0)!r} but value was rejected")
            continue

        logger.debug(f"Score {value} from rule '{name}': {match.group(0)!r}")
        return value
    return None


def _is_score_line(line: str) -> bool:
    lowered = line.lower()
    if any(keyword in lowered for keyword in SCORE_LINE_KEYWORDS):
        return True
    return len(line) < SCORE_SHORT_LINE_MAX and any(
        keyword in lowered for keyword in SCORE_SHORT_LINE_KEYWORDS
    )


def _scan_lines(text: str) -> Optional[int]:
    for line in text.split('\n'):
        trimmed = line.strip()
        if not trimmed or not _is_score_line(trimmed):
            continue

        for token in _TOKEN_RE.findall(trimmed):
            value = validate_score(token)
            if value is not None:
                logger.debug(f"Score {value} from line scan: {trimmed!r}")
                return value
    return None


def extract_score(text: Optional[str], category=AnalysisCategory.FAVORABILITY) -> int:
    """
    Extract the analysis score from raw model output.

    Args:
        text: Raw response text (None is treated as empty)
        category: AnalysisCategory or 'favorability'/'news'/'risk';
            only selects the category-labelled pattern

    Returns:
        Integer in [-10, 10]; 0 when no score is found
    """
    if not text:
        return DEFAULT_SCORE

    try:
        rules = SCORE_RULES[AnalysisCategory.parse(category)]
    except ValueError:
        logger.warning(f"Unknown analysis category {category!r}, using favorability patterns")
        rules = SCORE_RULES[AnalysisCategory.FAVORABILITY]

    try:
        score = _match_rules(text, rules)
        if score is None:
            score = _scan_lines(text)
    except Exception as e:
        logger.warning(f"Score extraction failed: {e}")
        score = None

    if score is None:
        return DEFAULT_SCORE
    return clamp_score(score)
