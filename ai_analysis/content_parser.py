"""
Structured Content Parser
=========================

Turns a free-form model answer into an AnalysisRecord:

1. score via the score extractor
2. tagged sections (【正面因素】 ... up to the next known header), with a
   looser "正面因素: ..." form tried when the bracketed one yields nothing
3. item lists inside each section (numbered, bulleted or short plain lines)
4. recommendation block
5. if no section produced an item: keyword classification of every line,
   then fixed per-category defaults for any list still empty, plus the
   synthetic score details

Parsing never raises. Any unexpected error yields a minimal record.
"""

import re
from typing import Dict, List, Optional, Tuple

from ai_analysis.analysis_config import (
    BULLET_ITEM_PATTERN,
    COLONS,
    COMMON_TERMINATOR_HEADERS,
    DEFAULT_SCORE,
    ELLIPSIS,
    HEADER_ENDINGS,
    HEDGE_CUES,
    MAX_IMPLICIT_LENGTH,
    MAX_ITEMS,
    MAX_RECOMMENDATION_LENGTH,
    MIN_FALLBACK_LINE_LENGTH,
    MIN_ITEM_LENGTH,
    NUMBERED_ITEM_PATTERN,
    PLACEHOLDER_FACTOR,
    SCORE_LINE_START,
    CATEGORY_PROFILES,
    secondary_list,
)
from ai_analysis.models import AnalysisCategory, AnalysisRecord, ScoreDetail
from ai_analysis.score_extractor import clamp_score, extract_score
from utils.logger import setup_logger

logger = setup_logger('content_parser')

_NUMBERED_RE = re.compile(NUMBERED_ITEM_PATTERN)
_BULLET_RE = re.compile(BULLET_ITEM_PATTERN)


def _alternation(labels) -> str:
    return '|'.join(re.escape(label) for label in labels)


def _build_patterns(profile: dict) -> Dict[str, object]:
    """Compile the section and recommendation patterns for one category."""
    all_section_labels = [label for labels in profile['sections'].values() for label in labels]
    terminators = _alternation(
        all_section_labels
        + list(profile['recommendation_headers'])
        + list(COMMON_TERMINATOR_HEADERS)
    )

    sections = {}
    for list_name, labels in profile['sections'].items():
        names = _alternation(labels)
        sections[list_name] = (
            re.compile(
                rf'【(?:{names})】([\s\S]*?)(?=【(?:{terminators})】|\n\s*【[^】\n]*】|\Z)',
                re.IGNORECASE,
            ),
            re.compile(
                rf'(?:{names})\s*[：:]([\s\S]*?)(?=\n\s*\n|\n\s*(?:{terminators})\s*[：:]|\n\s*【|\Z)',
                re.IGNORECASE,
            ),
        )

    advice = _alternation(profile['recommendation_headers'])
    recommendation = (
        re.compile(
            rf'【(?:{advice})】\s*([\s\S]*?)(?=\n\s*\n|\n\s*{SCORE_LINE_START}|【|\Z)',
            re.IGNORECASE,
        ),
        re.compile(
            rf'(?:{advice})\s*[：:]\s*([\s\S]*?)(?=\n\s*\n|\n\s*{SCORE_LINE_START}|\Z)',
            re.IGNORECASE,
        ),
    )
    return {'sections': sections, 'recommendation': recommendation}


PATTERNS = {category: _build_patterns(profile) for category, profile in CATEGORY_PROFILES.items()}


# ==================== ITEMS ====================

def _strip_markup(line: str) -> str:
    return line.replace('**', '').strip()


def _marked_item(line: str) -> Optional[str]:
    """Content of a numbered or bulleted line, else None."""
    match = _NUMBERED_RE.match(line) or _BULLET_RE.match(line)
    if match:
        return match.group(1).strip()
    return None


def extract_items(text: Optional[str], limit: int = MAX_ITEMS) -> List[str]:
    """
    Extract list items from a section body, in document order.

    Numbered ("1.", "1、", "(1)", "①", "一、") and bulleted ("•", "-", "*")
    lines are items. Any other line of 4-99 characters without a colon is
    taken as an implicit item.
    """
    if not text:
        return []

    items = []
    for line in text.split('\n'):
        trimmed = _strip_markup(line)
        if not trimmed or trimmed.startswith('【'):
            continue

        item = _marked_item(trimmed)
        if item is None:
            if MIN_ITEM_LENGTH <= len(trimmed) <= MAX_IMPLICIT_LENGTH and not any(c in trimmed for c in COLONS):
                item = trimmed
        elif len(item) < MIN_ITEM_LENGTH:
            item = None
        else:
            item = truncate(item, MAX_IMPLICIT_LENGTH)

        if item:
            items.append(item)
            if len(items) >= limit:
                break
    return items


# ==================== SECTIONS ====================

def extract_section(text: str, category: AnalysisCategory, list_name: str) -> List[str]:
    """Items of one tagged section, trying the bracketed header then the loose form."""
    tagged, loose = PATTERNS[category]['sections'][list_name]

    items = []
    match = tagged.search(text)
    if match:
        items = extract_items(match.group(1))

    if not items:
        match = loose.search(text)
        if match:
            items = extract_items(match.group(1))

    if items:
        logger.debug(f"Section '{list_name}' ({category.value}): {len(items)} items")
    return items


def truncate(text: str, limit: int = MAX_RECOMMENDATION_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - len(ELLIPSIS)] + ELLIPSIS


def extract_recommendation(text: str, category: AnalysisCategory) -> str:
    """Recommendation block text (≤100 chars), or '' when absent."""
    for pattern in PATTERNS[category]['recommendation']:
        match = pattern.search(text)
        if not match:
            continue
        lines = [_strip_markup(line) for line in match.group(1).split('\n')]
        body = '\n'.join(line for line in lines if line)
        if body:
            return truncate(body)
    return ''


# ==================== FALLBACK ====================

def _mentions(lowered: str, keywords) -> bool:
    """True if any keyword occurs without a hedge cue right after it."""
    for keyword in keywords:
        start = lowered.find(keyword)
        while start != -1:
            rest = lowered[start + len(keyword):].lstrip()
            if not rest.startswith(HEDGE_CUES):
                return True
            start = lowered.find(keyword, start + 1)
    return False


def _is_label(line: str, keywords) -> bool:
    """Header-like lines ("【風險】", "正面因素：") or a bare keyword."""
    return line.startswith('【') or line.endswith(HEADER_ENDINGS) or line.lower() in keywords


def classify_lines(text: str, category: AnalysisCategory) -> Tuple[List[str], List[str], str]:
    """
    Keyword classification used when no section could be extracted.

    Returns:
        (positives, negatives, recommendation line)
    """
    profile = CATEGORY_PROFILES[category]
    buckets = {'positives': [], 'negatives': []}
    recommendation = ''

    for line in text.split('\n'):
        stripped = _strip_markup(line)
        if not stripped:
            continue
        lowered = stripped.lower()

        for list_name in profile['keyword_order']:
            keywords = profile['keywords'][list_name]
            if not _mentions(lowered, keywords):
                continue
            if len(stripped) >= MIN_FALLBACK_LINE_LENGTH and not _is_label(stripped, keywords):
                item = _marked_item(stripped) or stripped
                if len(item) >= MIN_ITEM_LENGTH:
                    buckets[list_name].append(truncate(item, MAX_IMPLICIT_LENGTH))
            break
        else:
            if _mentions(lowered, profile['recommendation_keywords']):
                recommendation = truncate(stripped)

    return buckets['positives'][:MAX_ITEMS], buckets['negatives'][:MAX_ITEMS], recommendation


def build_score_details(
    positives: List[str],
    negatives: List[str],
    category: AnalysisCategory
) -> List[ScoreDetail]:
    """
    Fixed point deltas for the first two items of each list, primary list first.
    A placeholder attribution, not a computed one.
    """
    profile = CATEGORY_PROFILES[category]
    lists = {'positives': positives, 'negatives': negatives}

    details = []
    for list_name in (profile['primary'], secondary_list(profile)):
        label = profile['detail_labels'][list_name]
        deltas = profile['detail_deltas'][list_name]
        for index, (item, delta) in enumerate(zip(lists[list_name], deltas), start=1):
            details.append(ScoreDetail(label=f"{label} {index}", delta=delta, reason=item))
    return details


# ==================== ENTRY POINT ====================

def _minimal_record(category: AnalysisCategory, content: str) -> AnalysisRecord:
    primary = CATEGORY_PROFILES[category]['primary']
    placeholder = (PLACEHOLDER_FACTOR,)
    return AnalysisRecord(
        category=category,
        score=DEFAULT_SCORE,
        positives=placeholder if primary == 'positives' else (),
        negatives=placeholder if primary == 'negatives' else (),
        structured=False,
        raw_content=content,
    )


def _parse(content: str, category: AnalysisCategory, external_score: Optional[int]) -> AnalysisRecord:
    profile = CATEGORY_PROFILES[category]

    score = extract_score(content, category)
    if score == 0 and external_score:
        score = clamp_score(int(external_score))

    positives = extract_section(content, category, 'positives')
    negatives = extract_section(content, category, 'negatives')
    recommendation = extract_recommendation(content, category)
    structured = bool(positives or negatives)

    details: List[ScoreDetail] = []
    if not structured:
        logger.info(f"No tagged sections in {category.value} response, classifying lines by keyword")
        positives, negatives, keyword_advice = classify_lines(content, category)
        recommendation = recommendation or keyword_advice

        if not positives:
            positives = list(profile['defaults']['positives'])
        if not negatives:
            negatives = list(profile['defaults']['negatives'])
        details = build_score_details(positives, negatives, category)

    return AnalysisRecord(
        category=category,
        score=score,
        positives=tuple(positives),
        negatives=tuple(negatives),
        recommendation=recommendation,
        structured=structured,
        raw_content=content,
        score_details=tuple(details),
    )


def parse_analysis(
    text: Optional[str],
    category=AnalysisCategory.FAVORABILITY,
    subject_label: str = '',
    external_score: Optional[int] = None
) -> AnalysisRecord:
    """
    Parse a model answer into an AnalysisRecord.

    Args:
        text: Raw response text
        category: AnalysisCategory or 'favorability'/'news'/'risk'
        subject_label: Stock name, only used in log messages
        external_score: Score obtained elsewhere (e.g. a consensus across
            providers), used when the text itself yields 0

    Returns:
        A well-formed AnalysisRecord; never raises
    """
    content = text or ''
    try:
        category = AnalysisCategory.parse(category)
    except ValueError:
        logger.warning(f"Unknown analysis category {category!r}, using favorability")
        category = AnalysisCategory.FAVORABILITY

    try:
        record = _parse(content, category, external_score)
    except Exception as e:
        logger.error(f"Failed to parse {category.value} response for {subject_label or 'unknown'}: {e}")
        return _minimal_record(category, content)

    logger.debug(
        f"Parsed {category.value} response for {subject_label or 'unknown'}: score={record.score}, "
        f"positives={len(record.positives)}, negatives={len(record.negatives)}, "
        f"structured={record.structured}"
    )
    return record
