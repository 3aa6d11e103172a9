"""
Analysis Formatter
Renders an AnalysisRecord into the canonical display text.
"""

from datetime import datetime
from typing import Optional

from ai_analysis.analysis_config import CATEGORY_PROFILES, SCORE_MAX, secondary_list
from ai_analysis.models import AnalysisCategory, AnalysisRecord

TIMESTAMP_FORMAT = '%Y/%m/%d %H:%M:%S'


def format_score(score: int) -> str:
    """Signed score text: '+3', '0', '-2'."""
    return f"+{score}" if score > 0 else str(score)


def score_glyph(score: int, category: AnalysisCategory) -> str:
    positive, negative, zero = CATEGORY_PROFILES[category]['score_glyphs']
    if score > 0:
        return positive
    if score < 0:
        return negative
    return zero


def format_analysis(
    record: AnalysisRecord,
    category=None,
    subject_label: str = '',
    now: Optional[datetime] = None
) -> str:
    """
    Format a parsed analysis for display.

    Output is a pure function of the record, category and label; only the
    trailing timestamp changes between calls (pass `now` to pin it).

    Args:
        record: Parsed analysis
        category: Overrides record.category when given
        subject_label: Stock name shown in the header
        now: Timestamp for the footer (default: current local time)
    """
    category = AnalysisCategory.parse(category) if category is not None else record.category
    profile = CATEGORY_PROFILES[category]
    lists = {'positives': record.positives, 'negatives': record.negatives}

    header = ' '.join(
        part for part in (
            '📊',
            score_glyph(record.score, category),
            subject_label,
            f"{profile['display_name']}分析評分: {format_score(record.score)}/{SCORE_MAX}",
        ) if part
    )
    lines = [header]

    for list_name in (profile['primary'], secondary_list(profile)):
        lines.append('')
        lines.append(profile['list_titles'][list_name])
        lines.extend(f"{index}. {item}" for index, item in enumerate(lists[list_name], start=1))

    if record.score_details:
        lines.append('')
        lines.append('📈 評分項目詳情:')
        for detail in record.score_details:
            lines.append(f"• {detail.label}: {format_score(detail.delta)}分 - {detail.reason}")

    if record.recommendation:
        lines.append('')
        lines.append('💡 建議:')
        lines.append(record.recommendation)

    timestamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    lines.append('')
    lines.append('---')
    lines.append(f"*分析時間: {timestamp}*")
    return '\n'.join(lines)
