"""
Result containers for parsed AI analyses.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Tuple


class AnalysisCategory(Enum):
    """Which analysis mode governs pattern and keyword selection."""
    FAVORABILITY = "favorability"  # 消息面: higher = more favorable news
    RISK = "risk"                  # 風險面: higher = lower risk

    @classmethod
    def parse(cls, value) -> 'AnalysisCategory':
        """Accept an enum member or 'favorability'/'news'/'risk'."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        if key == 'news':
            return cls.FAVORABILITY
        return cls(key)


@dataclass(frozen=True)
class ScoreDetail:
    """Synthetic per-item attribution, only produced by the keyword fallback."""
    label: str
    delta: int
    reason: str


@dataclass(frozen=True)
class AnalysisRecord:
    """Normalized output of one parse invocation."""
    category: AnalysisCategory
    score: int = 0
    positives: Tuple[str, ...] = ()
    negatives: Tuple[str, ...] = ()
    recommendation: str = ''
    structured: bool = False
    raw_content: str = ''
    score_details: Tuple[ScoreDetail, ...] = field(default_factory=tuple)

    def with_score(self, score: int) -> 'AnalysisRecord':
        """Copy of this record carrying an independently obtained score."""
        return replace(self, score=score)

    def to_dict(self) -> dict:
        return {
            'category': self.category.value,
            'score': self.score,
            'positives': list(self.positives),
            'negatives': list(self.negatives),
            'recommendation': self.recommendation,
            'structured': self.structured,
            'rawContent': self.raw_content,
            'scoreDetails': [
                {'item': d.label, 'score': d.delta, 'reason': d.reason}
                for d in self.score_details
            ],
        }
