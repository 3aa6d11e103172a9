"""
AI analysis module - reshapes free-form LLM stock commentary into scores,
factor lists and a recommendation.

AI分析模組 - 將大型語言模型的自由文字回應解析為評分、因素清單與建議。
"""

from .models import AnalysisCategory, AnalysisRecord, ScoreDetail
from .score_extractor import extract_score
from .content_parser import parse_analysis
from .formatter import format_analysis
from .history import AnalysisHistory, HistoryEntry

__all__ = [
    'AnalysisCategory',
    'AnalysisRecord',
    'ScoreDetail',
    'extract_score',
    'parse_analysis',
    'format_analysis',
    'AnalysisHistory',
    'HistoryEntry',
]
