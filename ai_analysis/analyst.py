"""
Stock AI Analyst
================

Domain-specific orchestration for news and risk analyses.
Uses LLMClient for generation and the content parser for reshaping.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from ai_analysis.content_parser import parse_analysis
from ai_analysis.formatter import format_analysis
from ai_analysis.llm_client import LLMClient
from ai_analysis.models import AnalysisCategory, AnalysisRecord
from ai_analysis.prompts import build_prompt
from config.constants import LLM_PARALLEL_TIMEOUT_SECONDS
from utils.logger import setup_logger

logger = setup_logger('stock_ai_analyst')


@dataclass(frozen=True)
class AnalysisResult:
    """Parsed record plus its rendering, as handed to the display layer."""
    record: AnalysisRecord
    content: str
    stock_id: str
    stock_name: str
    platform: str

    def to_dict(self) -> dict:
        data = self.record.to_dict()
        data.update({
            'success': True,
            'content': self.content,
            'comment': self.record.recommendation or '分析完成',
            'analysisType': self.record.category.value,
            'stockId': self.stock_id,
            'stockName': self.stock_name,
            'platform': self.platform,
        })
        return data


def analyze_text(
    text: str,
    category,
    stock_name: str = '',
    external_score: Optional[int] = None,
    now: Optional[datetime] = None
) -> AnalysisResult:
    """Parse and render an already obtained model answer (no network)."""
    record = parse_analysis(text, category, stock_name, external_score=external_score)
    content = format_analysis(record, record.category, stock_name, now=now)
    return AnalysisResult(record=record, content=content, stock_id='', stock_name=stock_name, platform='')


class StockAIAnalyst:
    """
    Orchestrates prompt building, completion and parsing for one provider.
    """

    def __init__(self, platform: Optional[str] = None, api_key: Optional[str] = None):
        self.client = LLMClient(platform, api_key=api_key)

    @property
    def platform(self) -> str:
        return self.client.platform

    def analyze(
        self,
        stock_id: str,
        stock_name: str = '',
        category=AnalysisCategory.FAVORABILITY,
        timeout: Optional[float] = None
    ) -> AnalysisResult:
        """
        Run one analysis end to end.

        Raises:
            LLMClientError if the provider call fails (parsing itself never fails)
        """
        category = AnalysisCategory.parse(category)
        prompt = build_prompt(category, stock_id, stock_name)
        logger.info(f"Requesting {category.value} analysis for {stock_id} {stock_name} from {self.platform}")

        raw_text = self.client.complete(prompt, timeout=timeout)
        record = parse_analysis(raw_text, category, stock_name)
        content = format_analysis(record, category, stock_name)

        logger.info(
            f"{category.value} analysis for {stock_id} done: score={record.score}, structured={record.structured}"
        )
        return AnalysisResult(
            record=record,
            content=content,
            stock_id=stock_id,
            stock_name=stock_name,
            platform=self.platform,
        )

    def analyze_all(self, stock_id: str, stock_name: str = '') -> Dict[AnalysisCategory, AnalysisResult]:
        """
        Run every category in parallel with the shorter fan-out timeout.
        Provider errors propagate from the first failing category.
        """
        with ThreadPoolExecutor(max_workers=len(AnalysisCategory)) as executor:
            futures = {
                category: executor.submit(
                    self.analyze, stock_id, stock_name, category, LLM_PARALLEL_TIMEOUT_SECONDS
                )
                for category in AnalysisCategory
            }
            return {category: future.result() for category, future in futures.items()}
