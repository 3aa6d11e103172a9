"""
AI Prompt Templates
Separated from the client logic for better maintainability.

Both prompts ask for the bracketed section layout the content parser reads
and for an explicit "最終評分: [+-N]" last line.
"""

from ai_analysis.models import AnalysisCategory

SCORE_INSTRUCTIONS = """**重要要求：**
1. 必須在最後一行明確給出評分格式：最終評分: [+-數字]，數字範圍-10到+10
2. 評分標準：{scale}"""

SCORE_LINE = "最終評分: [必須是-10到+10的整數，例如：最終評分: +3 或 最終評分: -2]"


def build_news_prompt(stock_id: str, stock_name: str = '') -> str:
    """Market-news (favorability) prompt: +10 most bullish, -10 most bearish."""
    instructions = SCORE_INSTRUCTIONS.format(scale="+10分最利好，-10分最利空")
    return f"""作為專業股票分析師，請分析台灣股票 {stock_id} {stock_name} 的最新市場消息面。

{instructions}

請按以下結構提供分析：

【正面因素】
1. [具體利多1]
2. [具體利多2]

【負面因素】
1. [具體利空1]
2. [具體利空2]

【投資建議】
[簡要建議，30字內]

{SCORE_LINE}

請基於最新市場資訊提供客觀分析。"""


def build_risk_prompt(stock_id: str, stock_name: str = '') -> str:
    """Risk prompt: +10 lowest risk, -10 highest risk."""
    instructions = SCORE_INSTRUCTIONS.format(scale="+10分風險最低，-10分風險最高")
    return f"""作為風險分析師，請分析台灣股票 {stock_id} {stock_name} 的風險面因素。

{instructions}

請按以下結構提供分析：

【主要風險】
1. [主要風險1]
2. [主要風險2]

【風險緩衝】
1. [公司優勢1]
2. [公司優勢2]

【風險建議】
[簡要建議，30字內]

{SCORE_LINE}

請提供客觀的風險評估。"""


def build_prompt(category, stock_id: str, stock_name: str = '') -> str:
    if AnalysisCategory.parse(category) is AnalysisCategory.RISK:
        return build_risk_prompt(stock_id, stock_name)
    return build_news_prompt(stock_id, stock_name)
