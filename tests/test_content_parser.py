import dataclasses

import pytest

from ai_analysis import content_parser
from ai_analysis.content_parser import (
    build_score_details,
    classify_lines,
    extract_items,
    extract_recommendation,
    parse_analysis,
)
from ai_analysis.models import AnalysisCategory


NEWS_REPLY = "【正面因素】\n1. 營收創新高\n2. 訂單滿載\n【負面因素】\n1. 匯率風險\n【投資建議】審慎樂觀\n最終評分: +5"

RISK_REPLY = """【主要風險】
1. 外資持續賣超
2. 庫存去化緩慢

【風險緩衝】
• 現金部位充足
• 客戶結構分散

【風險建議】
分批布局，嚴設停損

最終評分: -2"""


def test_structured_news_reply():
    record = parse_analysis(NEWS_REPLY, "favorability", "台積電")

    assert record.score == 5
    assert record.positives == ("營收創新高", "訂單滿載")
    assert record.negatives == ("匯率風險",)
    assert record.recommendation == "審慎樂觀"
    assert record.structured is True
    assert record.score_details == ()
    assert record.raw_content == NEWS_REPLY


def test_structured_risk_reply_swaps_roles():
    record = parse_analysis(RISK_REPLY, "risk", "台積電")

    assert record.score == -2
    assert record.negatives == ("外資持續賣超", "庫存去化緩慢")
    assert record.positives == ("現金部位充足", "客戶結構分散")
    assert record.recommendation == "分批布局，嚴設停損"
    assert record.structured is True


def test_unstructured_risk_reply_uses_defaults():
    record = parse_analysis("公司表現普通，風險可控。", "risk", "台積電")

    assert record.structured is False
    assert record.score == 0
    assert record.negatives == ("財務槓桿過高", "行業競爭激烈")
    assert record.positives == ("現金流充足", "技術領先地位")


def test_no_headers_no_keywords_gives_two_defaults_each():
    record = parse_analysis("今天天氣晴朗。", "news")

    assert record.structured is False
    assert record.positives == ("營收表現穩健", "市場地位穩固")
    assert record.negatives == ("行業競爭加劇", "成本壓力上升")
    assert [d.delta for d in record.score_details] == [2, 1, -1, -1]
    assert [d.label for d in record.score_details] == ["正面因素 1", "正面因素 2", "負面因素 1", "負面因素 2"]


def test_risk_defaults_details_lead_with_risks():
    record = parse_analysis("沒有任何結構", "risk")

    assert [d.delta for d in record.score_details] == [-2, -1, 2, 1]
    assert record.score_details[0].label == "風險因素 1"
    assert record.score_details[0].reason == "財務槓桿過高"
    assert record.score_details[2].label == "風險緩衝 1"


def test_keyword_fallback_classification():
    text = "本季營收成長動能強勁，法人看好\n匯率波動帶來負面衝擊需留意\n建議逢低分批布局"
    record = parse_analysis(text, "news")

    assert record.structured is False
    assert record.positives == ("本季營收成長動能強勁，法人看好",)
    assert record.negatives == ("匯率波動帶來負面衝擊需留意",)
    assert record.recommendation == "建議逢低分批布局"
    assert record.score_details[0].reason == "本季營收成長動能強勁，法人看好"
    assert record.score_details[0].delta == 2


def test_keyword_fallback_skips_short_and_header_lines():
    positives, negatives, _ = classify_lines("正面因素：\n成長\n風險\n主要風險在於匯率大幅波動", AnalysisCategory.FAVORABILITY)

    assert positives == []
    assert negatives == ["主要風險在於匯率大幅波動"]


def test_loose_colon_headers():
    text = "正面因素：\n1. 新產能開出\n2. 客戶追加訂單\n\n負面因素：\n1. 原物料上漲\n\n建議：持有觀望"
    record = parse_analysis(text, "news")

    assert record.structured is True
    assert record.positives == ("新產能開出", "客戶追加訂單")
    assert record.negatives == ("原物料上漲",)
    assert record.recommendation == "持有觀望"


def test_partial_sections_still_structured():
    record = parse_analysis("【正面因素】\n1. 營收創新高", "news")

    assert record.structured is True
    assert record.positives == ("營收創新高",)
    assert record.negatives == ()


def test_items_capped_at_five_in_order():
    body = "\n".join(f"{i}. 第{i}項利多因素" for i in range(1, 8))
    record = parse_analysis(f"【正面因素】\n{body}\n【負面因素】\n- 匯率波動", "news")

    assert len(record.positives) == 5
    assert record.positives[0] == "第1項利多因素"
    assert record.positives[-1] == "第5項利多因素"


def test_extract_items_formats():
    text = "1、營收創新高\n(2) 毛利率提升\n③ 新品上市\n四、擴廠計畫\n- 股利穩定\n* 外資回補"
    assert extract_items(text, limit=10) == ["營收創新高", "毛利率提升", "新品上市", "擴廠計畫", "股利穩定", "外資回補"]


def test_extract_items_filters():
    long_line = "很" * 120
    text = f"1. 漲\n附註：不計入\n{long_line}\n3.5%成長率\n單純一行說明"
    assert extract_items(text) == ["3.5%成長率", "單純一行說明"]


def test_extract_items_empty():
    assert extract_items("") == []
    assert extract_items(None) == []


def test_recommendation_truncated_to_100_chars():
    text = "【投資建議】" + "很" * 150
    advice = extract_recommendation(text, AnalysisCategory.FAVORABILITY)

    assert len(advice) == 100
    assert advice.endswith("...")


def test_external_score_only_used_when_text_has_none():
    assert parse_analysis("【正面因素】\n1. 營收創新高", "news", external_score=4).score == 4
    assert parse_analysis(NEWS_REPLY, "news", external_score=4).score == 5
    assert parse_analysis("【正面因素】\n1. 營收創新高", "news", external_score=30).score == 10


def test_internal_error_returns_minimal_record(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(content_parser, "extract_section", boom)

    news = parse_analysis(NEWS_REPLY, "news")
    assert news.score == 0
    assert news.structured is False
    assert news.positives == ("詳細分析見完整報告",)
    assert news.raw_content == NEWS_REPLY

    risk = parse_analysis(RISK_REPLY, "risk")
    assert risk.negatives == ("詳細分析見完整報告",)


def test_none_text_and_unknown_category():
    record = parse_analysis(None, "bogus")

    assert record.category is AnalysisCategory.FAVORABILITY
    assert record.raw_content == ""
    assert record.structured is False


def test_parse_is_deterministic_and_immutable():
    first = parse_analysis(RISK_REPLY, "risk")
    assert parse_analysis(RISK_REPLY, "risk") == first

    with pytest.raises(dataclasses.FrozenInstanceError):
        first.score = 3

    updated = first.with_score(6)
    assert updated.score == 6
    assert first.score == -2


def test_list_lengths_never_exceed_five():
    many = "\n".join(f"營收成長第{i}季表現亮眼" for i in range(12))
    record = parse_analysis(many, "news")
    assert len(record.positives) <= 5
    assert len(record.negatives) <= 5


def test_build_score_details_uses_first_two_items():
    details = build_score_details(["甲項利多", "乙項利多", "丙項利多"], ["甲項利空"], AnalysisCategory.FAVORABILITY)
    assert [(d.label, d.delta, d.reason) for d in details] == [
        ("正面因素 1", 2, "甲項利多"),
        ("正面因素 2", 1, "乙項利多"),
        ("負面因素 1", -1, "甲項利空"),
    ]


def test_fallback_items_keep_minimum_length_after_marker_removed():
    record = parse_analysis("①    風險高\n沒有其他內容", "risk")

    assert "風險高" not in record.negatives
    assert all(len(item) >= 4 for item in record.positives + record.negatives)


def test_bracketed_recommendation_keeps_inline_score_mention():
    text = "【投資建議】建議持有，本益比評分：偏低可逢低布局\n最終評分: +3"
    record = parse_analysis(text, "news")

    assert record.recommendation == "建議持有，本益比評分：偏低可逢低布局"
    assert record.score == 3


def test_unknown_bracket_header_ends_section():
    text = "【風險緩衝】\n1. 現金部位充足\n【總結】\n整體風險中性偏低水準"
    record = parse_analysis(text, "risk")

    assert record.positives == ("現金部位充足",)
    assert record.structured is True


def test_bracket_lines_are_never_items():
    assert extract_items("【總結】\n1. 毛利率回升\n【其他】") == ["毛利率回升"]


def test_loose_section_stops_at_next_label():
    text = "正面因素：\n1. 新產能開出\n負面因素：\n1. 原物料上漲"
    record = parse_analysis(text, "news")

    assert record.positives == ("新產能開出",)
    assert record.negatives == ("原物料上漲",)
