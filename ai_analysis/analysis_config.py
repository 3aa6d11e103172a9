"""
AI Analysis Parsing Configuration.
Defines score patterns, section vocabularies, fallback keywords, defaults
and display settings for each analysis category.

Patterns are plain regex source strings; the extractor and parser compile
them. Labels cover Traditional Chinese (what the prompts ask for) plus the
English equivalents models sometimes answer with.
"""

from ai_analysis.models import AnalysisCategory

# ==================== SCORE ====================
SCORE_MIN = -10
SCORE_MAX = 10
DEFAULT_SCORE = 0

_SIGNED_INT = r'([+-]?\d+)'

# Evaluated in order; the category label is spliced in after 'out_of_ten'
SCORE_PATTERNS_HEAD = [
    ('final_label', r'(?:最終評分|final\s*score)\s*[：:]\s*' + _SIGNED_INT),
    ('final_bracket', r'【最終評分】\s*[：:]*\s*' + _SIGNED_INT),
    ('score_label', r'(?:評分|\bscore)\s*[：:]\s*' + _SIGNED_INT),
    ('out_of_ten', _SIGNED_INT + r'\s*/\s*10'),
]

SCORE_PATTERNS_TAIL = [
    ('points', _SIGNED_INT + r'\s*(?:分|points?\b)'),
    ('parenthesized', r'[（(]\s*' + _SIGNED_INT + r'\s*[）)]'),
    ('alt_label', r'分數\s*[：:]\s*' + _SIGNED_INT),
]

# Line-scan fallback
SCORE_LINE_KEYWORDS = ('評分', 'score', '/10')
SCORE_SHORT_LINE_KEYWORDS = ('分', 'point')
SCORE_SHORT_LINE_MAX = 30
SIGNED_INT_TOKEN = r'[+-]?\d+'

# ==================== ITEMS ====================
MAX_ITEMS = 5
MIN_ITEM_LENGTH = 4       # items of 3 chars or fewer are dropped
MAX_IMPLICIT_LENGTH = 99  # unmarked lines longer than this are not items

# "1." must not be a decimal ("3.5%成長" is not item 3)
NUMBERED_ITEM_PATTERN = (
    r'^(?:\d+(?:\.(?!\d)|[、)）])|[(（]\d+[)）]|[①-⑳]|[一二三四五六七八九十]+、)\s*(.+)'
)
BULLET_ITEM_PATTERN = r'^[•●▪\-*]\s+(.+)'
COLONS = ('：', ':')

# ==================== RECOMMENDATION ====================
MAX_RECOMMENDATION_LENGTH = 100
ELLIPSIS = '...'

# Headers that close any section span, regardless of category
COMMON_TERMINATOR_HEADERS = ('評分項目', '最終評分')

# A recommendation block also stops at a score line
SCORE_LINE_START = r'(?:最終評分|評分|分數|final\s*score|score)\s*[：:]'

# ==================== FALLBACK CLASSIFICATION ====================
MIN_FALLBACK_LINE_LENGTH = 8

# A keyword immediately followed by one of these is a neutral mention
# ("風險可控" says the risk is under control, not that there is one)
HEDGE_CUES = (
    '可控', '有限', '不大', '不高', '較低', '降低', '減少', '趨緩',
    'manageable', 'limited', 'low',
)

HEADER_ENDINGS = ('：', ':', '】')

PLACEHOLDER_FACTOR = '詳細分析見完整報告'

# ==================== CATEGORY PROFILES ====================
# primary: which list leads in the rendering and in the score details
# sections: list name -> header labels (bracketed 【label】 or loose "label:")
# keyword_order: which keyword set is tried first during fallback
# detail_deltas: point deltas for the first two items of each list

CATEGORY_PROFILES = {
    AnalysisCategory.FAVORABILITY: {
        'display_name': '消息面',
        'primary': 'positives',
        'sections': {
            'positives': ('正面因素', '利多因素', 'Positive factors'),
            'negatives': ('負面因素', '利空因素', 'Negative factors'),
        },
        'recommendation_headers': ('投資建議', '風險建議', '建議', 'Investment advice', 'Recommendation'),
        'category_score_pattern': r'(?:消息面評分|news\s*score)\s*[：:]\s*' + _SIGNED_INT,
        'keywords': {
            'positives': ('正面', '利好', '優勢', '機會', '成長', 'positive', 'upside', 'growth'),
            'negatives': ('負面', '風險', '挑戰', '問題', '不利', 'negative', 'risk', 'challenge'),
        },
        'keyword_order': ('positives', 'negatives'),
        'recommendation_keywords': ('建議', '推薦', '結論', 'recommend', 'conclusion'),
        'defaults': {
            'positives': ('營收表現穩健', '市場地位穩固'),
            'negatives': ('行業競爭加劇', '成本壓力上升'),
        },
        'detail_labels': {
            'positives': '正面因素',
            'negatives': '負面因素',
        },
        'detail_deltas': {
            'positives': (2, 1),
            'negatives': (-1, -1),
        },
        # (score > 0, score < 0, score == 0)
        'score_glyphs': ('🔴', '⚫', '⚫'),
        'list_titles': {
            'positives': '🌟 正面因素 (利多):',
            'negatives': '⚠️ 負面因素 (風險):',
        },
    },
    AnalysisCategory.RISK: {
        'display_name': '風險面',
        'primary': 'negatives',
        'sections': {
            'negatives': ('主要風險', '風險因素', 'Key risks', 'Main risks'),
            'positives': ('風險緩衝', '緩衝因素', 'Risk mitigants', 'Mitigants'),
        },
        'recommendation_headers': ('風險建議', '投資建議', '建議', 'Risk advice', 'Recommendation'),
        'category_score_pattern': r'(?:風險面評分|risk\s*score)\s*[：:]\s*' + _SIGNED_INT,
        'keywords': {
            'negatives': ('風險', '問題', '挑戰', '威脅', '不利', '下跌', 'risk', 'threat', 'decline'),
            'positives': ('優勢', '緩衝', '保護', '防禦', '競爭力', '穩健', 'advantage', 'mitigant', 'resilient'),
        },
        'keyword_order': ('negatives', 'positives'),
        'recommendation_keywords': ('建議', '推薦', '策略', 'recommend', 'strategy'),
        'defaults': {
            'negatives': ('財務槓桿過高', '行業競爭激烈'),
            'positives': ('現金流充足', '技術領先地位'),
        },
        'detail_labels': {
            'negatives': '風險因素',
            'positives': '風險緩衝',
        },
        'detail_deltas': {
            'negatives': (-2, -1),
            'positives': (2, 1),
        },
        'score_glyphs': ('🟢', '🔴', '🟡'),
        'list_titles': {
            'negatives': '🔴 風險因素:',
            'positives': '🛡️ 風險緩衝因素:',
        },
    },
}


def get_profile(category) -> dict:
    """Profile row for a category (enum member or its string value)."""
    return CATEGORY_PROFILES[AnalysisCategory.parse(category)]


def secondary_list(profile: dict) -> str:
    return 'negatives' if profile['primary'] == 'positives' else 'positives'
