"""
Console output helpers for the analysis runner.

Windows consoles (cp950) cannot print the check/cross glyphs, so status
marks fall back to ASCII there. Analysis bodies themselves are Chinese and
need a UTF-8 stdout; call ensure_utf8_stdout() before printing them.
"""

import os
import sys
from typing import Iterable, Tuple

_MARKS = {
    'ok': ("✓", "[OK]"),
    'fail': ("✗", "[ERROR]"),
    'warn': ("!", "[WARN]"),
}

RULE_WIDTH = 60


def status_mark(kind: str) -> str:
    """Glyph for 'ok' / 'fail' / 'warn', ASCII on Windows."""
    unicode_mark, ascii_mark = _MARKS[kind]
    return ascii_mark if os.name == 'nt' else unicode_mark


def ensure_utf8_stdout():
    encoding = getattr(sys.stdout, 'encoding', None) or ''
    if encoding.lower() != 'utf-8' and hasattr(sys.stdout, 'reconfigure'):
        sys.stdout.reconfigure(encoding='utf-8')


def print_step(step: int, total: int, message: str):
    print(f"\n[{step}/{total}] {message}")


def print_rule():
    print("─" * RULE_WIDTH if os.name != 'nt' else "-" * RULE_WIDTH)


def format_score_summary(scores: Iterable[Tuple[str, int]]) -> str:
    """
    One-line summary of final scores, e.g. '消息面 +5 | 風險面 -3'.

    Args:
        scores: (display label, score) pairs in display order
    """
    parts = [f"{label} {score:+d}" if score else f"{label} 0" for label, score in scores]
    return " | ".join(parts) if parts else "(無評分)"
