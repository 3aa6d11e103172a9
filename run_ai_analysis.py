"""
AI Stock Analysis Runner
Run this script to get a parsed news/risk analysis for a Taiwan stock.

Examples:
    python run_ai_analysis.py 2330 台積電 --platform deepseek --type both
    python run_ai_analysis.py --file saved_reply.txt --type risk --name 台積電
    python run_ai_analysis.py --check --platform gemini
"""

import os
import sys
import json
import argparse
from pathlib import Path
from datetime import datetime

# Setup project root path
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.insert(0, current_dir)

from ai_analysis.analysis_config import get_profile
from ai_analysis.analyst import StockAIAnalyst, analyze_text
from ai_analysis.history import AnalysisHistory, HistoryEntry
from ai_analysis.llm_client import LLMClientError, check_connection, supported_platforms
from ai_analysis.models import AnalysisCategory
from config.constants import DATA_REPORTS, LLM_PROVIDERS
from config.settings import settings
from utils.console_utils import ensure_utf8_stdout, format_score_summary, print_rule, print_step, status_mark
from utils.logger import mask_secrets, setup_logger

logger = setup_logger('run_ai_analysis')

TYPE_CHOICES = ('news', 'risk', 'both')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AI news/risk analysis for Taiwan stocks")
    parser.add_argument('stock_id', nargs='?', help="Stock code, e.g. 2330")
    parser.add_argument('stock_name', nargs='?', default='', help="Stock name, e.g. 台積電")
    parser.add_argument('--platform', default=settings.default_platform, choices=supported_platforms())
    parser.add_argument('--api-key', default=None, help="Overrides the key from .env")
    parser.add_argument('--type', dest='analysis_type', default='both', choices=TYPE_CHOICES)
    parser.add_argument('--file', default=None, help="Parse a saved model reply instead of calling the API")
    parser.add_argument('--name', default='', help="Stock name shown when parsing --file")
    parser.add_argument('--check', action='store_true', help="Only test the API key")
    parser.add_argument('--json', action='store_true', help="Print parsed records as JSON")
    parser.add_argument('--save', action='store_true', help=f"Save formatted output under {DATA_REPORTS}/")
    return parser


def _categories(analysis_type: str):
    if analysis_type == 'both':
        return list(AnalysisCategory)
    return [AnalysisCategory.parse(analysis_type)]


def _print_result(result, as_json: bool):
    if as_json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(result.content)


def _save(results, stock_id: str):
    reports_dir = Path(settings.reports_dir or Path(current_dir) / DATA_REPORTS)
    reports_dir.mkdir(parents=True, exist_ok=True)
    date_str = datetime.now().strftime('%Y%m%d')
    for result in results:
        path = reports_dir / f"ai_{result.record.category.value}_{stock_id or 'file'}_{date_str}.md"
        path.write_text(result.content, encoding='utf-8')
        print(f"  {status_mark('ok')} Saved: {path}")


def configured_platforms():
    """Platforms whose key is present in the environment."""
    configured = set(settings.configured_providers())
    return [name for name, provider in LLM_PROVIDERS.items() if provider['settings_key'] in configured]


def run_check(args) -> int:
    print_step(1, 1, f"Testing {args.platform} API key")
    platforms = configured_platforms()
    print(f"  Keys in environment: {', '.join(platforms) if platforms else '(none)'}")
    outcome = check_connection(args.platform, args.api_key)
    if outcome['success']:
        print(f"  {status_mark('ok')} {args.platform}: {outcome['message']}")
        return 0
    print(f"  {status_mark('fail')} {args.platform}: {outcome['message']}")
    return 1


def run_file(args) -> int:
    path = Path(args.file)
    if not path.exists():
        print(f"{status_mark('fail')} File not found: {path}")
        return 1

    text = path.read_text(encoding='utf-8')
    results = []
    for category in _categories(args.analysis_type):
        result = analyze_text(text, category, args.name)
        results.append(result)
        _print_result(result, args.json)
        print_rule()

    if args.save:
        _save(results, '')
    return 0


def run_live(args) -> int:
    stock_id = args.stock_id
    categories = _categories(args.analysis_type)
    history = AnalysisHistory()

    print_step(1, 2, f"Requesting analysis for {stock_id} {args.stock_name} ({args.platform})")
    try:
        analyst = StockAIAnalyst(args.platform, api_key=args.api_key)
        if len(categories) > 1:
            results = list(analyst.analyze_all(stock_id, args.stock_name).values())
        else:
            results = [analyst.analyze(stock_id, args.stock_name, categories[0])]
    except LLMClientError as e:
        logger.error(f"Analysis failed: {e}")
        print(f"  {status_mark('fail')} {e.user_message} ({mask_secrets(str(e))})")
        return 1

    print_step(2, 2, "Parsed results")
    for result in results:
        history = history.record(HistoryEntry(result.record, args.stock_name, args.platform))
        _print_result(result, args.json)
        print_rule()

    if not args.json:
        summary = format_score_summary(
            (get_profile(category)['display_name'], history.latest(category).record.score)
            for category in categories if history.latest(category)
        )
        print(f"{status_mark('ok')} {summary}")

    if args.save:
        _save(results, stock_id)
    return 0


def main(argv=None) -> int:
    ensure_utf8_stdout()
    args = build_parser().parse_args(argv)

    if args.check:
        return run_check(args)
    if args.file:
        return run_file(args)
    if not args.stock_id:
        print(f"{status_mark('fail')} stock_id is required (or use --file / --check)")
        return 2
    return run_live(args)


if __name__ == "__main__":
    sys.exit(main())
