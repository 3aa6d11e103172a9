"""
Utilities module for the AI stock commentary parser.

--- 常用工具速查 (Quick Reference) ---

1. 日志 (logger.py)
   from utils.logger import setup_logger
   - logger = setup_logger('module_name')
   - LoggingContext / set_logging_mode: 切换日志级别 (LOG_MODE 环境变量)
   - mask_secrets(text): 遮蔽 API Key, 显示给用户的异常信息也要先过一遍

2. 控制台输出 (console_utils.py)
   from utils.console_utils import status_mark, print_step, print_rule
   - status_mark('ok' | 'fail' | 'warn')  (Windows 下退回 ASCII)
   - format_score_summary([(label, score), ...])  结尾评分汇总
   - ensure_utf8_stdout()  中文输出前调用

=== 注意事项 ===
- 日志统一用 setup_logger(),不要用 print() 做调试输出
- 不要在日志中输出完整 API Key (SecureFormatter 只是最后一道防线)
"""

from .logger import setup_logger, LoggingContext, set_logging_mode, get_logging_mode, mask_secrets
from .console_utils import status_mark, print_step, print_rule, format_score_summary, ensure_utf8_stdout

__all__ = [
    'setup_logger',
    'LoggingContext',
    'set_logging_mode',
    'get_logging_mode',
    'mask_secrets',
    'status_mark',
    'print_step',
    'print_rule',
    'format_score_summary',
    'ensure_utf8_stdout',
]
