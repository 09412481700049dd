# cli/ui - 콘솔 컴포넌트 (rich)
"""
콘솔 출력 모듈

stderr 전용 Rich 콘솔, 로깅 설정, 에러/경고 출력 헬퍼
"""

from .console import (
    SYMBOL_ERROR,
    SYMBOL_SUCCESS,
    SYMBOL_WARNING,
    console,
    get_console,
    print_error,
    print_warning,
    setup_logging,
    verbosity_to_level,
)

__all__ = [
    "SYMBOL_ERROR",
    "SYMBOL_SUCCESS",
    "SYMBOL_WARNING",
    "console",
    "get_console",
    "print_error",
    "print_warning",
    "setup_logging",
    "verbosity_to_level",
]
