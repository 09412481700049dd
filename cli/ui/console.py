"""
cli/ui/console.py - Rich 콘솔 유틸리티

진단 출력(로그, 에러)은 stderr 콘솔로 보내고,
stdout은 메트릭 행/라벨 출력 전용으로 남겨 둡니다.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

# botocore 노이즈 로그 제한
logging.getLogger("botocore.httpchecksum").setLevel(logging.WARNING)
logging.getLogger("botocore.credentials").setLevel(logging.WARNING)
logging.getLogger("botocore.loaders").setLevel(logging.WARNING)
logging.getLogger("botocore.session").setLevel(logging.WARNING)
logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_console() -> Console:
    """stderr로 출력하는 Rich Console 인스턴스를 생성하고 반환합니다."""
    return Console(stderr=True, highlight=False, soft_wrap=True)


# 전역 콘솔 인스턴스
console = get_console()

# 상태 심볼
SYMBOL_SUCCESS = "✓"
SYMBOL_ERROR = "✗"
SYMBOL_WARNING = "!"


def verbosity_to_level(verbosity: int) -> int:
    """-v 횟수를 로그 레벨로 변환 (0: WARNING, 1: INFO, 2+: DEBUG)"""
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbosity: int = 0) -> None:
    """루트 logger에 Rich 핸들러 설정

    WARNING 레벨을 기본으로 하여 INFO 로그가 출력에 섞이지 않도록 합니다.

    Args:
        verbosity: -v 옵션 횟수
    """
    root = logging.getLogger()
    root.setLevel(verbosity_to_level(verbosity))

    # 이미 Rich 핸들러가 설정되어 있으면 레벨만 변경
    if any(isinstance(h, RichHandler) for h in root.handlers):
        return

    handler = RichHandler(console=console, rich_tracebacks=True, show_path=verbosity >= 2)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)


def print_error(message: str) -> None:
    """에러 메시지 출력 (빨간색 X)"""
    console.print(f"[red]{SYMBOL_ERROR} {message}[/red]", markup=True)


def print_warning(message: str) -> None:
    """경고 메시지 출력 (노란색 !)"""
    console.print(f"[yellow]{SYMBOL_WARNING} {message}[/yellow]", markup=True)
