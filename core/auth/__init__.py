# core/auth/__init__.py
"""
AWS 인증 모듈 (core/auth)

boto3 Session과 파이프라인용 client 핸들(AwsClients)을 제공합니다.

사용 예시:
    from core.auth import create_clients

    clients = create_clients(profile="my-profile", region="ap-northeast-1")

Note:
    이 모듈은 Lazy Import 패턴을 사용합니다.
    실제 사용 시점에만 boto3가 로드되어 CLI 시작 시간을 최적화합니다.
"""

__all__ = [
    "AwsClients",
    "create_clients",
    "get_session",
]

# Lazy import 매핑 테이블
_IMPORT_MAPPING = {
    "AwsClients": (".session", "AwsClients"),
    "create_clients": (".session", "create_clients"),
    "get_session": (".session", "get_session"),
}


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name in _IMPORT_MAPPING:
        module_name, attr_name = _IMPORT_MAPPING[name]
        import importlib

        module = importlib.import_module(module_name, __name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
