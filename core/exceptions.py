"""
core/exceptions.py - 통합 예외 계층 구조

메트릭 수집 파이프라인 전체에서 사용되는 예외 클래스들을 정의합니다.
모든 예외는 최상위(CLI)까지 전파되어 실행을 중단시킵니다.

예외 계층 구조:
    MetricsError (베이스)
    ├── ConfigError (설정 파일/기본값 적용 오류)
    ├── APICallError (CloudWatch/EC2 API 호출 오류)
    └── DataShapeError (쿼리 발행 전 감지되는 데이터 형태 오류)

Usage:
    from core.exceptions import APICallError

    try:
        resp = cloudwatch.list_metrics(Namespace="AWS/EC2")
    except ClientError as e:
        raise APICallError.from_client_error("cloudwatch", "list_metrics", e) from e
"""

from typing import Any, Dict, Optional

# =============================================================================
# 베이스 예외
# =============================================================================


class MetricsError(Exception):
    """메트릭 수집기 기본 예외 클래스

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 설정 관련 예외
# =============================================================================


class ConfigError(MetricsError):
    """설정 관련 예외

    설정 파일 로드, 파싱, 기본값 적용 단계에서 발생합니다.
    """

    def __init__(
        self,
        key: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        full_message = f"설정 오류 [{key}]: {message}"
        super().__init__(full_message, cause)
        self.config_key = key
        self.details["config_key"] = key


# =============================================================================
# API 호출 관련 예외
# =============================================================================


class APICallError(MetricsError):
    """AWS API 호출 관련 예외

    boto3/botocore의 ClientError를 래핑하여 일관된 예외 처리를 제공합니다.
    """

    def __init__(
        self,
        service: str,
        operation: str,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        message = f"{service}.{operation}"
        if error_code:
            message = f"{message} 실패 ({error_code})"
        if error_message:
            message = f"{message}: {error_message}"

        super().__init__(message, cause)
        self.service = service
        self.operation = operation
        self.error_code = error_code
        self.error_message = error_message
        self.details.update(
            {
                "service": service,
                "operation": operation,
                "error_code": error_code,
            }
        )

    def __str__(self) -> str:
        # ClientError 메시지는 이미 message에 포함됨
        if self.error_code:
            return self.message
        return super().__str__()

    @classmethod
    def from_client_error(
        cls,
        service: str,
        operation: str,
        client_error: Exception,
    ) -> "APICallError":
        """botocore 예외로부터 생성

        Args:
            service: AWS 서비스 이름
            operation: API 작업 이름
            client_error: ClientError 또는 BotoCoreError 예외

        Returns:
            APICallError 인스턴스
        """
        error_code = None
        error_message = None

        # ClientError 형식 파싱
        if hasattr(client_error, "response"):
            error_info = client_error.response.get("Error", {})
            error_code = error_info.get("Code")
            error_message = error_info.get("Message")

        return cls(
            service=service,
            operation=operation,
            error_code=error_code,
            error_message=error_message,
            cause=client_error,
        )


# =============================================================================
# 데이터 형태 관련 예외
# =============================================================================


class DataShapeError(MetricsError):
    """데이터 형태 오류

    서비스별 쿼리 수가 요청당 한도를 넘는 경우처럼,
    API 호출 전에 감지되어야 하는 오류입니다. 잘라내기로 대체하지 않습니다.
    """

    def __init__(
        self,
        namespace: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        full_message = f"데이터 형태 오류 [{namespace}]: {message}"
        super().__init__(full_message, cause)
        self.namespace = namespace
        self.details["namespace"] = namespace


# =============================================================================
# 예외 유틸리티 함수
# =============================================================================


def _error_code_of(error: Exception) -> str:
    if isinstance(error, APICallError):
        return error.error_code or ""
    if hasattr(error, "response"):
        return error.response.get("Error", {}).get("Code", "")
    return ""


def is_access_denied(error: Exception) -> bool:
    """액세스 거부 오류인지 확인"""
    return _error_code_of(error) in (
        "AccessDenied",
        "AccessDeniedException",
        "UnauthorizedOperation",
    )


def is_throttling(error: Exception) -> bool:
    """스로틀링 오류인지 확인"""
    return _error_code_of(error) in {
        "Throttling",
        "ThrottlingException",
        "RequestLimitExceeded",
        "TooManyRequestsException",
    }


def format_error_for_user(error: Exception) -> str:
    """사용자에게 표시할 에러 메시지 포맷팅

    Args:
        error: 예외

    Returns:
        사용자 친화적인 에러 메시지
    """
    if isinstance(error, APICallError) and error.error_code:
        friendly_messages = {
            "AccessDenied": "권한이 없습니다. IAM 정책을 확인하세요.",
            "AccessDeniedException": "권한이 없습니다. IAM 정책을 확인하세요.",
            "UnauthorizedOperation": "권한이 없습니다. IAM 정책을 확인하세요.",
            "ExpiredToken": "인증 토큰이 만료되었습니다. 다시 로그인하세요.",
            "InvalidClientTokenId": "잘못된 자격 증명입니다.",
            "Throttling": "요청이 너무 많습니다. 잠시 후 다시 시도하세요.",
        }
        hint = friendly_messages.get(error.error_code)
        if hint:
            return f"{error} ({hint})"

    return str(error)
