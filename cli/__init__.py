"""
cli - CloudWatch 메트릭 수집기 명령줄 인터페이스
"""
