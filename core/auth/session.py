"""
core/auth/session.py - AWS 세션 및 client 핸들

CloudWatch / EC2 client를 한 번만 생성해 파이프라인 전체에 명시적으로 전달합니다.
전역 상태 대신 AwsClients 값을 넘기므로 테스트에서 가짜 client로 교체할 수 있습니다.

Example:
    from core.auth.session import create_clients

    clients = create_clients(profile="my-profile", region="ap-northeast-1")
    clients.cloudwatch.list_metrics(Namespace="AWS/EC2")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from core.config import DEFAULT_REGION
from core.exceptions import APICallError
from core.parallel.client import get_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AwsClients:
    """파이프라인이 사용하는 AWS client 묶음

    Attributes:
        cloudwatch: boto3 CloudWatch client (모니터링 API)
        ec2: boto3 EC2 client (인벤토리 API)
        region: client가 바인딩된 리전
    """

    cloudwatch: Any
    ec2: Any
    region: str = DEFAULT_REGION


def get_session(profile: str | None = None, region: str | None = None) -> boto3.Session:
    """boto3 Session 생성

    Args:
        profile: AWS Shared Credential 프로파일명 (None이면 기본 자격 증명 체인)
        region: AWS 리전

    Returns:
        boto3.Session

    Raises:
        APICallError: 프로파일을 찾을 수 없는 경우 등
    """
    try:
        if profile:
            return boto3.Session(profile_name=profile, region_name=region)
        return boto3.Session(region_name=region)
    except BotoCoreError as e:
        raise APICallError.from_client_error("sts", "session", e) from e


def create_clients(profile: str | None = None, region: str = DEFAULT_REGION) -> AwsClients:
    """CloudWatch / EC2 client를 생성하여 AwsClients로 반환

    Args:
        profile: AWS Shared Credential 프로파일명
        region: AWS 리전

    Returns:
        AwsClients
    """
    session = get_session(profile, region)
    try:
        cloudwatch = get_client(session, "cloudwatch", region_name=region)
        ec2 = get_client(session, "ec2", region_name=region)
    except (ClientError, BotoCoreError) as e:
        raise APICallError.from_client_error("session", "client", e) from e

    logger.debug(f"AWS client 생성 완료: profile={profile or '(default)'}, region={region}")
    return AwsClients(cloudwatch=cloudwatch, ec2=ec2, region=region)
