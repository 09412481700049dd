"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.

명령어 구조:
    cwm                             # config.yml (없으면 기본 설정)로 수집
    cwm --config my.yml             # 설정 파일 지정
    cwm --profile dev --region us-east-1
    cwm --label-only                # 대상 리소스 라벨만 (중복 제거) 출력
    cwm --print-config              # 기본 설정 YAML 출력
    cwm -v / -vv                    # INFO / DEBUG 로그 (stderr)

종료 코드:
    0: 성공
    1: 설정/API/데이터 형태 오류 (사용법과 에러 메시지 출력)

Usage:
    $ cwm
    $ python -m cli.app
"""

import logging

import click

from cli.output import echo_labels, echo_rows
from cli.ui import print_error, setup_logging
from core.config import DEFAULT_CONFIG_PATH, DEFAULT_REGION, get_version
from core.exceptions import MetricsError, format_error_for_user

logger = logging.getLogger(__name__)

VERSION = get_version()


@click.command(name="cwm", context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-p", "--profile", "profile", default=None, help="AWS Shared Credential 프로파일명")
@click.option("-r", "--region", "region", default=DEFAULT_REGION, show_default=True, help="AWS 리전")
@click.option(
    "-c",
    "--config",
    "config_path",
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="수집 메트릭 설정 파일 (없으면 기본 설정 사용)",
)
@click.option("--print-config", is_flag=True, help="기본 설정(YAML)을 출력하고 종료")
@click.option("-l", "--label-only", is_flag=True, help="라벨(1열)만 중복 제거하여 출력")
@click.option("-w", "--max-workers", default=20, show_default=True, type=click.IntRange(1, 100), help="최대 동시 스레드 수")
@click.option("-v", "--verbose", count=True, help="로그 상세도 (-v: INFO, -vv: DEBUG)")
@click.version_option(version=VERSION, prog_name="cwm")
@click.pass_context
def cli(
    ctx: click.Context,
    profile: str | None,
    region: str,
    config_path: str,
    print_config: bool,
    label_only: bool,
    max_workers: int,
    verbose: int,
) -> None:
    """CloudWatch 메트릭 수집기

    설정된 네임스페이스별로 메트릭을 내보내는 리소스를 찾아
    "라벨 메트릭 unix시각 값" 형식으로 출력합니다.
    """
    setup_logging(verbose)

    if print_config:
        from core.metrics import default_config_text

        click.echo(default_config_text(), nl=False)
        return

    try:
        run(profile, region, config_path, label_only, max_workers)
    except MetricsError as e:
        logger.debug("실행 중단", exc_info=True)
        click.echo(ctx.get_usage(), err=True)
        print_error(format_error_for_user(e))
        ctx.exit(1)


def run(
    profile: str | None,
    region: str,
    config_path: str,
    label_only: bool = False,
    max_workers: int = 20,
) -> None:
    """설정 로드 -> client 생성 -> 서비스별 파이프라인 실행 -> 출력

    서비스 처리가 끝날 때마다 결과를 출력하므로,
    도중에 실패해도 앞선 서비스의 출력은 남습니다.
    """
    from core.auth import create_clients
    from core.metrics import MetricsPipeline, load_config
    from core.parallel import ParallelConfig

    services = load_config(config_path)
    clients = create_clients(profile=profile, region=region)
    pipeline = MetricsPipeline(clients, parallel_config=ParallelConfig(max_workers=max_workers))

    for result in pipeline.run(services, label_only=label_only):
        if label_only:
            echo_labels(result.labels)
        else:
            echo_rows(result.rows)


def main() -> None:
    """Entry point for the cwm CLI."""
    cli()


if __name__ == "__main__":
    main()
