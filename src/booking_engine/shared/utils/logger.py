from aws_lambda_powertools import Logger

from booking_engine.shared.domain.entity import AggregateRoot


def get_logger(service_name: str | None = None) -> Logger:
    """アプリケーション層用の子ロガーを取得する

    ハンドラで生成した Logger (POWERTOOLS_SERVICE_NAME) の子として登録され、
    inject_lambda_context が付与したキーをそのまま引き継ぐ。
    """
    return Logger(service=service_name, child=True)


def log_domain_events(logger: Logger, aggregate: AggregateRoot) -> None:
    """集約に蓄積されたドメインイベントを構造化ログとして出力する"""
    for event in aggregate.pull_events():
        fields = {k: v for k, v in vars(event).items() if k != "occurred_at"}
        logger.info(event.name, extra={**fields, "occurred_at": event.occurred_at})
