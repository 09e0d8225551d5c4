import json
from functools import lru_cache

import boto3
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Secrets Manager のシークレット（JSON）から読み込む項目
SECRET_FIELDS = (
    "DUFFEL_ACCESS_TOKEN",
    "DUFFEL_WEBHOOK_SECRET",
    "CARD_ENCRYPTION_KEY",
)


class Settings(BaseSettings):
    """環境変数から読み込むアプリケーション設定"""

    TABLE_NAME: str = "FlightBookingTable"

    # 設定時は SECRET_FIELDS をこのシークレットの値で上書きする
    APP_SECRET_ARN: str = ""

    DUFFEL_ACCESS_TOKEN: str = ""
    DUFFEL_API_URL: str = "https://api.duffel.com"
    DUFFEL_VAULT_URL: str = "https://api.duffel.cards"
    DUFFEL_VERSION: str = "v2"
    DUFFEL_WEBHOOK_SECRET: str = ""

    # AES-256 鍵（UTF-8 で 32 バイト）
    CARD_ENCRYPTION_KEY: str = ""

    BOOKING_REFERENCE_PREFIX: str = Field(default="FB", pattern=r"^[A-Z]{2,5}$")
    DEFAULT_PASSPORT_COUNTRY: str = "BD"

    NOTIFICATION_SENDER: str = ""

    VAULT_TIMEOUT_SECONDS: float = 8.0
    PROVIDER_TIMEOUT_SECONDS: float = 30.0
    SYNC_CONCURRENCY: int = Field(default=5, ge=1)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


def load_secret_values(secret_arn: str) -> dict[str, str]:
    """シークレットの JSON から SECRET_FIELDS のうち値のある項目を返す"""
    client = boto3.client("secretsmanager")
    response = client.get_secret_value(SecretId=secret_arn)
    values = json.loads(response["SecretString"])
    return {key: str(values[key]) for key in SECRET_FIELDS if values.get(key)}


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    if settings.APP_SECRET_ARN:
        return settings.model_copy(update=load_secret_values(settings.APP_SECRET_ARN))
    return settings
