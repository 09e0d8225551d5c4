import json

from aws_cdk import RemovalPolicy
from aws_cdk import aws_secretsmanager as secretsmanager
from constructs import Construct


class Secrets(Construct):
    """アプリケーションシークレットを管理する Construct

    カード暗号鍵はデプロイ時に生成する。
    Duffel のトークンと Webhook シークレットはデプロイ後にコンソールまたは CLI で設定する。
    """

    def __init__(self, scope: Construct, id: str) -> None:
        super().__init__(scope, id)

        self.app_secret = secretsmanager.Secret(
            self,
            "AppSecret",
            description="Flight booking engine provider credentials and card key",
            generate_secret_string=secretsmanager.SecretStringGenerator(
                secret_string_template=json.dumps(
                    {"DUFFEL_ACCESS_TOKEN": "", "DUFFEL_WEBHOOK_SECRET": ""}
                ),
                generate_string_key="CARD_ENCRYPTION_KEY",
                password_length=32,
                exclude_punctuation=True,
            ),
            # 鍵を失うと保存済みカード情報を復号できない
            removal_policy=RemovalPolicy.RETAIN,
        )
