from aws_cdk import CfnOutput, Stack
from constructs import Construct

from infra.constructs import Api, Database, Functions, Layers, Secrets

# CDK コンテキスト（cdk.json / -c）から Lambda 環境変数へ渡す設定
# 秘匿値は Secrets から読み込むためここには含めない
CONTEXT_ENVIRONMENT = {
    "BOOKING_REFERENCE_PREFIX": "bookingReferencePrefix",
    "NOTIFICATION_SENDER": "notificationSender",
}


class FlightBookingStack(Stack):
    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        database = Database(self, "Database")
        layers = Layers(self, "Layers")
        secrets = Secrets(self, "Secrets")

        fns = Functions(
            self,
            "Functions",
            table=database.table,
            common_layer=layers.common_layer,
            app_secret=secrets.app_secret,
            environment=self._context_environment(),
        )

        api = Api(
            self,
            "Api",
            create_booking=fns.create_booking,
            get_booking=fns.get_booking,
            list_bookings=fns.list_bookings,
            lookup_booking=fns.lookup_booking,
            override_status=fns.override_status,
            provider_webhook=fns.provider_webhook,
            tokenize_card=fns.tokenize_card,
            issue_ticket=fns.issue_ticket,
        )

        CfnOutput(self, "ApiUrl", value=api.http_api.api_endpoint)

    def _context_environment(self) -> dict[str, str]:
        environment = {}
        for env_name, context_key in CONTEXT_ENVIRONMENT.items():
            value = self.node.try_get_context(context_key)
            if value:
                environment[env_name] = str(value)
        return environment
