import datetime

from aws_cdk import Duration
from aws_cdk import aws_dynamodb as dynamodb
from aws_cdk import aws_iam as iam
from aws_cdk import aws_lambda as _lambda
from aws_cdk import aws_secretsmanager as secretsmanager
from constructs import Construct

HANDLER_PACKAGE = "booking_engine"


class Functions(Construct):
    """Lambda 関数を管理する Construct（エンドポイントごとに 1 関数）"""

    def __init__(
        self,
        scope: Construct,
        id: str,
        table: dynamodb.Table,
        common_layer: _lambda.LayerVersion,
        app_secret: secretsmanager.ISecret,
        environment: dict[str, str] | None = None,
    ) -> None:
        super().__init__(scope, id)
        self._table = table
        self._app_secret = app_secret
        self._common_layer = common_layer
        self._environment = environment or {}

        self.create_booking = self._create_function(
            "CreateBookingLambda", "booking.handlers.create", "booking-service"
        )
        self.get_booking = self._create_function(
            "GetBookingLambda", "booking.handlers.get_booking", "booking-service"
        )
        self.list_bookings = self._create_function(
            "ListBookingsLambda",
            "booking.handlers.list_bookings",
            "booking-service",
            timeout=Duration.seconds(60),
        )
        self.lookup_booking = self._create_function(
            "LookupBookingLambda", "booking.handlers.lookup_booking", "booking-service"
        )
        self.override_status = self._create_function(
            "OverrideStatusLambda", "booking.handlers.override_status", "admin-service"
        )
        self.provider_webhook = self._create_function(
            "ProviderWebhookLambda", "booking.handlers.webhook", "booking-service"
        )
        self.tokenize_card = self._create_function(
            "TokenizeCardLambda", "payment.handlers.tokenize", "payment-service"
        )
        self.issue_ticket = self._create_function(
            "IssueTicketLambda", "payment.handlers.issue", "payment-service"
        )

        for fn in self.all_functions:
            table.grant_read_write_data(fn)
            app_secret.grant_read(fn)

        self.create_booking.add_to_role_policy(
            iam.PolicyStatement(actions=["ses:SendEmail"], resources=["*"])
        )

    @property
    def all_functions(self) -> list[_lambda.Function]:
        return [
            self.create_booking,
            self.get_booking,
            self.list_bookings,
            self.lookup_booking,
            self.override_status,
            self.provider_webhook,
            self.tokenize_card,
            self.issue_ticket,
        ]

    def _create_function(
        self,
        id: str,
        module: str,
        service_name: str,
        timeout: Duration = Duration.seconds(30),
    ) -> _lambda.Function:
        return _lambda.Function(
            self,
            id,
            runtime=_lambda.Runtime.PYTHON_3_13,
            handler=f"{HANDLER_PACKAGE}.{module}.lambda_handler",
            code=_lambda.Code.from_asset("src"),
            layers=[self._common_layer],
            timeout=timeout,
            memory_size=512,
            environment={
                **self._environment,
                "TABLE_NAME": self._table.table_name,
                "APP_SECRET_ARN": self._app_secret.secret_arn,
                "POWERTOOLS_SERVICE_NAME": service_name,
                "DEPLOY_TIME": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            },
        )
