from aws_cdk import aws_apigatewayv2 as apigwv2
from aws_cdk import aws_apigatewayv2_authorizers as authorizers
from aws_cdk import aws_apigatewayv2_integrations as integrations
from aws_cdk import aws_lambda as _lambda
from constructs import Construct


class Api(Construct):
    """HTTP API Construct"""

    def __init__(
        self,
        scope: Construct,
        id: str,
        create_booking: _lambda.IFunction,
        get_booking: _lambda.IFunction,
        list_bookings: _lambda.IFunction,
        lookup_booking: _lambda.IFunction,
        override_status: _lambda.IFunction,
        provider_webhook: _lambda.IFunction,
        tokenize_card: _lambda.IFunction,
        issue_ticket: _lambda.IFunction,
    ) -> None:
        super().__init__(scope, id)

        self.http_api = apigwv2.HttpApi(
            self,
            "BookingHttpApi",
            api_name="Flight Booking API",
            cors_preflight=apigwv2.CorsPreflightOptions(
                allow_origins=["*"],
                allow_methods=[apigwv2.CorsHttpMethod.ANY],
                allow_headers=["content-type", "authorization"],
            ),
        )

        public_routes = [
            ("/bookings", apigwv2.HttpMethod.POST, create_booking),
            ("/bookings/lookup", apigwv2.HttpMethod.POST, lookup_booking),
            ("/bookings/{booking_id}/tickets", apigwv2.HttpMethod.POST, issue_ticket),
            ("/webhooks/provider", apigwv2.HttpMethod.POST, provider_webhook),
        ]
        for path, method, fn in public_routes:
            self._add_route(path, method, fn)

        # 管理者向けルートは IAM 認証のみ許可
        admin_routes = [
            ("/bookings", apigwv2.HttpMethod.GET, list_bookings),
            ("/bookings/{booking_id}", apigwv2.HttpMethod.GET, get_booking),
            (
                "/bookings/{booking_id}/card-token",
                apigwv2.HttpMethod.POST,
                tokenize_card,
            ),
            (
                "/bookings/{booking_id}/status",
                apigwv2.HttpMethod.PATCH,
                override_status,
            ),
        ]
        iam_authorizer = authorizers.HttpIamAuthorizer()
        for path, method, fn in admin_routes:
            self._add_route(path, method, fn, authorizer=iam_authorizer)

    def _add_route(
        self,
        path: str,
        method: apigwv2.HttpMethod,
        fn: _lambda.IFunction,
        authorizer: apigwv2.IHttpRouteAuthorizer | None = None,
    ) -> None:
        integration_id = f"{fn.node.id}Integration"
        self.http_api.add_routes(
            path=path,
            methods=[method],
            integration=integrations.HttpLambdaIntegration(integration_id, fn),
            authorizer=authorizer,
        )
