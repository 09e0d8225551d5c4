import json

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from booking_engine.booking.applications.apply_order_event import (
    ApplyOrderEventService,
)
from booking_engine.booking.domain.exception import InvalidWebhookException
from booking_engine.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from booking_engine.shared.config import get_settings
from booking_engine.shared.domain.exception import ValidationException
from booking_engine.shared.utils.http_response import api_response, handle_exception
from booking_engine.shared.utils.webhook_signature import (
    InvalidSignatureError,
    verify_signature,
)

logger = Logger()

settings = get_settings()
repository = DynamoDBBookingRepository(settings.TABLE_NAME)
service = ApplyOrderEventService(repository=repository)

SIGNATURE_HEADER = "x-duffel-signature"


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEventV2)
def lambda_handler(event: APIGatewayProxyEventV2, context: LambdaContext) -> dict:
    """プロバイダ Webhook 受信 Lambda Handler"""

    try:
        body = event.decoded_body or ""
        try:
            verify_signature(
                event.headers.get(SIGNATURE_HEADER),
                body,
                settings.DUFFEL_WEBHOOK_SECRET,
            )
        except InvalidSignatureError as e:
            raise InvalidWebhookException(str(e)) from e

        try:
            payload = json.loads(body)
        except json.JSONDecodeError as e:
            raise ValidationException("Invalid JSON payload") from e

        event_type = payload.get("type")
        data = payload.get("data")
        if not event_type or not isinstance(data, dict):
            raise ValidationException("Invalid event payload (missing type or data)")

        logger.info("Received provider webhook", extra={"event_type": event_type})
        outcome = service.apply(event_type, data)
        return api_response(200, {"received": True, "outcome": outcome})

    except Exception as e:
        return handle_exception(e, logger)
