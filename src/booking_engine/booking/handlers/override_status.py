from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from booking_engine.booking.applications.override_status import OverrideStatusService
from booking_engine.booking.domain.value_object import BookingId
from booking_engine.booking.handlers.request_models import OverrideStatusRequest
from booking_engine.booking.handlers.response_models import to_detail_response
from booking_engine.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from booking_engine.shared.config import get_settings
from booking_engine.shared.domain.exception import ValidationException
from booking_engine.shared.utils.card_cipher import CardCipher
from booking_engine.shared.utils.http_response import api_response, handle_exception

logger = Logger()

settings = get_settings()
repository = DynamoDBBookingRepository(settings.TABLE_NAME)
cipher = CardCipher(settings.CARD_ENCRYPTION_KEY)
service = OverrideStatusService(repository=repository)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEventV2)
def lambda_handler(event: APIGatewayProxyEventV2, context: LambdaContext) -> dict:
    """管理者ステータス上書き Lambda Handler

    ルートは IAM 認可で保護し、管理者のみ呼び出せる。
    """

    try:
        booking_id = (event.path_parameters or {}).get("booking_id")
        if not booking_id:
            raise ValidationException("booking_id is required")
        request = OverrideStatusRequest.model_validate(event.json_body or {})

        logger.info(
            "Received status override",
            extra={"booking_id": booking_id, "status": request.status.value},
        )
        booking = service.override(
            BookingId(value=booking_id), request.status, request.note
        )
        return api_response(200, to_detail_response(booking, cipher))

    except Exception as e:
        return handle_exception(e, logger)
