import asyncio

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from booking_engine.booking.domain.value_object import BookingId
from booking_engine.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from booking_engine.payment.applications.tokenize_card import TokenizeCardService
from booking_engine.payment.domain.factory import CardDetailsFactory
from booking_engine.payment.domain.value_object import CardAuthorization
from booking_engine.payment.handlers.request_models import TokenizeCardRequest
from booking_engine.payment.handlers.response_models import to_authorization_response
from booking_engine.shared.config import get_settings
from booking_engine.shared.domain.exception import ValidationException
from booking_engine.shared.infrastructure.duffel_order_provider import (
    DuffelOrderProvider,
)
from booking_engine.shared.utils.card_cipher import CardCipher
from booking_engine.shared.utils.http_response import api_response, handle_exception
from booking_engine.shared.utils.rate_limiter import RateLimiter

logger = Logger()

settings = get_settings()
repository = DynamoDBBookingRepository(settings.TABLE_NAME)
card_factory = CardDetailsFactory(CardCipher(settings.CARD_ENCRYPTION_KEY))
rate_limiter = RateLimiter(max_requests=5)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEventV2)
def lambda_handler(event: APIGatewayProxyEventV2, context: LambdaContext) -> dict:
    """カードトークン化・3DS 判定 Lambda Handler"""

    try:
        rate_limiter.check(event.request_context.http.source_ip)
        booking_id = (event.path_parameters or {}).get("booking_id")
        if not booking_id:
            raise ValidationException("booking_id is required")
        request = TokenizeCardRequest.model_validate(event.json_body or {})

        logger.info(
            "Received card tokenization request", extra={"booking_id": booking_id}
        )
        authorization = asyncio.run(_tokenize(BookingId(value=booking_id), request))
        return api_response(200, to_authorization_response(authorization))

    except Exception as e:
        return handle_exception(e, logger)


async def _tokenize(
    booking_id: BookingId, request: TokenizeCardRequest
) -> CardAuthorization:
    async with DuffelOrderProvider.from_settings(settings) as provider:
        service = TokenizeCardService(
            repository=repository, provider=provider, card_factory=card_factory
        )
        return await service.tokenize(
            booking_id, request.cvv, multi_use=request.multi_use
        )
