import asyncio

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from booking_engine.booking.applications.query_bookings import QueryBookingsService
from booking_engine.booking.applications.sync_booking import SyncBookingService
from booking_engine.booking.domain.entity import Booking
from booking_engine.booking.domain.value_object import BookingId
from booking_engine.booking.handlers.response_models import to_detail_response
from booking_engine.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
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
cipher = CardCipher(settings.CARD_ENCRYPTION_KEY)
rate_limiter = RateLimiter(max_requests=20)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEventV2)
def lambda_handler(event: APIGatewayProxyEventV2, context: LambdaContext) -> dict:
    """予約詳細取得 Lambda Handler（取得時にプロバイダと照合する）"""

    try:
        rate_limiter.check(event.request_context.http.source_ip)
        booking_id = (event.path_parameters or {}).get("booking_id")
        if not booking_id:
            raise ValidationException("booking_id is required")

        logger.info("Fetching booking", extra={"booking_id": booking_id})
        booking = asyncio.run(_get(BookingId(value=booking_id)))
        return api_response(200, to_detail_response(booking, cipher))

    except Exception as e:
        return handle_exception(e, logger)


async def _get(booking_id: BookingId) -> Booking:
    async with DuffelOrderProvider.from_settings(settings) as provider:
        service = QueryBookingsService(
            repository=repository,
            sync_service=SyncBookingService(repository, provider),
        )
        return await service.get(booking_id)
