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
from booking_engine.booking.handlers.request_models import LookupBookingRequest
from booking_engine.booking.handlers.response_models import to_status_response
from booking_engine.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from booking_engine.shared.config import get_settings
from booking_engine.shared.infrastructure.duffel_order_provider import (
    DuffelOrderProvider,
)
from booking_engine.shared.utils.http_response import api_response, handle_exception
from booking_engine.shared.utils.rate_limiter import RateLimiter

logger = Logger()

settings = get_settings()
repository = DynamoDBBookingRepository(settings.TABLE_NAME)
rate_limiter = RateLimiter(max_requests=20)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEventV2)
def lambda_handler(event: APIGatewayProxyEventV2, context: LambdaContext) -> dict:
    """公開予約照会 Lambda Handler（PNR + メールアドレス）"""

    try:
        rate_limiter.check(event.request_context.http.source_ip)
        request = LookupBookingRequest.model_validate(event.json_body or {})
        logger.info("Looking up booking", extra={"pnr": request.pnr})

        booking = asyncio.run(_lookup(request.pnr, request.email))
        return api_response(200, to_status_response(booking))

    except Exception as e:
        return handle_exception(e, logger)


async def _lookup(pnr: str, email: str) -> Booking:
    async with DuffelOrderProvider.from_settings(settings) as provider:
        service = QueryBookingsService(
            repository=repository,
            sync_service=SyncBookingService(repository, provider),
        )
        return await service.lookup(pnr, email)
