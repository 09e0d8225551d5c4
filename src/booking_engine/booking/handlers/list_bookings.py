import asyncio

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from booking_engine.booking.applications.query_bookings import (
    BookingPage,
    QueryBookingsService,
)
from booking_engine.booking.applications.sync_booking import SyncBookingService
from booking_engine.booking.handlers.request_models import ListBookingsRequest
from booking_engine.booking.handlers.response_models import to_list_response
from booking_engine.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from booking_engine.shared.config import get_settings
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
    """予約一覧取得 Lambda Handler（ページ内の予約をまとめて照合する）"""

    try:
        rate_limiter.check(event.request_context.http.source_ip)
        request = ListBookingsRequest.model_validate(
            event.query_string_parameters or {}
        )
        logger.info(
            "Listing bookings", extra={"page": request.page, "limit": request.limit}
        )

        page = asyncio.run(_list(request.page, request.limit))
        return api_response(200, to_list_response(page, cipher))

    except Exception as e:
        return handle_exception(e, logger)


async def _list(page: int, limit: int) -> BookingPage:
    async with DuffelOrderProvider.from_settings(settings) as provider:
        service = QueryBookingsService(
            repository=repository,
            sync_service=SyncBookingService(
                repository, provider, concurrency=settings.SYNC_CONCURRENCY
            ),
        )
        return await service.list_page(page, limit)
