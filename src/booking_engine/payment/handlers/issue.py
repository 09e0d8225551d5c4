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
from booking_engine.payment.applications.issue_ticket import (
    IssueResult,
    IssueTicketService,
)
from booking_engine.payment.domain.factory import CardDetailsFactory
from booking_engine.payment.handlers.request_models import IssueTicketRequest
from booking_engine.payment.handlers.response_models import to_issue_response
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
    """発券（決済実行）Lambda Handler"""

    try:
        rate_limiter.check(event.request_context.http.source_ip)
        booking_id = (event.path_parameters or {}).get("booking_id")
        if not booking_id:
            raise ValidationException("booking_id is required")
        request = IssueTicketRequest.model_validate(event.json_body or {})

        logger.info(
            "Received issue ticket request",
            extra={
                "booking_id": booking_id,
                "payment_method": request.payment_method.value,
            },
        )
        result = asyncio.run(_issue(BookingId(value=booking_id), request))
        return api_response(200, to_issue_response(result))

    except Exception as e:
        return handle_exception(e, logger)


async def _issue(booking_id: BookingId, request: IssueTicketRequest) -> IssueResult:
    async with DuffelOrderProvider.from_settings(settings) as provider:
        service = IssueTicketService(
            repository=repository, provider=provider, card_factory=card_factory
        )
        return await service.issue(booking_id, request.payment_method, request.cvv)
