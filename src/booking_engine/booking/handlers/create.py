import asyncio

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities.data_classes import (
    APIGatewayProxyEventV2,
    event_source,
)
from aws_lambda_powertools.utilities.typing import LambdaContext

from booking_engine.booking.applications.create_booking import (
    BookingResult,
    CreateBookingService,
)
from booking_engine.booking.domain.factory import BookingDetails, BookingFactory
from booking_engine.booking.domain.value_object import (
    BillingAddress,
    Contact,
    Passenger,
    Passport,
)
from booking_engine.booking.handlers.request_models import CreateBookingRequest
from booking_engine.booking.handlers.response_models import to_created_response
from booking_engine.booking.infrastructure.dynamodb_booking_repository import (
    DynamoDBBookingRepository,
)
from booking_engine.shared.config import get_settings
from booking_engine.shared.infrastructure.duffel_order_provider import (
    DuffelOrderProvider,
)
from booking_engine.shared.infrastructure.ses_notifier import SESNotifier
from booking_engine.shared.utils.card_cipher import CardCipher
from booking_engine.shared.utils.http_response import api_response, handle_exception
from booking_engine.shared.utils.rate_limiter import RateLimiter

logger = Logger()

settings = get_settings()
repository = DynamoDBBookingRepository(settings.TABLE_NAME)
factory = BookingFactory(
    cipher=CardCipher(settings.CARD_ENCRYPTION_KEY),
    reference_prefix=settings.BOOKING_REFERENCE_PREFIX,
)
notifier = SESNotifier(sender=settings.NOTIFICATION_SENDER)
rate_limiter = RateLimiter(max_requests=20)


@logger.inject_lambda_context
@event_source(data_class=APIGatewayProxyEventV2)
def lambda_handler(event: APIGatewayProxyEventV2, context: LambdaContext) -> dict:
    """予約作成 Lambda Handler"""

    try:
        rate_limiter.check(event.request_context.http.source_ip)
        request = CreateBookingRequest.model_validate(event.json_body or {})
        logger.info(
            "Received create booking request", extra={"offer_id": request.offer_id}
        )

        result = asyncio.run(_create(_to_booking_details(request)))
        return api_response(201, to_created_response(result))

    except Exception as e:
        return handle_exception(e, logger)


async def _create(details: BookingDetails) -> BookingResult:
    async with DuffelOrderProvider.from_settings(settings) as provider:
        service = CreateBookingService(
            repository=repository,
            provider=provider,
            factory=factory,
            notifier=notifier if settings.NOTIFICATION_SENDER else None,
            default_passport_country=settings.DEFAULT_PASSPORT_COUNTRY,
        )
        return await service.create(details)


def _to_booking_details(request: CreateBookingRequest) -> BookingDetails:
    """リクエストボディから BookingDetails を構築する"""

    details: BookingDetails = {
        "offer_id": request.offer_id,
        "contact": Contact(email=request.contact.email, phone=request.contact.phone),
        "passengers": [
            Passenger(
                type=p.type,
                given_name=p.given_name.strip(),
                middle_name=p.middle_name,
                family_name=p.family_name.strip(),
                gender=p.gender,
                born_on=p.born_on,
                passport=(
                    Passport(
                        number=p.passport_number,
                        expires_on=p.passport_expiry,
                        issuing_country=p.passport_country,
                    )
                    if p.passport_number and p.passport_expiry
                    else None
                ),
                email=p.email,
                phone=p.phone,
                remote_id=p.id,
            )
            for p in request.passengers
        ],
        "flight": {
            "airline": request.flight_details.airline,
            "flight_number": request.flight_details.flight_number,
            "route": request.flight_details.route,
            "departure_date": request.flight_details.departure_date,
            "arrival_date": request.flight_details.arrival_date,
            "duration": request.flight_details.duration,
            "flight_type": request.flight_details.flight_type,
            "logo_url": request.flight_details.logo_url,
        },
        "currency": request.pricing.currency,
        "total_amount": request.pricing.total_amount,
        "card": None,
    }

    if request.payment is not None:
        address = request.payment.billing_address
        details["card"] = {
            "card_name": request.payment.card_name,
            "card_number": request.payment.card_number,
            "expiry_date": request.payment.expiry_date,
            "billing_address": BillingAddress(
                street=address.street,
                city=address.city,
                state=address.state,
                zip_code=address.zip_code,
                country=address.country,
            ),
        }
    return details
