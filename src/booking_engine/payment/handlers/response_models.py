from typing import Any

from pydantic import BaseModel

from booking_engine.payment.applications.issue_ticket import IssueResult
from booking_engine.payment.domain.value_object import CardAuthorization


class SuccessResponse(BaseModel):
    """成功レスポンスモデル"""

    success: bool = True
    message: str | None = None
    data: Any


def to_authorization_response(authorization: CardAuthorization) -> dict:
    return SuccessResponse(data=authorization.to_dict()).model_dump(mode="json")


def to_issue_response(result: IssueResult) -> dict:
    if result.already_issued:
        message = "Ticket is already issued!"
    elif result.documents:
        message = "Ticket Issued Successfully!"
    else:
        message = "Payment accepted. Tickets will be available shortly."
    return SuccessResponse(message=message, data=result.to_dict()).model_dump(
        mode="json"
    )
