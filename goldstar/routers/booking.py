import logging
from typing import Optional
from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from goldstar.core.errors import DeliverySubmissionError, ValidationError
from goldstar.models.booking import BookingRequest, QuickBookingRequest
from goldstar.services.email import Mailer, NotificationService

logger = logging.getLogger("goldstar")

router = APIRouter()

def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer

def get_notification_service(request: Request, mailer: Mailer = Depends(get_mailer)) -> NotificationService:
    return NotificationService(mailer, request.app.state.settings.RECIPIENT_EMAIL)

@router.post("/send-email")
def send_booking_email(
    booking: Optional[BookingRequest] = Body(None),
    service: NotificationService = Depends(get_notification_service)
):
    booking = booking or BookingRequest()
    logger.info(f"Received booking request from {booking.email or 'unknown sender'}")
    try:
        service.send_booking_notification(booking)
    except DeliverySubmissionError as e:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to send email", "details": e.message}
        )
    return {"message": "Email sent successfully"}

@router.post("/quick-booking")
def send_quick_booking_email(
    booking: Optional[QuickBookingRequest] = Body(None),
    service: NotificationService = Depends(get_notification_service)
):
    booking = booking or QuickBookingRequest()
    logger.info(f"Received quick booking request from {booking.email or 'unknown sender'}")
    try:
        service.send_quick_booking_notification(booking.email, booking.phone)
    except ValidationError as e:
        return JSONResponse(status_code=400, content={"error": e.message})
    except DeliverySubmissionError as e:
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to send quick booking email", "details": e.message}
        )
    return {"message": "Quick booking email sent successfully"}
