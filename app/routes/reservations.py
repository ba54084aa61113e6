from fastapi import APIRouter, Depends, status
from app.dependencies import get_lending_service
from app.schemas.reservation import ReserveRequest, ReservationResponse
from app.services.lending import LendingService

router = APIRouter(prefix="/api/v1/reservations", tags=["Reservations"])

@router.post("/", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
def reserve_book(
    reservation_data: ReserveRequest,
    lending: LendingService = Depends(get_lending_service)
):
    """Place a hold on a book for a user."""
    reservation = lending.reserve(reservation_data.user_id, reservation_data.book_id)
    return ReservationResponse.model_validate(reservation)

@router.delete("/{reservation_id}")
def cancel_reservation(
    reservation_id: int,
    lending: LendingService = Depends(get_lending_service)
):
    lending.cancel_reservation(reservation_id)
    return {"message": "Reservation cancelled successfully"}
