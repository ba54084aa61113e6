from pydantic import BaseModel

class ReserveRequest(BaseModel):
    user_id: int
    book_id: int

class ReservationResponse(BaseModel):
    id: int
    user_id: int
    book_id: int
    
    class Config:
        from_attributes = True
