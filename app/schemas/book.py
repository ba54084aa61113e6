from pydantic import BaseModel
from typing import Optional

class BookBase(BaseModel):
    title: str = ""
    author: str = ""
    isbn: str = ""

class BookCreate(BookBase):
    pass

class BookUpdate(BookBase):
    availability_status: Optional[str] = None

class BookResponse(BaseModel):
    id: int
    title: str
    author: str
    isbn: str
    availability_status: str
    
    class Config:
        from_attributes = True
