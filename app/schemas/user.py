from pydantic import BaseModel
from typing import Optional

class UserCreate(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""
    role: Optional[str] = None

class UserUpdate(BaseModel):
    name: str = ""
    email: str = ""
    role: Optional[str] = None

class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    
    class Config:
        from_attributes = True
