from sqlalchemy import Column, String, Integer
from sqlalchemy.orm import relationship
from app.database import Base

class User(Base):
    __tablename__ = "users"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # bcrypt hash
    role = Column(String(50), default='member', nullable=False)
    
    # Relationships
    loans = relationship("Loan", back_populates="user", passive_deletes="all")
    reservations = relationship("Reservation", back_populates="user", cascade="all, delete-orphan")
