from sqlalchemy import Column, String, Integer, CheckConstraint
from sqlalchemy.orm import relationship
from app.database import Base

AVAILABLE = "available"
BORROWED = "borrowed"
AVAILABILITY_STATUSES = (AVAILABLE, BORROWED)

class Book(Base):
    __tablename__ = "books"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    isbn = Column(String(20), nullable=False)
    availability_status = Column(String(50), default=AVAILABLE, nullable=False, index=True)
    
    # Relationships
    loans = relationship("Loan", back_populates="book", passive_deletes="all")
    reservation = relationship("Reservation", back_populates="book", uselist=False, cascade="all, delete-orphan")
    
    __table_args__ = (
        CheckConstraint("availability_status IN ('available', 'borrowed')", name="chk_book_availability"),
    )
