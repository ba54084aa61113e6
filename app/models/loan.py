from sqlalchemy import Column, Date, Integer, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base

class Loan(Base):
    __tablename__ = "loans"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="RESTRICT"), nullable=False, index=True)
    loan_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    return_date = Column(Date, nullable=True)  # NULL while the book is still out
    # Loan rows are history: never deleted, and they pin their user and book
    
    # Relationships
    user = relationship("User", back_populates="loans")
    book = relationship("Book", back_populates="loans")
