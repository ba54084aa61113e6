from pydantic import BaseModel

class PopularBook(BaseModel):
    book_id: int
    title: str
    borrow_count: int
