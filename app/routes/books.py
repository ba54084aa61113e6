from fastapi import APIRouter, Depends, status
from app.dependencies import get_book_service
from app.schemas.book import BookCreate, BookUpdate, BookResponse
from app.services.books import BookService

router = APIRouter(prefix="/api/v1/books", tags=["Books"])

@router.post("/", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
def create_book(book_data: BookCreate, books: BookService = Depends(get_book_service)):
    """Add a book to the catalogue; it starts out available."""
    book = books.create(book_data.title, book_data.author, book_data.isbn)
    return BookResponse.model_validate(book)

@router.get("/{book_id}", response_model=BookResponse)
def get_book(book_id: int, books: BookService = Depends(get_book_service)):
    """Get book details by ID."""
    return BookResponse.model_validate(books.get(book_id))

@router.put("/{book_id}", response_model=BookResponse)
def update_book(book_id: int, book_data: BookUpdate, books: BookService = Depends(get_book_service)):
    book = books.update(
        book_id,
        book_data.title,
        book_data.author,
        book_data.isbn,
        book_data.availability_status,
    )
    return BookResponse.model_validate(book)

@router.delete("/{book_id}")
def delete_book(book_id: int, books: BookService = Depends(get_book_service)):
    books.delete(book_id)
    return {"message": "Book deleted successfully"}
