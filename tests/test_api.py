from datetime import timedelta

from app.models import User
from app.services.security import pwd_context
from app.utils.timezone import today


def create_book(client, title="Dune"):
    response = client.post("/api/v1/books/", json={"title": title, "author": "Frank Herbert", "isbn": "9780441013593"})
    assert response.status_code == 201
    return response.json()


def create_user(client, email="u1@example.com"):
    response = client.post("/api/v1/users/", json={"name": "Reader", "email": email, "password": "secret"})
    assert response.status_code == 201
    return response.json()


def test_health_and_hello(client):
    assert client.get("/api/health").json() == {"status": "healthy"}
    response = client.get("/helloworld")
    assert response.status_code == 200
    assert response.text == "Hello world!"


def test_end_to_end_reserve_borrow_return(client, filler):
    book = create_book(client)
    assert book["availability_status"] == "available"
    u1 = create_user(client, "u1@example.com")
    u2 = create_user(client, "u2@example.com")

    response = client.post("/api/v1/reservations/", json={"user_id": u1["id"], "book_id": book["id"]})
    assert response.status_code == 201

    response = client.post("/api/v1/loans/", json={"user_id": u2["id"], "book_id": book["id"]})
    assert response.status_code == 409

    response = client.post("/api/v1/loans/", json={"user_id": u1["id"], "book_id": book["id"]})
    assert response.status_code == 201
    loan = response.json()
    assert loan["loan_date"] == today().isoformat()
    assert loan["due_date"] == (today() + timedelta(days=14)).isoformat()
    assert loan["return_date"] is None

    returned_on = (today() + timedelta(days=20)).isoformat()
    response = client.put(f"/api/v1/loans/{loan['id']}", json={"return_date": returned_on})
    assert response.status_code == 200
    assert response.json()["return_date"] == returned_on

    response = client.get("/api/v1/reports/overdue-loans")
    assert response.status_code == 200
    assert loan["id"] in [entry["id"] for entry in response.json()]
    filler.drain()


def test_borrow_validation_error_body(client):
    response = client.post("/api/v1/loans/", json={"user_id": 0, "book_id": 1})
    assert response.status_code == 422
    assert response.json() == {"field": "user_id", "message": "invalid id"}


def test_return_unknown_loan(client):
    response = client.put("/api/v1/loans/77", json={"return_date": "2024-01-01"})
    assert response.status_code == 404


def test_return_date_is_a_calendar_date(client):
    response = client.put("/api/v1/loans/1", json={"return_date": "yesterday"})
    assert response.status_code == 422


def test_cancel_reservation(client):
    book = create_book(client)
    user = create_user(client)
    reservation = client.post("/api/v1/reservations/", json={"user_id": user["id"], "book_id": book["id"]}).json()

    response = client.delete(f"/api/v1/reservations/{reservation['id']}")
    assert response.status_code == 200
    # Cancelling again is silent
    assert client.delete(f"/api/v1/reservations/{reservation['id']}").status_code == 200

    other = create_user(client, "other@example.com")
    response = client.post("/api/v1/loans/", json={"user_id": other["id"], "book_id": book["id"]})
    assert response.status_code == 201


def test_popular_books_report(client, filler):
    book = create_book(client)
    user = create_user(client)
    client.post("/api/v1/loans/", json={"user_id": user["id"], "book_id": book["id"]})

    response = client.get("/api/v1/reports/popular-books")
    filler.drain()

    assert response.status_code == 200
    assert response.json() == [{"book_id": book["id"], "title": "Dune", "borrow_count": 1}]


def test_user_activity_report(client):
    book = create_book(client)
    user = create_user(client)
    client.post("/api/v1/loans/", json={"user_id": user["id"], "book_id": book["id"]})

    response = client.get(f"/api/v1/reports/user-activity/{user['id']}")

    assert response.status_code == 200
    entries = response.json()
    assert len(entries) == 1
    assert entries[0]["book_id"] == book["id"]
    assert "user_id" not in entries[0]

    assert client.get("/api/v1/reports/user-activity/0").status_code == 422


def test_book_crud(client):
    book = create_book(client)

    assert client.get(f"/api/v1/books/{book['id']}").json()["title"] == "Dune"

    response = client.put(
        f"/api/v1/books/{book['id']}",
        json={"title": "Dune Messiah", "author": "Frank Herbert", "isbn": "9780593098233"},
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Dune Messiah"
    assert response.json()["availability_status"] == "available"

    response = client.put(
        f"/api/v1/books/{book['id']}",
        json={"title": "Dune Messiah", "author": "Frank Herbert", "isbn": "1", "availability_status": "lost"},
    )
    assert response.status_code == 422
    assert response.json()["field"] == "availability_status"

    assert client.delete(f"/api/v1/books/{book['id']}").status_code == 200
    assert client.get(f"/api/v1/books/{book['id']}").status_code == 404


def test_book_create_requires_fields(client):
    response = client.post("/api/v1/books/", json={"title": "Dune", "author": ""})
    assert response.status_code == 422
    assert response.json() == {"field": "author", "message": "required"}


def test_user_crud(client, db):
    user = create_user(client)
    assert user["role"] == "member"
    assert "password" not in user

    stored = db.get(User, user["id"])
    assert stored.password != "secret"
    assert pwd_context.verify("secret", stored.password)

    response = client.put(f"/api/v1/users/{user['id']}", json={"name": "Renamed", "email": "new@example.com"})
    assert response.status_code == 200
    assert response.json()["email"] == "new@example.com"

    assert client.delete(f"/api/v1/users/{user['id']}").status_code == 200
    assert client.get(f"/api/v1/users/{user['id']}").status_code == 404


def test_user_validation(client):
    response = client.post("/api/v1/users/", json={"name": "A", "email": "not-an-email", "password": "secret"})
    assert response.status_code == 422
    assert response.json()["field"] == "email"

    response = client.post("/api/v1/users/", json={"name": "A", "email": "a@example.com", "password": "ab"})
    assert response.status_code == 422
    assert response.json() == {"field": "password", "message": "too short"}


def test_duplicate_email_conflict(client):
    create_user(client, "dup@example.com")
    response = client.post("/api/v1/users/", json={"name": "B", "email": "dup@example.com", "password": "secret"})
    assert response.status_code == 409


def test_lent_book_and_borrower_cannot_be_deleted(client):
    book = create_book(client)
    user = create_user(client)
    loan = client.post("/api/v1/loans/", json={"user_id": user["id"], "book_id": book["id"]}).json()
    client.put(f"/api/v1/loans/{loan['id']}", json={"return_date": today().isoformat()})

    response = client.delete(f"/api/v1/books/{book['id']}")
    assert response.status_code == 409
    assert client.delete(f"/api/v1/users/{user['id']}").status_code == 409

    entries = client.get(f"/api/v1/reports/user-activity/{user['id']}").json()
    assert [entry["id"] for entry in entries] == [loan["id"]]
