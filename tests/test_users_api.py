from tests.helpers import add_book, add_review, signup


def test_signup_signs_the_user_in(client):
    headers = signup(client, "Olive")

    session = client.get("/session", headers=headers).json()

    assert session["user"]["email"] == "olive@bookreview.io"
    assert client.get("/session").json() == {"user": None}


def test_signup_with_taken_email(client):
    signup(client, "Olive")

    response = client.post("/signup", json={"email": "olive@bookreview.io", "password": "other123", "name": "Imposter"})

    assert response.status_code == 409
    assert response.json()["kind"] == "duplicate_account"


def test_signup_validation(client):
    short = client.post("/signup", json={"email": "ann@bookreview.io", "password": "123", "name": "Ann"})
    not_an_email = client.post("/signup", json={"email": "ann", "password": "secret123", "name": "Ann"})

    assert short.status_code == 422
    assert not_an_email.status_code == 422


def test_login(client):
    signup(client, "Olive")

    wrong = client.post("/login", json={"email": "olive@bookreview.io", "password": "nope-nope"})
    right = client.post("/login", json={"email": "olive@bookreview.io", "password": "secret123"})

    assert wrong.status_code == 401
    assert wrong.json() == {"detail": "Invalid email or password", "kind": "unauthorized"}
    assert right.status_code == 200
    assert right.json()["token_type"] == "bearer"
    assert right.json()["user"]["email"] == "olive@bookreview.io"


def test_logout_ends_the_session(client):
    headers = signup(client, "Olive")

    response = client.post("/logout", headers=headers)

    assert response.status_code == 200
    assert client.get("/session", headers=headers).json() == {"user": None}
    assert client.get("/profile", headers=headers).status_code == 401
    assert client.post("/books", json={"title": "Emma", "author": "Jane Austen"}, headers=headers).status_code == 401


def test_profile_requires_sign_in(client):
    assert client.get("/profile").status_code == 401


def test_profile_summary_and_tabs(client):
    olive = signup(client, "Olive")
    ann = signup(client, "Ann")
    emma = add_book(client, olive, title="Emma", author="Jane Austen")
    hobbit = add_book(client, olive)
    add_review(client, ann, emma["id"], 4, "Witty")
    add_review(client, ann, hobbit["id"], 5)

    olive_view = client.get("/profile", headers=olive).json()
    ann_view = client.get("/profile", headers=ann).json()

    assert olive_view["profile"]["name"] == "Olive"
    assert olive_view["email"] == "olive@bookreview.io"
    assert olive_view["books_added"] == 2
    assert olive_view["reviews_written"] == 0
    assert olive_view["average_rating_given_display"] == "0.0"
    assert [b["title"] for b in olive_view["books"]] == ["The Hobbit", "Emma"]
    assert olive_view["books"][1]["rating"]["average_rating"] == 4.0

    assert ann_view["books_added"] == 0
    assert ann_view["reviews_written"] == 2
    assert ann_view["average_rating_given"] == 4.5
    assert ann_view["average_rating_given_display"] == "4.5"
    assert [(r["book_title"], r["rating"]) for r in ann_view["reviews"]] == [("The Hobbit", 5), ("Emma", 4)]


def test_profile_shows_renamed_book(client):
    olive = signup(client, "Olive")
    ann = signup(client, "Ann")
    book = add_book(client, olive)
    add_review(client, ann, book["id"], 3)
    assert client.get("/profile", headers=ann).json()["reviews"][0]["book_title"] == "The Hobbit"

    client.put(f"/books/{book['id']}", json={"title": "There and Back Again", "author": "J. R. R. Tolkien"}, headers=olive)

    assert client.get("/profile", headers=ann).json()["reviews"][0]["book_title"] == "There and Back Again"
