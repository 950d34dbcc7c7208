def signup(client, name, password="secret123"):
    response = client.post("/signup", json={
        "email": f"{name.lower()}@bookreview.io",
        "password": password,
        "name": name,
    })
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def add_book(client, headers, **overrides):
    payload = {
        "title": "The Hobbit",
        "author": "J. R. R. Tolkien",
        "description": "There and back again.",
        "genre": "Fantasy",
        "published_year": 1937,
    }
    payload.update(overrides)
    response = client.post("/books", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["book"]


def add_review(client, headers, book_id, rating, text=None):
    return client.post(f"/books/{book_id}/reviews", json={"rating": rating, "review_text": text}, headers=headers)
