import asyncio

import pytest

from bookreview.BusinessObjects.models import BookFields
from bookreview.Helper.Exceptions import (
    DuplicateAccount, DuplicateReview, Forbidden, NotFound, Unauthorized, ValidationError,
)


def run(coro):
    return asyncio.run(coro)


def fields(title="Dune", author="Frank Herbert", **extra):
    return BookFields(title=title, author=author, **extra)


@pytest.fixture
def owner(repo):
    return run(repo.create_user("owner@bookreview.io", "secret123", "Olive"))


@pytest.fixture
def reader(repo):
    return run(repo.create_user("reader@bookreview.io", "secret123", "Remy"))


def test_twelve_books_in_pages_of_five(repo, owner):
    for n in range(12):
        run(repo.create_book(fields(title=f"Book {n}"), owner.id))

    pages = {page: run(repo.list_books(page, 5)) for page in (1, 3, 4)}

    assert [len(pages[p].items) for p in (1, 3, 4)] == [5, 2, 0]
    assert all(pages[p].total_count == 12 for p in pages)
    assert pages[1].items[0].title == "Book 11"
    assert pages[3].items[-1].title == "Book 0"


def test_list_items_carry_owner_name_and_rating(repo, owner, reader):
    book = run(repo.create_book(fields(), owner.id))
    run(repo.create_review(book.id, reader.id, 4, "Spice"))
    run(repo.create_review(book.id, owner.id, 5))

    item = run(repo.list_books(1, 5)).items[0]

    assert item.owner_name == "Olive"
    assert item.rating.average_rating == 4.5
    assert item.rating.review_count == 2
    assert item.rating.stars == 5


def test_search_is_case_insensitive_on_title_or_author(repo, owner):
    run(repo.create_book(fields(title="Emma", author="Jane Austen"), owner.id))
    run(repo.create_book(fields(title="The Hobbit", author="J. R. R. Tolkien"), owner.id))
    run(repo.create_book(fields(title="Austerlitz", author="W. G. Sebald"), owner.id))

    by_author = run(repo.list_books(1, 5, "tOLKIEN"))
    by_either = run(repo.list_books(1, 5, "AUST"))
    nothing = run(repo.list_books(1, 5, "Pratchett"))

    assert [b.title for b in by_author.items] == ["The Hobbit"]
    assert sorted(b.title for b in by_either.items) == ["Austerlitz", "Emma"]
    assert by_either.total_count == 2
    assert nothing.items == [] and nothing.total_count == 0


def test_search_wildcards_are_literal(repo, owner):
    run(repo.create_book(fields(title="100% Wolf"), owner.id))
    run(repo.create_book(fields(title="Persuasion", author="Jane Austen"), owner.id))

    result = run(repo.list_books(1, 5, "%"))

    assert [b.title for b in result.items] == ["100% Wolf"]


def test_invalid_page_is_rejected(repo):
    with pytest.raises(ValidationError):
        run(repo.list_books(0, 5))


def test_missing_book_is_not_found(repo):
    with pytest.raises(NotFound):
        run(repo.get_book(404))


def test_second_review_by_same_user_is_duplicate(repo, owner, reader):
    book = run(repo.create_book(fields(), owner.id))
    run(repo.create_review(book.id, reader.id, 3))

    with pytest.raises(DuplicateReview):
        run(repo.create_review(book.id, reader.id, 5, "changed my mind"))

    reviews = run(repo.list_reviews(book.id))
    assert len(reviews) == 1
    assert reviews[0].rating == 3


@pytest.mark.parametrize("rating", [None, 0, 6, -1])
def test_rating_outside_one_to_five_is_invalid(repo, owner, rating):
    book = run(repo.create_book(fields(), owner.id))

    with pytest.raises(ValidationError):
        run(repo.create_review(book.id, owner.id, rating))

    assert run(repo.list_reviews(book.id)) == []


def test_review_of_missing_book_is_not_found(repo, reader):
    with pytest.raises(NotFound):
        run(repo.create_review(999, reader.id, 4))


def test_reviews_newest_first_with_reviewer_name(repo, owner, reader):
    book = run(repo.create_book(fields(), owner.id))
    run(repo.create_review(book.id, owner.id, 2, "  "))
    run(repo.create_review(book.id, reader.id, 5, "Loved it"))

    reviews = run(repo.list_reviews(book.id))

    assert [(r.reviewer_name, r.rating) for r in reviews] == [("Remy", 5), ("Olive", 2)]
    assert reviews[1].review_text is None


def test_update_by_owner_keeps_owner(repo, owner):
    book = run(repo.create_book(fields(), owner.id))

    updated = run(repo.update_book(book.id, fields(title="Dune Messiah", published_year=1969), owner.id))

    assert updated.title == "Dune Messiah"
    assert updated.added_by == owner.id
    assert run(repo.get_book(book.id)).published_year == 1969


def test_non_owner_cannot_update_or_delete(repo, owner, reader):
    book = run(repo.create_book(fields(), owner.id))

    with pytest.raises(Forbidden):
        run(repo.update_book(book.id, fields(title="Stolen"), reader.id))
    with pytest.raises(Forbidden):
        run(repo.delete_book(book.id, reader.id))

    assert run(repo.get_book(book.id)).title == "Dune"


def test_delete_removes_the_book_and_its_reviews(repo, owner, reader):
    book = run(repo.create_book(fields(), owner.id))
    run(repo.create_review(book.id, reader.id, 4))

    run(repo.delete_book(book.id, owner.id))

    with pytest.raises(NotFound):
        run(repo.get_book(book.id))
    assert run(repo.list_reviews(book.id)) == []
    assert run(repo.list_user_reviews(reader.id)) == []


def test_profile_lists(repo, owner, reader):
    first = run(repo.create_book(fields(title="First"), owner.id))
    run(repo.create_book(fields(title="Second"), owner.id))
    run(repo.create_review(first.id, reader.id, 4, "Solid"))

    books = run(repo.list_user_books(owner.id))
    reviews = run(repo.list_user_reviews(reader.id))

    assert [b.title for b in books] == ["Second", "First"]
    assert books[1].rating.review_count == 1
    assert reviews[0].book_title == "First"
    assert reviews[0].book_author == "Frank Herbert"
    assert run(repo.get_profile(reader.id)).name == "Remy"


def test_accounts(repo, owner):
    with pytest.raises(DuplicateAccount):
        run(repo.create_user("OWNER@bookreview.io", "another1", "Other"))
    with pytest.raises(Unauthorized):
        run(repo.authenticate("owner@bookreview.io", "wrong-password"))
    with pytest.raises(NotFound):
        run(repo.get_profile(12345))

    assert run(repo.authenticate("owner@bookreview.io", "secret123")).id == owner.id


def test_page_past_the_end_keeps_total_count(repo, owner):
    run(repo.create_book(fields(), owner.id))

    result = run(repo.list_books(2**62, 5))

    assert result.items == []
    assert result.total_count == 1
