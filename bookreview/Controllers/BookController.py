from datetime import date
from typing import List, Optional

from fastapi import Depends, Query, status
from loguru import logger
from bookreview.BusinessObjects.models import (
    BookCollection, BookDetailView, BookFields, BookForm, BookListPage, BookMutationResult, BookRatingSummary,
    Review, ReviewCreate, ReviewMutationResult,
)
from bookreview.Helper import Ratings
from bookreview.Helper.Auth import current_session, require_session
from bookreview.Helper.CommonHelper import CommonHelper
from bookreview.Helper.Exceptions import CatalogError
from bookreview.Helper.Pagination import BrowseState
from bookreview.Helper.SessionStore import Session
from bookreview.Helper.Settings import CFG
from bookreview.Repository.CatalogQueries import CatalogQueries
from bookreview.apiapp import fastapiapp

app = fastapiapp

@app.get("/", response_model=BookListPage)
@app.get("/books", response_model=BookListPage)
async def getBooks(
    page: int = Query(1, ge=1),
    q: Optional[str] = Query(None, max_length=255, description="Search by title or author"),
    prev_q: Optional[str] = Query(None, max_length=255, description="Search term of the page being browsed"),
    page_size: int = Query(CFG.books_per_page, ge=1, le=CFG.max_page_size),
    queries: CatalogQueries = Depends(),
):
    """Returns one page of the catalog, newest books first.

    Args:
        page: 1-based page number. Pages past the last one are empty, not an error.
        q: Optional case-insensitive substring matched against title or author.
        prev_q: Search term the caller was browsing with. A different ``q`` starts over at page 1.
        page_size: Number of books per page.

    Returns:
        The books of the page with their rating summary and owner name, the total
        number of matching books and the previous/next navigation state.
    """
    search_term = (q or "").strip()
    state = BrowseState(page=page, page_size=page_size, search_term=search_term)
    if prev_q is not None and prev_q.strip() != search_term:
        state = state.with_search(search_term)
    notifications = []
    try:
        collection = await queries.list_books(state.page, state.page_size, state.search_term)
    except CatalogError as e:
        logger.warning(f"Loading books failed: {e.message}")
        notifications.append("Failed to load books")
        collection = BookCollection()

    total = collection.total_count
    return BookListPage(
        items=collection.items,
        total_count=total,
        page=state.page,
        page_size=state.page_size,
        total_pages=state.pages(total),
        search_term=state.search_term,
        has_previous=state.has_previous(total),
        has_next=state.has_next(total),
        previous_page=state.previous(total).page if state.has_previous(total) else None,
        next_page=state.next(total).page if state.has_next(total) else None,
        notifications=notifications,
    )

#region form
@app.get("/books/new", response_model=BookForm)
async def newBookForm(session: Session = Depends(require_session)):
    """Returns the blank form for adding a book."""
    return BookForm(published_year=date.today().year)

@app.get("/books/{book_id}/edit", response_model=BookForm)
async def editBookForm(book_id: int, queries: CatalogQueries = Depends(), session: Session = Depends(require_session)):
    """Returns the form for editing a book, filled with its current values.

    Args:
        book_id: The unique integer identifier of the book to edit.

    Returns:
        The form values, or a 404 Not Found response if the book doesn't exist.
    """
    book = await queries.get_book_detail(book_id)
    return BookForm(
        book_id=book.id,
        title=book.title,
        author=book.author,
        description=book.description,
        genre=book.genre or "",
        published_year=book.published_year,
    )

async def submit_book_form(queries: CatalogQueries, fields: BookFields, session: Session, book_id: Optional[int] = None) -> BookMutationResult:
    """Creates the book when no id is given, updates it otherwise."""
    if book_id is None:
        book = await CommonHelper.notify_on_failure("Failed to add book", queries.create_book(fields, session.user_id))
        return BookMutationResult(message="Book added successfully", book=book)
    book = await CommonHelper.notify_on_failure("Failed to update book", queries.update_book(book_id, fields, session.user_id))
    return BookMutationResult(message="Book updated successfully", book=book)
#endregion form

#region book
@app.post("/books", response_model=BookMutationResult, status_code=status.HTTP_201_CREATED)
async def postBooks(fields: BookFields, queries: CatalogQueries = Depends(), session: Session = Depends(require_session)):
    """Adds a new book owned by the signed-in user.

    Args:
        fields: Title, author, description, genre and published year of the book.

    Returns:
        A confirmation message and the newly created book.
    """
    return await submit_book_form(queries, fields, session)

@app.get("/books/{book_id}", response_model=BookDetailView)
async def getBookDetail(book_id: int, queries: CatalogQueries = Depends(), session: Optional[Session] = Depends(current_session)):
    """Returns a book with its reviews and aggregate rating.

    When the reviews cannot be loaded the book is still returned, with no
    reviews, a zero rating and a notification.

    Args:
        book_id: The unique integer identifier of the book to retrieve.

    Returns:
        The book, its rating summary, its reviews newest first, whether the caller
        owns it and whether the caller may still review it, or a 404 Not Found
        response if the book doesn't exist.
    """
    book = await queries.get_book_detail(book_id)
    notifications = []
    reviews: List[Review] = []
    try:
        reviews = await queries.list_reviews(book_id)
    except CatalogError as e:
        logger.warning(f"Loading reviews of book {book_id} failed: {e.message}")
        notifications.append("Failed to load reviews")

    user_id = session.user_id if session else None
    has_reviewed = any(review.user_id == user_id for review in reviews)
    return BookDetailView(
        book=book,
        rating=Ratings.summarize(review.rating for review in reviews),
        reviews=reviews,
        is_owner=user_id is not None and user_id == book.added_by,
        can_review=user_id is not None and not has_reviewed,
        notifications=notifications,
    )

@app.put("/books/{book_id}", response_model=BookMutationResult)
async def updateBook(book_id: int, fields: BookFields, queries: CatalogQueries = Depends(), session: Session = Depends(require_session)):
    """Updates a book. Only its owner may do so.

    Args:
        book_id: The unique integer identifier of the book to update.
        fields: The new values of the editable fields.

    Returns:
        A confirmation message and the updated book, 403 Forbidden when the caller
        is not the owner, or 404 Not Found if the book doesn't exist.
    """
    return await submit_book_form(queries, fields, session, book_id)

@app.delete("/books/{book_id}", response_model=BookMutationResult)
async def deleteBook(book_id: int, queries: CatalogQueries = Depends(), session: Session = Depends(require_session)):
    """Deletes a book and its reviews. Only its owner may do so.

    Args:
        book_id: The unique integer identifier of the book to delete.

    Returns:
        A confirmation message, 403 Forbidden when the caller is not the owner, or
        404 Not Found if the book doesn't exist.
    """
    book = await CommonHelper.notify_on_failure("Failed to delete book", queries.delete_book(book_id, session.user_id))
    return BookMutationResult(message="Book deleted successfully", book=book)
#endregion book

#region reviews
@app.post("/books/{book_id}/reviews", response_model=ReviewMutationResult, status_code=status.HTTP_201_CREATED)
async def createReview(book_id: int, review: ReviewCreate, queries: CatalogQueries = Depends(), session: Session = Depends(require_session)):
    """Adds the signed-in user's review of a book.

    Args:
        book_id: The unique integer identifier of the book to review.
        review: A rating from 1 to 5 and an optional text.

    Returns:
        A confirmation message and the new review. A second review of the same book
        by the same user is rejected with 409 Conflict.
    """
    created = await CommonHelper.notify_on_failure(
        "Failed to add review",
        queries.create_review(book_id, session.user_id, review.rating, review.review_text),
    )
    return ReviewMutationResult(message="Review added successfully", review=created)

@app.get("/books/{book_id}/reviews", response_model=List[Review])
async def getBookReviews(book_id: int, queries: CatalogQueries = Depends()):
    """Retrieves all reviews of a book, newest first.

    Args:
        book_id: The unique integer identifier of the book.

    Returns:
        A JSON array of reviews with the reviewer's display name.
    """
    return await queries.list_reviews(book_id)

@app.get("/books/{book_id}/rating", response_model=BookRatingSummary)
async def getBookRating(book_id: int, queries: CatalogQueries = Depends()):
    """Retrieves the aggregate rating of a book.

    Args:
        book_id: The unique integer identifier of the book.

    Returns:
        Average rating (0 when there are no reviews), review count, star rating
        and the one-decimal display value, or 404 Not Found for an unknown book.
    """
    return await queries.get_rating_summary(book_id)
#endregion reviews
