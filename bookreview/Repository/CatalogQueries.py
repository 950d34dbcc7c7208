from typing import List, Optional
from fastapi import Depends
from bookreview.BusinessObjects.models import (
    Book, BookCollection, BookFields, BookListItem, BookRatingSummary, Profile, ProfileReview, Review,
)
from bookreview.Helper import Ratings
from bookreview.Helper.QueryClient import QueryClient, query_client
from bookreview.Repository.CatalogRepo import CatalogRepo


class CatalogQueries:
    """Cached reads and invalidating writes on top of ``CatalogRepo``.

    Each read is resolved through the shared query client under its query
    key. Each successful write invalidates the keys whose results it can
    change, so the next read through this class sees the write.
    """

    def __init__(self, repo: CatalogRepo = Depends()):
        self.repo = repo
        self.client: QueryClient = query_client

    #region reads
    async def list_books(self, page: int, page_size: int, search_term: Optional[str] = None) -> BookCollection:
        term = (search_term or "").strip()
        return await self.client.fetch(("books", page, page_size, term.lower()),
                                       lambda: self.repo.list_books(page, page_size, term))

    async def get_book_detail(self, book_id: int) -> Book:
        return await self.client.fetch(("book", book_id), lambda: self.repo.get_book(book_id))

    async def list_reviews(self, book_id: int) -> List[Review]:
        return await self.client.fetch(("reviews", book_id), lambda: self.repo.list_reviews(book_id))

    async def get_rating_summary(self, book_id: int) -> BookRatingSummary:
        # shares the review list query so the summary can never disagree with it
        await self.get_book_detail(book_id)
        reviews = await self.list_reviews(book_id)
        return Ratings.summarize(review.rating for review in reviews)

    async def get_profile(self, user_id: int) -> Profile:
        return await self.client.fetch(("profile", user_id), lambda: self.repo.get_profile(user_id))

    async def list_user_books(self, user_id: int) -> List[BookListItem]:
        return await self.client.fetch(("user-books", user_id), lambda: self.repo.list_user_books(user_id))

    async def list_user_reviews(self, user_id: int) -> List[ProfileReview]:
        return await self.client.fetch(("user-reviews", user_id), lambda: self.repo.list_user_reviews(user_id))
    #endregion reads

    #region mutations
    async def create_book(self, fields: BookFields, owner_id: int) -> Book:
        book = await self.repo.create_book(fields, owner_id)
        self.client.invalidate("books")
        self.client.invalidate("user-books", owner_id)
        return book

    async def update_book(self, book_id: int, fields: BookFields, caller_id: int) -> Book:
        book = await self.repo.update_book(book_id, fields, caller_id)
        self.client.invalidate("books")
        self.client.invalidate("book", book_id)
        self.client.invalidate("user-books", book.added_by)
        self.client.invalidate("user-reviews")
        return book

    async def delete_book(self, book_id: int, caller_id: int) -> Book:
        book = await self.repo.delete_book(book_id, caller_id)
        self.client.invalidate("books")
        self.client.invalidate("book", book_id)
        self.client.invalidate("reviews", book_id)
        self.client.invalidate("user-books", book.added_by)
        self.client.invalidate("user-reviews")
        return book

    async def create_review(self, book_id: int, author_id: int, rating: Optional[int], text: Optional[str] = None) -> Review:
        review = await self.repo.create_review(book_id, author_id, rating, text)
        self.client.invalidate("reviews", book_id)
        self.client.invalidate("book", book_id)
        self.client.invalidate("books")
        self.client.invalidate("user-books")
        self.client.invalidate("user-reviews", author_id)
        return review
    #endregion mutations
