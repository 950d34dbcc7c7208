from typing import List, Optional
from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.future import select
from sqlalchemy.orm import joinedload, selectinload
from bookreview.BusinessObjects.dbModels import BookDto, ProfileDto, ReviewDto, UserDto
from bookreview.BusinessObjects.models import (
    Book, BookCollection, BookFields, BookListItem, Profile, ProfileReview, Review, User,
)
from bookreview.Helper.CommonHelper import CommonHelper
from bookreview.Helper.Exceptions import (
    DuplicateAccount, DuplicateReview, Forbidden, NotFound, TransientFailure, Unauthorized, ValidationError,
)
from bookreview.Helper.Pagination import page_offset
from bookreview.Helper.Passwords import hash_password, verify_password
from bookreview.MapperConfig import MapperConfig
from bookreview.Repository.SqlAlchemySetup import SqlAlchemySetup


def _is_unique_violation(error: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed", postgres: "duplicate key value violates unique constraint"
    message = str(error.orig).lower()
    return "unique" in message or "duplicate" in message


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class CatalogRepo:
    """Entity store for books, reviews, profiles and users.

    Ownership of books and the one-review-per-book rule are enforced here,
    so a rejection from this class is final whatever the caller checked.
    """

    #region book
    async def list_books(self, page: int, page_size: int, search_term: Optional[str] = None) -> BookCollection:
        if page < 1 or page_size < 1:
            raise ValidationError("page and page_size must be positive")
        async with SqlAlchemySetup.session() as db:
            try:
                criteria = []
                if search_term:
                    pattern = _like_pattern(search_term)
                    criteria.append(or_(BookDto.title.ilike(pattern, escape="\\"),
                                        BookDto.author.ilike(pattern, escape="\\")))

                count_query = select(func.count()).select_from(BookDto).where(*criteria)
                total_count = (await db.execute(count_query)).scalar_one()
                offset = page_offset(page, page_size)
                if offset >= total_count:
                    return BookCollection(items=[], total_count=total_count)

                query = select(BookDto) \
                    .options(joinedload(BookDto.owner), selectinload(BookDto.reviews)) \
                    .where(*criteria) \
                    .order_by(BookDto.created_at.desc(), BookDto.id.desc()) \
                    .offset(offset) \
                    .limit(page_size)
                books = (await db.execute(query)).scalars().unique().all()
                return BookCollection(items=[MapperConfig.to_book_list_item(b) for b in books],
                                      total_count=total_count)
            except SQLAlchemyError as e:
                logger.warning(f"Listing books failed: {e}")
                raise TransientFailure() from e

    async def get_book(self, book_id: int) -> Book:
        async with SqlAlchemySetup.session() as db:
            try:
                result = await db.execute(select(BookDto).options(joinedload(BookDto.owner)).filter(BookDto.id == book_id))
                book = result.scalars().first()
            except SQLAlchemyError as e:
                logger.warning(f"Loading book {book_id} failed: {e}")
                raise TransientFailure() from e
            if not book:
                raise NotFound(f"Book with ID {book_id} not found")
            return MapperConfig.to_book(book)

    async def list_user_books(self, user_id: int) -> List[BookListItem]:
        async with SqlAlchemySetup.session() as db:
            try:
                query = select(BookDto) \
                    .options(joinedload(BookDto.owner), selectinload(BookDto.reviews)) \
                    .filter(BookDto.added_by == user_id) \
                    .order_by(BookDto.created_at.desc(), BookDto.id.desc())
                books = (await db.execute(query)).scalars().unique().all()
                return [MapperConfig.to_book_list_item(b) for b in books]
            except SQLAlchemyError as e:
                logger.warning(f"Listing books of user {user_id} failed: {e}")
                raise TransientFailure() from e

    async def create_book(self, fields: BookFields, owner_id: int) -> Book:
        async with SqlAlchemySetup.session() as db:
            try:
                owner = await db.get(ProfileDto, owner_id)
                if owner is None:
                    raise Forbidden("Only signed-in users with a profile can add books")
                book = BookDto(**fields.model_dump(), owner=owner)
                db.add(book)
                await db.commit()
                logger.info(f"Book {book.id} added by user {owner_id}")
                return MapperConfig.to_book(book)
            except IntegrityError as e:
                await db.rollback()
                raise ValidationError(f"Error creating book: {e.orig}") from e
            except SQLAlchemyError as e:
                await db.rollback()
                raise TransientFailure() from e

    async def update_book(self, book_id: int, fields: BookFields, caller_id: int) -> Book:
        async with SqlAlchemySetup.session() as db:
            try:
                result = await db.execute(select(BookDto).options(joinedload(BookDto.owner)).filter(BookDto.id == book_id))
                book = result.scalars().first()
                if not book:
                    raise NotFound(f"Book with ID {book_id} not found")
                if book.added_by != caller_id:
                    logger.warning(f"User {caller_id} tried to update book {book_id} owned by {book.added_by}")
                    raise Forbidden()
                CommonHelper.apply(book, fields.model_dump())
                await db.commit()
                logger.info(f"Book {book_id} updated by user {caller_id}")
                return MapperConfig.to_book(book)
            except IntegrityError as e:
                await db.rollback()
                raise ValidationError(f"Error updating book: {e.orig}") from e
            except SQLAlchemyError as e:
                await db.rollback()
                raise TransientFailure() from e

    async def delete_book(self, book_id: int, caller_id: int) -> Book:
        async with SqlAlchemySetup.session() as db:
            try:
                result = await db.execute(select(BookDto)
                                          .options(joinedload(BookDto.owner), selectinload(BookDto.reviews))
                                          .filter(BookDto.id == book_id))
                book = result.scalars().first()
                if not book:
                    raise NotFound(f"Book with ID {book_id} not found")
                if book.added_by != caller_id:
                    logger.warning(f"User {caller_id} tried to delete book {book_id} owned by {book.added_by}")
                    raise Forbidden()
                deleted = MapperConfig.to_book(book)
                review_count = len(book.reviews)
                # reviews go with the book
                await db.delete(book)
                await db.commit()
                logger.info(f"Book {book_id} deleted by user {caller_id} with {review_count} reviews")
                return deleted
            except SQLAlchemyError as e:
                await db.rollback()
                raise TransientFailure() from e
    #endregion book

    #region reviews
    async def create_review(self, book_id: int, author_id: int, rating: Optional[int], text: Optional[str] = None) -> Review:
        if rating is None or isinstance(rating, bool) or not 1 <= rating <= 5:
            raise ValidationError("Rating must be a whole number from 1 to 5")
        async with SqlAlchemySetup.session() as db:
            try:
                if await db.get(BookDto, book_id) is None:
                    raise NotFound(f"Book with ID {book_id} not found")
                reviewer = await db.get(ProfileDto, author_id)
                if reviewer is None:
                    raise Forbidden("Only signed-in users with a profile can review books")
                review = ReviewDto(book_id=book_id, reviewer=reviewer, rating=rating,
                                   review_text=(text or "").strip() or None)
                db.add(review)
                await db.commit()
                logger.info(f"Review {review.id} added to book {book_id} by user {author_id}")
                return MapperConfig.to_review(review)
            except IntegrityError as e:
                await db.rollback()
                if _is_unique_violation(e):
                    raise DuplicateReview() from e
                raise ValidationError(f"Error creating review: {e.orig}") from e
            except SQLAlchemyError as e:
                await db.rollback()
                raise TransientFailure() from e

    async def list_reviews(self, book_id: int) -> List[Review]:
        async with SqlAlchemySetup.session() as db:
            try:
                query = select(ReviewDto) \
                    .options(joinedload(ReviewDto.reviewer)) \
                    .filter(ReviewDto.book_id == book_id) \
                    .order_by(ReviewDto.created_at.desc(), ReviewDto.id.desc())
                reviews = (await db.execute(query)).scalars().all()
                return [MapperConfig.to_review(r) for r in reviews]
            except SQLAlchemyError as e:
                logger.warning(f"Listing reviews of book {book_id} failed: {e}")
                raise TransientFailure() from e

    async def list_user_reviews(self, user_id: int) -> List[ProfileReview]:
        async with SqlAlchemySetup.session() as db:
            try:
                query = select(ReviewDto) \
                    .options(joinedload(ReviewDto.reviewer), joinedload(ReviewDto.book)) \
                    .filter(ReviewDto.user_id == user_id) \
                    .order_by(ReviewDto.created_at.desc(), ReviewDto.id.desc())
                reviews = (await db.execute(query)).scalars().all()
                return [MapperConfig.to_profile_review(r) for r in reviews]
            except SQLAlchemyError as e:
                logger.warning(f"Listing reviews of user {user_id} failed: {e}")
                raise TransientFailure() from e
    #endregion reviews

    #region user
    async def create_user(self, email: str, password: str, name: str) -> User:
        async with SqlAlchemySetup.session() as db:
            try:
                user = UserDto(email=email.lower(), hashed_password=hash_password(password))
                user.profile = ProfileDto(name=name)
                db.add(user)
                await db.commit()
                logger.info(f"User {user.id} signed up")
                return MapperConfig.to_user(user)
            except IntegrityError as e:
                await db.rollback()
                if _is_unique_violation(e):
                    raise DuplicateAccount() from e
                raise ValidationError(f"Error creating user: {e.orig}") from e
            except SQLAlchemyError as e:
                await db.rollback()
                raise TransientFailure() from e

    async def authenticate(self, email: str, password: str) -> User:
        async with SqlAlchemySetup.session() as db:
            try:
                result = await db.execute(select(UserDto).filter(UserDto.email == email.lower()))
                user = result.scalars().first()
            except SQLAlchemyError as e:
                raise TransientFailure() from e
            if user is None or not verify_password(password, user.hashed_password):
                raise Unauthorized("Invalid email or password")
            return MapperConfig.to_user(user)

    async def get_profile(self, user_id: int) -> Profile:
        async with SqlAlchemySetup.session() as db:
            try:
                profile = await db.get(ProfileDto, user_id)
            except SQLAlchemyError as e:
                raise TransientFailure() from e
            if profile is None:
                raise NotFound(f"Profile {user_id} not found")
            return MapperConfig.to_profile(profile)
    #endregion user
