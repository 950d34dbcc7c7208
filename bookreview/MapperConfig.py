from automapper import mapper
from bookreview.BusinessObjects.dbModels import BookDto, ProfileDto, ReviewDto, UserDto
from bookreview.BusinessObjects.models import Book, BookListItem, Profile, ProfileReview, Review, User
from bookreview.Helper import Ratings

class MapperConfig:
    #region Automapper: start
    mapper.add(UserDto, User)
    mapper.add(ProfileDto, Profile)
    #endregion Automapper: end

    # Relationship attributes must be loaded by the query before mapping;
    # async sessions cannot lazy load them here.
    @staticmethod
    def to_user(user: UserDto) -> User:
        return mapper.map(user)

    @staticmethod
    def to_profile(profile: ProfileDto) -> Profile:
        return mapper.map(profile)

    @staticmethod
    def to_book(book: BookDto) -> Book:
        return mapper.to(Book).map(book, fields_mapping={
            "owner_name": book.owner.name if book.owner else None,
        })

    @staticmethod
    def to_book_list_item(book: BookDto) -> BookListItem:
        item = mapper.to(BookListItem).map(book, fields_mapping={
            "owner_name": book.owner.name if book.owner else None,
        })
        item.rating = Ratings.summarize(review.rating for review in book.reviews)
        return item

    @staticmethod
    def to_review(review: ReviewDto) -> Review:
        return mapper.to(Review).map(review, fields_mapping={
            "reviewer_name": review.reviewer.name if review.reviewer else None,
        })

    @staticmethod
    def to_profile_review(review: ReviewDto) -> ProfileReview:
        return mapper.to(ProfileReview).map(review, fields_mapping={
            "reviewer_name": review.reviewer.name if review.reviewer else None,
            "book_title": review.book.title if review.book else None,
            "book_author": review.book.author if review.book else None,
        })
