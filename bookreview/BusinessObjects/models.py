#region imports

from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

#endregion imports

#region Model def: start

class BookFields(BaseModel):
    """Editable part of a book, as submitted by the create/edit form."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255, description="Title of the book")
    author: str = Field(..., min_length=1, max_length=255, description="Author of the book")
    description: str = ""
    genre: str | None = Field(None, max_length=255)
    published_year: int | None = None

    @field_validator("published_year")
    @classmethod
    def check_published_year(cls, value: int | None) -> int | None:
        if value is not None and not 1000 <= value <= date.today().year:
            raise ValueError(f"published_year must be between 1000 and {date.today().year}")
        return value

class BookForm(BaseModel):
    """Values a create/edit form starts from. No book_id means create."""
    book_id: int | None = None
    title: str = ""
    author: str = ""
    description: str = ""
    genre: str = ""
    published_year: int | None = None

class Book(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: str
    description: str = ""
    genre: str | None = None
    published_year: int | None = None
    added_by: int
    created_at: datetime
    owner_name: str | None = None

class BookRatingSummary(BaseModel):
    average_rating: float = 0.0
    review_count: int = 0
    # presentation-only values, derived from average_rating
    stars: int = 0
    average_display: str = "0.0"

class BookListItem(Book):
    rating: BookRatingSummary = Field(default_factory=BookRatingSummary)

class BookCollection(BaseModel):
    items: List[BookListItem] = Field(default_factory=list)
    total_count: int = 0

class BookListPage(BookCollection):
    page: int
    page_size: int
    total_pages: int
    search_term: str = ""
    has_previous: bool = False
    has_next: bool = False
    previous_page: int | None = None
    next_page: int | None = None
    notifications: List[str] = Field(default_factory=list)

class ReviewCreate(BaseModel):
    rating: int | None = None
    review_text: str | None = None

class Review(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    book_id: int
    user_id: int
    rating: int
    review_text: str | None = None
    created_at: datetime
    reviewer_name: str | None = None

class ProfileReview(Review):
    book_title: str | None = None
    book_author: str | None = None

class BookDetailView(BaseModel):
    book: Book
    rating: BookRatingSummary
    reviews: List[Review] = Field(default_factory=list)
    is_owner: bool = False
    can_review: bool = False
    notifications: List[str] = Field(default_factory=list)

class BookMutationResult(BaseModel):
    message: str
    book: Book | None = None

class ReviewMutationResult(BaseModel):
    message: str
    review: Review

class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: EmailStr

class Profile(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str

class SignupRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=255)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class SessionInfo(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User
    message: str = ""

class CurrentSession(BaseModel):
    user: Optional[User] = None

class ProfileView(BaseModel):
    profile: Profile | None = None
    email: str
    books_added: int = 0
    reviews_written: int = 0
    average_rating_given: float = 0.0
    average_rating_given_display: str = "0.0"
    books: List[BookListItem] = Field(default_factory=list)
    reviews: List[ProfileReview] = Field(default_factory=list)
    notifications: List[str] = Field(default_factory=list)

#endregion Model def: End
