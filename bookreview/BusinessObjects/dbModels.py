#region imports

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from bookreview.BusinessObjects.BaseEntity import BaseEntity
from bookreview.Repository.SqlAlchemySetup import SqlAlchemySetup

#endregion imports

#region Model def: start
class UserDto(BaseEntity, SqlAlchemySetup.Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    profile = relationship("ProfileDto", back_populates="user", uselist=False, cascade="all, delete-orphan")

class ProfileDto(BaseEntity, SqlAlchemySetup.Base):
    __tablename__ = "profiles"

    # same identifier as the user it belongs to
    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    name = Column(String(255), nullable=False)

    user = relationship("UserDto", back_populates="profile")
    books = relationship("BookDto", back_populates="owner")
    reviews = relationship("ReviewDto", back_populates="reviewer")

class BookDto(BaseEntity, SqlAlchemySetup.Base):
    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    genre = Column(String(255))
    published_year = Column(Integer)
    added_by = Column(Integer, ForeignKey("profiles.id"), nullable=False)

    owner = relationship("ProfileDto", back_populates="books")
    reviews = relationship("ReviewDto", back_populates="book", cascade="all, delete-orphan")

class ReviewDto(BaseEntity, SqlAlchemySetup.Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("book_id", "user_id", name="reviews_book_id_user_id_key"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="reviews_rating_check"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("profiles.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    review_text = Column(Text)

    book = relationship("BookDto", back_populates="reviews")
    reviewer = relationship("ProfileDto", back_populates="reviews")

#endregion Model def: End
