from typing import Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials
from loguru import logger
from bookreview.BusinessObjects.models import (
    CurrentSession, LoginRequest, ProfileView, SessionInfo, SignupRequest, User,
)
from bookreview.Helper import Ratings
from bookreview.Helper.Auth import bearer, current_session, require_session
from bookreview.Helper.Exceptions import CatalogError
from bookreview.Helper.SessionStore import Session, session_store
from bookreview.Repository.CatalogQueries import CatalogQueries
from bookreview.Repository.CatalogRepo import CatalogRepo
from bookreview.apiapp import fastapiapp

app = fastapiapp

@app.post("/signup", response_model=SessionInfo, status_code=status.HTTP_201_CREATED)
async def signup(request: SignupRequest, repo: CatalogRepo = Depends()):
    """Creates a new user account and its profile, then signs the user in.

    Passwords are hashed before they are stored.

    Args:
        request: Email, password (at least 6 characters) and display name.

    Returns:
        A bearer token and the new user, or 409 Conflict if the email is already in use.
    """
    user = await repo.create_user(request.email, request.password, request.name)
    session = session_store.sign_in(user.id, user.email)
    return SessionInfo(access_token=session.token, user=user, message="Account created successfully")

@app.post("/login", response_model=SessionInfo)
async def login(request: LoginRequest, repo: CatalogRepo = Depends()):
    """Signs a user in with email and password.

    Returns:
        A bearer token and the user, or 401 Unauthorized for wrong credentials.
    """
    user = await repo.authenticate(request.email, request.password)
    session = session_store.sign_in(user.id, user.email)
    return SessionInfo(access_token=session.token, user=user, message="Signed in successfully")

@app.post("/logout")
async def logout(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer), session: Session = Depends(require_session)):
    """Ends the caller's session."""
    session_store.sign_out(credentials.credentials)
    return {"message": "Signed out successfully"}

@app.get("/session", response_model=CurrentSession)
async def getSession(session: Optional[Session] = Depends(current_session)):
    """Returns the signed-in user, or no user for anonymous callers."""
    if session is None:
        return CurrentSession()
    return CurrentSession(user=User(id=session.user_id, email=session.email))

@app.get("/profile", response_model=ProfileView)
async def getProfile(queries: CatalogQueries = Depends(), session: Session = Depends(require_session)):
    """Returns the signed-in user's profile with the books they added and the reviews they wrote.

    Each part is loaded separately; a part that fails to load is shown empty
    with a notification.

    Returns:
        Display name, email, counts of books added and reviews written, the average
        rating given, the books tab and the reviews tab.
    """
    view = ProfileView(email=session.email)
    user_id = session.user_id
    try:
        view.profile = await queries.get_profile(user_id)
    except CatalogError as e:
        logger.warning(f"Loading profile {user_id} failed: {e.message}")
        view.notifications.append("Failed to load profile")
    try:
        view.books = await queries.list_user_books(user_id)
    except CatalogError as e:
        logger.warning(f"Loading books of user {user_id} failed: {e.message}")
        view.notifications.append("Failed to load your books")
    try:
        view.reviews = await queries.list_user_reviews(user_id)
    except CatalogError as e:
        logger.warning(f"Loading reviews of user {user_id} failed: {e.message}")
        view.notifications.append("Failed to load your reviews")

    given = Ratings.average_rating(review.rating for review in view.reviews)
    view.books_added = len(view.books)
    view.reviews_written = len(view.reviews)
    view.average_rating_given = given
    view.average_rating_given_display = Ratings.display_average(given)
    return view
