from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import catalog
from ..auth import get_session_user, sign_in, sign_out, sign_up, start_session
from ..db import get_db
from ..errors import AuthError, ValidationFailed
from ..reviews import list_reviews, parse_rating, submit_review
from ..ui import render
from ..utils import format_category_name, get_client_ip, safe_next, with_notice
from ..validation import password_strength, validate_login, validate_registration


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
def home(request: Request, db: Session = Depends(get_db)):
    user = get_session_user(db, request.session)

    featured, popular, newest, top, categories = [], [], [], [], []
    ratings: dict[str, float] = {}
    try:
        featured = catalog.featured_apps(db)
        popular = catalog.popular_apps(db)
        newest = catalog.new_apps(db)
        categories = catalog.list_categories(db)[: catalog.HOME_CATEGORY_LIMIT]
        ratings = catalog.ratings_for(db, [app.id for app in featured + popular + newest])
        top = catalog.top_rated(popular, ratings)
    except SQLAlchemyError:
        logger.exception("Error fetching apps for the home page")

    return render(
        request,
        "index.html",
        {
            "featured_apps": featured,
            "popular_apps": popular,
            "new_apps": newest,
            "top_rated_apps": top,
            "categories": categories,
            "ratings": ratings,
        },
        user=user,
    )


@router.get("/category/{category}")
def category_page(category: str, request: Request, db: Session = Depends(get_db)):
    user = get_session_user(db, request.session)

    apps, ratings = [], {}
    try:
        apps = catalog.apps_in_category(db, category)
        ratings = catalog.ratings_for(db, [app.id for app in apps])
    except SQLAlchemyError:
        logger.exception("Error fetching apps for category %s", category)

    return render(
        request,
        "category.html",
        {
            "category": category,
            "category_title": format_category_name(category),
            "apps": apps,
            "ratings": ratings,
        },
        user=user,
    )


@router.get("/search")
def search(request: Request, q: str = "", db: Session = Depends(get_db)):
    user = get_session_user(db, request.session)
    query = q.strip()

    apps, ratings = [], {}
    try:
        apps = catalog.search_apps(db, query)
        ratings = catalog.ratings_for(db, [app.id for app in apps])
    except SQLAlchemyError:
        logger.exception("Error fetching search results for %r", query)

    return render(
        request,
        "search.html",
        {"query": query, "apps": apps, "ratings": ratings},
        user=user,
    )


def render_app_detail(
    request: Request,
    db: Session,
    app,
    *,
    user,
    review_error: str | None = None,
    review_form: dict | None = None,
    status_code: int = 200,
):
    reviews = list_reviews(db, app.id)
    avg = catalog.average_rating(review.rating for review in reviews)
    return render(
        request,
        "app_detail.html",
        {
            "app": app,
            "reviews": reviews,
            "average_rating": avg,
            "review_error": review_error,
            "review_form": review_form or {"user_name": user.username if user else "", "comment": "", "rating": 0},
        },
        user=user,
        status_code=status_code,
    )


def render_not_found(request: Request, *, user=None, title: str = "Page Not Found", detail: str | None = None):
    return render(
        request,
        "not_found.html",
        {"title": title, "detail": detail},
        user=user,
        status_code=404,
    )


@router.get("/app/{app_id}")
def app_detail(app_id: str, request: Request, db: Session = Depends(get_db)):
    user = get_session_user(db, request.session)

    try:
        app = catalog.get_app(db, app_id)
        if app:
            catalog.record_view(db, app)
    except SQLAlchemyError:
        logger.exception("Error fetching app details for %s", app_id)
        db.rollback()
        app = None

    if not app:
        return render_not_found(
            request,
            user=user,
            title="App Not Found",
            detail="The app you're looking for doesn't exist or has been removed.",
        )

    return render_app_detail(request, db, app, user=user)


@router.post("/app/{app_id}/reviews")
def post_review(
    app_id: str,
    request: Request,
    rating: str = Form(default="0"),
    user_name: str = Form(default=""),
    comment: str = Form(default=""),
    db: Session = Depends(get_db),
):
    user = get_session_user(db, request.session)
    app = catalog.require_app(db, app_id)

    rating_value = parse_rating(rating)
    try:
        submit_review(
            db,
            app.id,
            rating=rating_value,
            user_name=user_name,
            comment=comment,
            user_id=user.id if user else None,
        )
    except ValidationFailed as exc:
        return render_app_detail(
            request,
            db,
            app,
            user=user,
            review_error=exc.message,
            review_form={"user_name": user_name, "comment": comment, "rating": rating_value},
            status_code=400,
        )
    except SQLAlchemyError:
        logger.exception("Error submitting review for app %s", app.id)
        db.rollback()
        return RedirectResponse(
            url=with_notice(f"/app/{app.id}", error="Failed to submit review. Please try again."),
            status_code=303,
        )

    return RedirectResponse(
        url=with_notice(f"/app/{app.id}", message="Review submitted successfully!"),
        status_code=303,
    )


@router.get("/login")
def login_page(request: Request, next: str = "/", db: Session = Depends(get_db)):
    user = get_session_user(db, request.session)
    if user:
        return RedirectResponse(url=safe_next(next), status_code=303)
    return render(request, "login.html", {"next": safe_next(next), "email": "", "form_error": None})


@router.post("/login")
def login_submit(
    request: Request,
    email: str = Form(default=""),
    password: str = Form(default=""),
    next: str = Form(default="/"),
    db: Session = Depends(get_db),
):
    target = safe_next(next)
    form_error = validate_login(email, password)
    if form_error:
        return render(
            request,
            "login.html",
            {"next": target, "email": email, "form_error": form_error},
            status_code=400,
        )

    try:
        profile = sign_in(db, email, password)
    except AuthError as exc:
        logger.warning("Failed sign-in for %s from %s", email, get_client_ip(request))
        return render(
            request,
            "login.html",
            {
                "next": target,
                "email": email,
                "form_error": exc.message,
                "error": "Login failed. Please check your credentials.",
            },
            status_code=401,
        )
    except SQLAlchemyError:
        logger.exception("Login error for %s", email)
        db.rollback()
        return render(
            request,
            "login.html",
            {
                "next": target,
                "email": email,
                "form_error": "An unexpected error occurred. Please try again.",
                "error": "Login failed. Please try again.",
            },
            status_code=500,
        )

    start_session(request.session, profile)
    return RedirectResponse(url=with_notice(target, message="Logged in successfully!"), status_code=303)


@router.get("/register")
def register_page(request: Request, db: Session = Depends(get_db)):
    user = get_session_user(db, request.session)
    if user:
        return RedirectResponse(url="/", status_code=303)
    return render(
        request,
        "register.html",
        {"username": "", "email": "", "form_error": None, "strength": password_strength("")},
    )


@router.post("/register")
def register_submit(
    request: Request,
    username: str = Form(default=""),
    email: str = Form(default=""),
    password: str = Form(default=""),
    confirm_password: str = Form(default=""),
    db: Session = Depends(get_db),
):
    context = {"username": username, "email": email, "strength": password_strength(password)}

    form_error = validate_registration(email, password, confirm_password, username)
    if form_error:
        return render(request, "register.html", {**context, "form_error": form_error}, status_code=400)

    try:
        profile = sign_up(db, email, password, username)
    except AuthError as exc:
        return render(
            request,
            "register.html",
            {**context, "form_error": exc.message, "error": "Registration failed. Please try again."},
            status_code=400,
        )
    except SQLAlchemyError:
        logger.exception("Registration error for %s", email)
        db.rollback()
        return render(
            request,
            "register.html",
            {
                **context,
                "form_error": "An unexpected error occurred. Please try again.",
                "error": "Registration failed. Please try again.",
            },
            status_code=500,
        )

    start_session(request.session, profile)
    return RedirectResponse(
        url=with_notice("/", message="Registration successful! You are now logged in."),
        status_code=303,
    )


@router.post("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    user = get_session_user(db, request.session)
    sign_out(request.session, user)
    return RedirectResponse(url="/", status_code=303)
