from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import catalog
from ..auth import get_session_user, is_user_admin
from ..dashboard import build_dashboard
from ..db import get_db
from ..models import Profile
from ..reviews import delete_review, filter_reviews
from ..ui import render
from ..utils import login_url, with_notice
from ..validation import AppForm, form_progress, validate_app_form


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

RATING_CHOICES = (5, 4, 3, 2, 1)


def admin_or_redirect(request: Request, db: Session) -> Profile | RedirectResponse:
    user = get_session_user(db, request.session)
    if not user:
        request.session.clear()
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        return RedirectResponse(url=login_url(path), status_code=303)
    if not is_user_admin(db, user.id):
        return RedirectResponse(url=with_notice("/", error="Admin access required."), status_code=303)
    return user


def render_app_form(
    request: Request,
    db: Session,
    *,
    admin: Profile,
    form: AppForm,
    action: str,
    heading: str,
    errors: dict[str, str] | None = None,
    error: str | None = None,
    status_code: int = 200,
):
    try:
        categories = catalog.list_categories(db)
    except SQLAlchemyError:
        logger.exception("Error fetching categories")
        categories = []

    return render(
        request,
        "admin/app_form.html",
        {
            "admin": admin,
            "form": form,
            "action": action,
            "heading": heading,
            "categories": categories,
            "errors": errors or {},
            "progress": form_progress(form),
            "error": error or request.query_params.get("error"),
        },
        user=admin,
        status_code=status_code,
    )


def read_app_form(
    title: str,
    description: str,
    thumbnail_url: str,
    screenshots: list[str],
    download_url: str,
    category: str,
    custom_category: str,
    use_custom_category: str | None,
    tags: list[str],
    seo_keywords: str,
    seo_description: str,
    version: str,
    publisher: str,
) -> AppForm:
    return AppForm.from_input(
        title=title,
        description=description,
        thumbnail_url=thumbnail_url,
        screenshots=screenshots,
        download_url=download_url,
        category=category,
        custom_category=custom_category,
        use_custom_category=use_custom_category == "on",
        tags=tags,
        seo_keywords=seo_keywords,
        seo_description=seo_description,
        version=version,
        publisher=publisher,
    )


@router.get("")
def admin_dashboard(request: Request, db: Session = Depends(get_db)):
    current = admin_or_redirect(request, db)
    if isinstance(current, RedirectResponse):
        return current

    stats = build_dashboard(db)
    return render(request, "admin/dashboard.html", {"admin": current, "stats": stats}, user=current)


@router.get("/apps")
def manage_apps(request: Request, q: str = "", category: str = "all", db: Session = Depends(get_db)):
    current = admin_or_redirect(request, db)
    if isinstance(current, RedirectResponse):
        return current

    apps, categories = [], []
    error = request.query_params.get("error")
    try:
        apps = catalog.filter_apps(db, q, category)
        categories = catalog.list_categories(db)
    except SQLAlchemyError:
        logger.exception("Error fetching apps for the admin list")
        error = "Failed to load apps"

    return render(
        request,
        "admin/apps.html",
        {
            "admin": current,
            "apps": apps,
            "categories": categories,
            "query": q,
            "selected_category": category,
            "error": error,
        },
        user=current,
    )


@router.get("/apps/add")
def add_app_page(request: Request, db: Session = Depends(get_db)):
    current = admin_or_redirect(request, db)
    if isinstance(current, RedirectResponse):
        return current

    return render_app_form(request, db, admin=current, form=AppForm(), action="/admin/apps/add", heading="Add New App")


@router.post("/apps/add")
def add_app(
    request: Request,
    title: str = Form(default=""),
    description: str = Form(default=""),
    thumbnail_url: str = Form(default=""),
    screenshots: list[str] = Form(default=[]),
    download_url: str = Form(default=""),
    category: str = Form(default=""),
    custom_category: str = Form(default=""),
    use_custom_category: str | None = Form(default=None),
    tags: list[str] = Form(default=[]),
    seo_keywords: str = Form(default=""),
    seo_description: str = Form(default=""),
    version: str = Form(default=""),
    publisher: str = Form(default=""),
    db: Session = Depends(get_db),
):
    current = admin_or_redirect(request, db)
    if isinstance(current, RedirectResponse):
        return current

    form = read_app_form(
        title, description, thumbnail_url, screenshots, download_url, category, custom_category,
        use_custom_category, tags, seo_keywords, seo_description, version, publisher,
    )
    errors = validate_app_form(form)
    if errors:
        return render_app_form(
            request, db, admin=current, form=form, action="/admin/apps/add", heading="Add New App",
            errors=errors, error="Please fix the errors in the form", status_code=400,
        )

    try:
        catalog.create_app(db, form.to_record())
    except SQLAlchemyError:
        logger.exception("Error adding app %r", form.title)
        db.rollback()
        return render_app_form(
            request, db, admin=current, form=form, action="/admin/apps/add", heading="Add New App",
            error="Failed to add app. Please try again.", status_code=500,
        )

    return RedirectResponse(url=with_notice("/admin/apps", message="App added successfully!"), status_code=303)


@router.get("/apps/edit/{app_id}")
def edit_app_page(app_id: str, request: Request, db: Session = Depends(get_db)):
    current = admin_or_redirect(request, db)
    if isinstance(current, RedirectResponse):
        return current

    app = catalog.get_app(db, app_id)
    if not app:
        return RedirectResponse(url=with_notice("/admin/apps", error="Failed to load app data"), status_code=303)

    return render_app_form(
        request, db, admin=current, form=AppForm.from_app(app), action=f"/admin/apps/edit/{app.id}", heading="Edit App",
    )


@router.post("/apps/edit/{app_id}")
def edit_app(
    app_id: str,
    request: Request,
    title: str = Form(default=""),
    description: str = Form(default=""),
    thumbnail_url: str = Form(default=""),
    screenshots: list[str] = Form(default=[]),
    download_url: str = Form(default=""),
    category: str = Form(default=""),
    custom_category: str = Form(default=""),
    use_custom_category: str | None = Form(default=None),
    tags: list[str] = Form(default=[]),
    seo_keywords: str = Form(default=""),
    seo_description: str = Form(default=""),
    version: str = Form(default=""),
    publisher: str = Form(default=""),
    db: Session = Depends(get_db),
):
    current = admin_or_redirect(request, db)
    if isinstance(current, RedirectResponse):
        return current

    app = catalog.get_app(db, app_id)
    if not app:
        return RedirectResponse(url=with_notice("/admin/apps", error="Failed to load app data"), status_code=303)

    action = f"/admin/apps/edit/{app.id}"
    form = read_app_form(
        title, description, thumbnail_url, screenshots, download_url, category, custom_category,
        use_custom_category, tags, seo_keywords, seo_description, version, publisher,
    )
    errors = validate_app_form(form)
    if errors:
        return render_app_form(
            request, db, admin=current, form=form, action=action, heading="Edit App",
            errors=errors, error="Please fix the errors in the form", status_code=400,
        )

    try:
        catalog.update_app(db, app, form.to_record())
    except SQLAlchemyError:
        logger.exception("Error updating app %s", app_id)
        db.rollback()
        return render_app_form(
            request, db, admin=current, form=form, action=action, heading="Edit App",
            error="Failed to update app. Please try again.", status_code=500,
        )

    return RedirectResponse(url=with_notice("/admin/apps", message="App updated successfully!"), status_code=303)


@router.post("/apps/delete")
def delete_app(request: Request, app_id: str = Form(...), db: Session = Depends(get_db)):
    current = admin_or_redirect(request, db)
    if isinstance(current, RedirectResponse):
        return current

    app = catalog.get_app(db, app_id)
    if not app:
        return RedirectResponse(url=with_notice("/admin/apps", error="Failed to delete app"), status_code=303)

    try:
        catalog.delete_app(db, app)
    except SQLAlchemyError:
        logger.exception("Error deleting app %s", app_id)
        db.rollback()
        return RedirectResponse(url=with_notice("/admin/apps", error="Failed to delete app"), status_code=303)

    return RedirectResponse(url=with_notice("/admin/apps", message="App deleted successfully"), status_code=303)


@router.get("/reviews")
def manage_reviews(request: Request, q: str = "", rating: str = "", db: Session = Depends(get_db)):
    current = admin_or_redirect(request, db)
    if isinstance(current, RedirectResponse):
        return current

    rating_filter = int(rating) if rating.isdigit() else None
    reviews = []
    error = request.query_params.get("error")
    try:
        reviews = filter_reviews(db, q, rating_filter)
    except SQLAlchemyError:
        logger.exception("Error fetching reviews for the admin list")
        error = "Failed to load reviews"

    return render(
        request,
        "admin/reviews.html",
        {
            "admin": current,
            "reviews": reviews,
            "query": q,
            "rating_filter": rating_filter,
            "rating_choices": RATING_CHOICES,
            "error": error,
        },
        user=current,
    )


@router.post("/reviews/delete")
def remove_review(request: Request, review_id: str = Form(...), db: Session = Depends(get_db)):
    current = admin_or_redirect(request, db)
    if isinstance(current, RedirectResponse):
        return current

    try:
        deleted = delete_review(db, review_id)
    except SQLAlchemyError:
        logger.exception("Error deleting review %s", review_id)
        db.rollback()
        deleted = False

    if not deleted:
        return RedirectResponse(url=with_notice("/admin/reviews", error="Failed to delete review"), status_code=303)
    return RedirectResponse(url=with_notice("/admin/reviews", message="Review deleted successfully"), status_code=303)
