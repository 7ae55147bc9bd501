from __future__ import annotations

import re
from dataclasses import dataclass, field

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from .models import App


_url_adapter = TypeAdapter(AnyHttpUrl)

MIN_PASSWORD_LENGTH = 6
STRONG_PASSWORD_LENGTH = 10

REQUIRED_APP_FIELDS = (
    ("title", "Title is required"),
    ("description", "Description is required"),
    ("version", "Version is required"),
    ("publisher", "Publisher is required"),
)


def is_valid_url(value: str) -> bool:
    try:
        _url_adapter.validate_python(value.strip())
    except ValidationError:
        return False
    return True


def _clean_list(values: list[str] | None) -> list[str]:
    return [v.strip() for v in values or [] if v and v.strip()]


@dataclass
class AppForm:
    """Admin add/edit form, already trimmed."""

    title: str = ""
    description: str = ""
    thumbnail_url: str = ""
    screenshots: list[str] = field(default_factory=list)
    download_url: str = ""
    category: str = ""
    custom_category: str = ""
    use_custom_category: bool = False
    tags: list[str] = field(default_factory=list)
    seo_keywords: str = ""
    seo_description: str = ""
    version: str = ""
    publisher: str = ""

    @classmethod
    def from_input(
        cls,
        *,
        title: str = "",
        description: str = "",
        thumbnail_url: str = "",
        screenshots: list[str] | None = None,
        download_url: str = "",
        category: str = "",
        custom_category: str = "",
        use_custom_category: bool = False,
        tags: list[str] | None = None,
        seo_keywords: str = "",
        seo_description: str = "",
        version: str = "",
        publisher: str = "",
    ) -> AppForm:
        return cls(
            title=title.strip(),
            description=description.strip(),
            thumbnail_url=thumbnail_url.strip(),
            screenshots=_clean_list(screenshots),
            download_url=download_url.strip(),
            category=category.strip(),
            custom_category=custom_category.strip(),
            use_custom_category=use_custom_category,
            tags=_clean_list(tags),
            seo_keywords=seo_keywords.strip(),
            seo_description=seo_description.strip(),
            version=version.strip(),
            publisher=publisher.strip(),
        )

    @classmethod
    def from_app(cls, app: App) -> AppForm:
        return cls(
            title=app.title,
            description=app.description,
            thumbnail_url=app.thumbnail_url,
            screenshots=list(app.screenshots or []),
            download_url=app.download_url,
            category=app.category,
            tags=list(app.tags or []),
            seo_keywords=app.seo_keywords or "",
            seo_description=app.seo_description or "",
            version=app.version,
            publisher=app.publisher,
        )

    @property
    def final_category(self) -> str:
        return self.custom_category if self.use_custom_category else self.category

    def to_record(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "thumbnail_url": self.thumbnail_url,
            "screenshots": self.screenshots,
            "download_url": self.download_url,
            "category": self.final_category,
            "tags": self.tags,
            "seo_keywords": self.seo_keywords,
            "seo_description": self.seo_description,
            "version": self.version,
            "publisher": self.publisher,
        }


def validate_app_form(form: AppForm) -> dict[str, str]:
    errors: dict[str, str] = {}

    for name, message in REQUIRED_APP_FIELDS:
        if not getattr(form, name):
            errors[name] = message

    if not form.thumbnail_url:
        errors["thumbnail_url"] = "Thumbnail URL is required"
    elif not is_valid_url(form.thumbnail_url):
        errors["thumbnail_url"] = "Please enter a valid URL"

    if not form.download_url:
        errors["download_url"] = "Download URL is required"
    elif not is_valid_url(form.download_url):
        errors["download_url"] = "Please enter a valid URL"

    if form.use_custom_category:
        if not form.custom_category:
            errors["custom_category"] = "Custom category is required"
    elif not form.category:
        errors["category"] = "Category is required"

    for index, url in enumerate(form.screenshots):
        if not is_valid_url(url):
            errors[f"screenshot_{index}"] = "Please enter a valid URL"

    return errors


def form_progress(form: AppForm) -> int:
    """Percentage of required fields filled in, shown as a progress bar."""
    required = [
        form.title,
        form.description,
        form.thumbnail_url,
        form.download_url,
        form.version,
        form.publisher,
        form.final_category,
    ]
    filled = sum(1 for value in required if value)
    return round(filled * 100 / len(required))


_HAS_DIGIT = re.compile(r"[0-9]")
_HAS_LETTER = re.compile(r"[a-zA-Z]")


def is_acceptable_password(password: str) -> bool:
    return (
        len(password) >= MIN_PASSWORD_LENGTH
        and bool(_HAS_DIGIT.search(password))
        and bool(_HAS_LETTER.search(password))
    )


def password_strength(password: str) -> str:
    if not password:
        return "None"
    if len(password) < MIN_PASSWORD_LENGTH:
        return "Weak"
    if is_acceptable_password(password):
        if len(password) >= STRONG_PASSWORD_LENGTH:
            return "Strong"
        return "Medium"
    return "Weak"


def validate_registration(email: str, password: str, confirm_password: str, username: str) -> str | None:
    if not email.strip() or not password.strip() or not username.strip():
        return "Please fill in all fields"
    if not is_acceptable_password(password):
        return "Password must be at least 6 characters and contain at least one letter and one number"
    if password != confirm_password:
        return "Passwords do not match"
    return None


def validate_login(email: str, password: str) -> str | None:
    if not email.strip() or not password.strip():
        return "Please enter both email and password"
    return None
