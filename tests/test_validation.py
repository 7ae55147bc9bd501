from __future__ import annotations

import pytest

from apkstore.validation import (
    AppForm,
    form_progress,
    is_valid_url,
    password_strength,
    validate_app_form,
    validate_login,
    validate_registration,
)


def valid_form(**overrides) -> AppForm:
    values = {
        "title": "Notes",
        "description": "Take notes.",
        "thumbnail_url": "https://cdn.example.com/notes.png",
        "download_url": "https://cdn.example.com/notes.apk",
        "category": "productivity",
        "version": "2.1",
        "publisher": "Acme",
    }
    values.update(overrides)
    return AppForm.from_input(**values)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("https://example.com/icon.png", True),
        ("http://localhost:8000/app.apk", True),
        ("not-a-url", False),
        ("ftp://example.com/file", False),
        ("", False),
    ],
)
def test_is_valid_url(value, expected):
    assert is_valid_url(value) is expected


def test_valid_form_has_no_errors():
    assert validate_app_form(valid_form()) == {}


def test_malformed_thumbnail_url_is_rejected():
    errors = validate_app_form(valid_form(thumbnail_url="not-a-url"))
    assert errors == {"thumbnail_url": "Please enter a valid URL"}


def test_blank_form_reports_every_required_field():
    errors = validate_app_form(AppForm.from_input(title="   "))
    assert errors["title"] == "Title is required"
    assert errors["description"] == "Description is required"
    assert errors["thumbnail_url"] == "Thumbnail URL is required"
    assert errors["download_url"] == "Download URL is required"
    assert errors["category"] == "Category is required"
    assert errors["version"] == "Version is required"
    assert errors["publisher"] == "Publisher is required"


def test_screenshot_errors_are_indexed_after_blank_entries_are_dropped():
    form = valid_form(screenshots=["", "https://ok.example.com/1.png", "  ", "bad"])
    assert form.screenshots == ["https://ok.example.com/1.png", "bad"]
    assert validate_app_form(form) == {"screenshot_1": "Please enter a valid URL"}


def test_custom_category_replaces_selected_category():
    form = valid_form(category="", use_custom_category=True, custom_category=" Health ")
    assert validate_app_form(form) == {}
    assert form.to_record()["category"] == "Health"

    missing = valid_form(use_custom_category=True, custom_category="")
    assert validate_app_form(missing) == {"custom_category": "Custom category is required"}


def test_tags_are_trimmed_and_empty_tags_dropped():
    form = valid_form(tags=[" offline ", "", "notes"])
    assert form.to_record()["tags"] == ["offline", "notes"]


def test_form_progress_counts_required_fields():
    assert form_progress(AppForm()) == 0
    assert form_progress(valid_form()) == 100
    assert form_progress(AppForm.from_input(title="x")) == 14


def test_registration_rules():
    assert validate_registration("", "abc123", "abc123", "bob") == "Please fill in all fields"
    assert validate_registration("b@example.com", "abcdef", "abcdef", "bob").startswith("Password must be")
    assert validate_registration("b@example.com", "123456", "123456", "bob").startswith("Password must be")
    assert validate_registration("b@example.com", "abc123", "abc124", "bob") == "Passwords do not match"
    assert validate_registration("b@example.com", "abc123", "abc123", "bob") is None


def test_login_requires_both_fields():
    assert validate_login(" ", "secret") == "Please enter both email and password"
    assert validate_login("a@example.com", "secret") is None


@pytest.mark.parametrize(
    "password, strength",
    [("", "None"), ("ab1", "Weak"), ("abcdefgh", "Weak"), ("abc123", "Medium"), ("abcdef123456", "Strong")],
)
def test_password_strength(password, strength):
    assert password_strength(password) == strength
