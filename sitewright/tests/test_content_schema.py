"""Content document validation."""

import pytest

from sitewright.core.errors import ValidationError
from sitewright.models.content import DEFAULT_STYLING, empty_site_content, validate_site_content
from sitewright.models.website import normalize_subdomain


def test_valid_document_returned_unchanged_with_unknown_keys():
    doc = {
        "pages": [{"name": "Home", "slug": "home", "content": {"hero": {"title": "Hi"}}, "seo": {"x": 1}}],
        "styling": {"primaryColor": "#000000", "borderRadius": "4px"},
        "analytics": {"gaId": "G-123"},
    }
    assert validate_site_content(doc) is doc
    assert doc["analytics"] == {"gaId": "G-123"}


def test_pages_and_styling_are_optional():
    assert validate_site_content({}) == {}
    assert validate_site_content({"pages": []}) == {"pages": []}


def test_non_object_content_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_site_content(["not", "an", "object"])
    assert exc.value.status_code == 400
    assert exc.value.errors[0]["loc"] == ["content"]


def test_page_missing_slug_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_site_content({"pages": [{"name": "Home", "content": {}}]})
    assert any("slug" in err["loc"] for err in exc.value.errors)


def test_duplicate_slugs_rejected():
    doc = {"pages": [{"name": "A", "slug": "home"}, {"name": "B", "slug": "home"}]}
    with pytest.raises(ValidationError) as exc:
        validate_site_content(doc)
    assert "duplicate slug 'home'" in exc.value.errors[0]["msg"]


def test_duplicate_slugs_allowed_when_not_enforced():
    doc = {"pages": [{"name": "A", "slug": "home"}, {"name": "B", "slug": "home"}]}
    assert validate_site_content(doc, unique_slugs=False) is doc


def test_styling_must_be_object():
    with pytest.raises(ValidationError):
        validate_site_content({"styling": "blue"})


def test_empty_site_content_has_default_styling():
    content = empty_site_content()
    assert content == {"pages": [], "styling": DEFAULT_STYLING}
    content["styling"]["primaryColor"] = "#FFFFFF"
    assert DEFAULT_STYLING["primaryColor"] == "#3B82F6"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("joes-pizza", "joes-pizza"),
        ("  Joes-Pizza ", "joes-pizza"),
        ("a", "a"),
        ("a" * 63, "a" * 63),
    ],
)
def test_normalize_subdomain_canonical_form(raw, expected):
    assert normalize_subdomain(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "-pizza", "pizza-", "joe's", "joes_pizza", "a" * 64, "joes.pizza"])
def test_normalize_subdomain_rejects_invalid(raw):
    with pytest.raises(ValidationError) as exc:
        normalize_subdomain(raw)
    assert exc.value.errors[0]["loc"] == ["body", "subdomain"]
