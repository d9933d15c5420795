# tests/dom/test_utility_classes.py
import pytest

from bootstrap_email.dom.utility_classes import (
    is_column_token,
    parse_column_class,
    parse_spacing_class,
    spacing_classes,
)


@pytest.mark.parametrize("token, prop, direction, breakpoint, size", [
    ("m-0", "margin", None, None, 0),
    ("my-5", "margin", "y", None, 5),
    ("pt-lg-2", "padding", "t", "lg", 2),
    ("px-3", "padding", "x", None, 3),
])
def test_parse_spacing_class(token, prop, direction, breakpoint, size):
    """Test of spacing-klassen in hun onderdelen worden opgesplitst."""
    parsed = parse_spacing_class(token)
    assert parsed.property == prop
    assert parsed.direction == direction
    assert parsed.breakpoint == breakpoint
    assert parsed.size == size


@pytest.mark.parametrize("token", ["mx-auto", "m-", "pz-3", "my-md-3", "text-center", "mt-lg"])
def test_non_spacing_tokens_are_ignored(token):
    """Test of andere klassen niet als spacing worden herkend."""
    assert parse_spacing_class(token) is None


def test_neutral_namespace():
    """Test of de m/p-prefix door s wordt vervangen."""
    assert parse_spacing_class("my-5").neutral == "sy-5"
    assert parse_spacing_class("p-lg-3").neutral == "s-lg-3"


def test_spacing_classes_filters_on_property():
    """Test of alleen de gevraagde eigenschap wordt teruggegeven."""
    tokens = ["mx-3", "py-5", "container", "mb-1"]
    assert [c.token for c in spacing_classes(tokens, "margin")] == ["mx-3", "mb-1"]
    assert [c.token for c in spacing_classes(tokens, "padding")] == ["py-5"]
    assert len(spacing_classes(tokens)) == 3


def test_parse_column_classes():
    """Test de verschillende vormen van kolomklassen."""
    assert parse_column_class("col-6").size == 6
    assert parse_column_class("col-6").breakpoint is None
    assert parse_column_class("col-lg-4").breakpoint == "lg"
    assert parse_column_class("col-lg-4").size == 4
    assert parse_column_class("col").size is None
    assert parse_column_class("col-lg").breakpoint == "lg"
    assert parse_column_class("collapse") is None


@pytest.mark.parametrize("token", ["col-abc", "col-0", "col-md-6"])
def test_malformed_column_classes(token):
    """Test of onbruikbare kolomgroottes als malformed worden gemarkeerd."""
    parsed = parse_column_class(token)
    assert parsed is not None
    assert parsed.malformed
    assert parsed.size is None


def test_is_column_token():
    assert is_column_token("col-12")
    assert is_column_token("col")
    assert not is_column_token("row")
