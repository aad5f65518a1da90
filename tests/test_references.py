"""Tests for the reference object catalog."""

import pytest

from cammeasure.errors import InvalidReferenceError, UnknownReferenceError
from cammeasure.references import CUSTOM_REFERENCE, ReferenceCatalog, ReferenceObject
from cammeasure.units import Unit


def test_builtin_lookup():
    catalog = ReferenceCatalog()
    card = catalog.lookup("credit-card")
    assert (card.width, card.height, card.unit) == (8.5, 5.4, Unit.CENTIMETER)
    assert catalog.lookup("a4-paper").height == 29.7


def test_unknown_reference_raises():
    catalog = ReferenceCatalog()
    with pytest.raises(UnknownReferenceError) as excinfo:
        catalog.lookup("coin")
    assert "coin" in str(excinfo.value)


def test_custom_reference_is_mutable():
    catalog = ReferenceCatalog()
    custom = catalog.set_custom(3.0, "in")
    assert custom == ReferenceObject(3.0, 3.0, Unit.INCH)
    assert catalog.lookup(CUSTOM_REFERENCE) is custom

    custom = catalog.set_custom(10, Unit.MILLIMETER, height=4)
    assert catalog.lookup(CUSTOM_REFERENCE).height == 4.0


def test_invalid_dimensions_rejected():
    catalog = ReferenceCatalog()
    with pytest.raises(InvalidReferenceError):
        catalog.set_custom(0, Unit.CENTIMETER)
    with pytest.raises(InvalidReferenceError):
        catalog.set_custom(1.0, "parsec")
    assert catalog.lookup(CUSTOM_REFERENCE).width == 8.5


def test_names_list_custom_last():
    catalog = ReferenceCatalog()
    assert catalog.names() == ["credit-card", "a4-paper", "us-dollar", "custom"]
    assert catalog.lookup("custom").width == 8.5
    assert dict(catalog.items())["us-dollar"].width == 15.6
