"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from pytest_bdd import given, parsers, then


@pytest.fixture()
def catalog():
    """Product ids by name, filled in by the given steps."""
    return {}


@pytest.fixture()
def error():
    """Container for an exception raised by a when step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a published product "{name}" with variant "{variant}" holding {stock:d} units'))
def published_product(make_product, catalog, name, variant, stock):
    catalog[name] = make_product(name=name, variants=[{"name": variant, "stock": stock}])


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" in "{variant}" has {stock:d} units left'))
def units_left(load_product, catalog, name, variant, stock):
    assert load_product(catalog[name]).variant_named(variant).stock == stock
