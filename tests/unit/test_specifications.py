"""Test Specification composition and the common property specifications."""

import re

import pytest

from domainkit.core.errors import ConfigurationError
from domainkit.specifications import (
    Specification,
    always_false,
    always_true,
    as_specification,
    get_property,
    parameterized_specification,
    property_between,
    property_contains,
    property_equals,
    property_greater_than,
    property_in,
    property_is_not_null,
    property_is_null,
    property_less_than,
    property_matches,
    specification,
)


class Obj:
    def __init__(self, **data):
        self.__dict__.update(data)


ORDER = {"status": "PLACED", "total": 150, "tags": ["rush", "gift"], "note": None,
         "customer": {"country": "NL", "email": "ann@example.com"}}


class TestSpecification:
    def test_requires_name_and_predicate(self):
        with pytest.raises(ConfigurationError):
            Specification("", lambda c: True)
        with pytest.raises(ConfigurationError):
            Specification("Broken", None)  # type: ignore[arg-type]

    def test_is_satisfied_by_and_call(self):
        spec = specification(name="Big", is_satisfied_by=lambda o: o["total"] > 100)
        assert spec.is_satisfied_by(ORDER) is True
        assert spec(ORDER) is True
        assert spec.name == "Big"

    def test_and_or_not(self):
        placed = property_equals("status", "PLACED")
        small = property_less_than("total", 100)
        assert (placed & ~small).is_satisfied_by(ORDER)
        assert not (placed & small).is_satisfied_by(ORDER)
        assert (small | placed).is_satisfied_by(ORDER)
        assert placed.and_(small).name == "Property status Equals PLACED AND Property total < 100"
        assert small.or_(placed).name.startswith("Property total < 100 OR ")
        assert placed.not_().name == "NOT Property status Equals PLACED"

    def test_compose_with_plain_callable(self):
        spec = property_equals("status", "PLACED") & (lambda o: o["total"] > 1000)
        assert spec.is_satisfied_by(ORDER) is False

    def test_as_specification(self):
        class HasSatisfied:
            name = "Custom"

            def is_satisfied_by(self, c):
                return True

        assert as_specification(HasSatisfied()).name == "Custom"
        assert as_specification(len).name == "len"
        spec = always_true()
        assert as_specification(spec) is spec
        with pytest.raises(ConfigurationError):
            as_specification(42)


class TestGetProperty:
    def test_dotted_paths(self):
        assert get_property(ORDER, "customer.country") == "NL"
        assert get_property(Obj(customer=Obj(country="BE")), "customer.country") == "BE"


class TestPropertySpecifications:
    def test_equals(self):
        assert property_equals("status", "PLACED")(ORDER)
        assert not property_equals("status", "DRAFT")(ORDER)
        assert not property_equals("status", "PLACED")(None)
        assert property_equals("status", "PLACED")(Obj(status="PLACED"))

    def test_contains(self):
        assert property_contains("tags", "rush")(ORDER)
        assert property_contains("customer.email", "@example")(ORDER)
        assert not property_contains("tags", "fragile")(ORDER)
        assert not property_contains("total", 1)(ORDER)

    def test_matches(self):
        assert property_matches("customer.email", r"^ann@")(ORDER)
        assert property_matches("customer.email", re.compile("EXAMPLE", re.I))(ORDER)
        assert not property_matches("total", r"1")(ORDER)

    def test_greater_less_between(self):
        assert property_greater_than("total", 100)(ORDER)
        assert not property_greater_than("total", 150)(ORDER)
        assert property_less_than("total", 151)(ORDER)
        assert property_between("total", 150, 200)(ORDER)
        assert not property_between("total", 0, 149)(ORDER)

    def test_incomparable_values_not_satisfied(self):
        assert not property_greater_than("status", 5)(ORDER)
        assert not property_greater_than("note", 5)(ORDER)

    def test_in(self):
        spec = property_in("status", ["PLACED", "SHIPPED"])
        assert spec(ORDER)
        assert spec.name == "Property status In [PLACED, SHIPPED]"
        assert not property_in("status", ["DRAFT"])(ORDER)

    def test_null_checks(self):
        assert property_is_null("note")(ORDER)
        assert property_is_null("missing")(ORDER)
        assert not property_is_null("status")(ORDER)
        assert property_is_not_null("status")(ORDER)
        assert not property_is_not_null("note")(ORDER)
        assert not property_is_not_null("missing")(ORDER)
        assert not property_is_null("note")(None)

    def test_missing_property_never_satisfies(self):
        assert not property_equals("missing", None)(ORDER)
        assert not property_less_than("missing", 10)(ORDER)

    def test_custom_name(self):
        assert property_equals("status", "PLACED", "Is placed").name == "Is placed"

    def test_constants(self):
        assert always_true()(None)
        assert not always_false()(ORDER)


class TestParameterizedSpecification:
    def test_builds_specifications(self):
        min_total = parameterized_specification(
            name=lambda p: f"Total at least {p}",
            create_predicate=lambda p: lambda o: o["total"] >= p,
        )
        spec = min_total(100)
        assert spec.name == "Total at least 100"
        assert spec(ORDER)
        assert not min_total(200)(ORDER)

    def test_static_name(self):
        spec = parameterized_specification(name="Country", create_predicate=lambda c: lambda o: True)("NL")
        assert spec.name == "Country"

    def test_requires_name_and_predicate_factory(self):
        with pytest.raises(ConfigurationError):
            parameterized_specification(name="", create_predicate=lambda p: None)
        with pytest.raises(ConfigurationError):
            parameterized_specification(name="X", create_predicate=None)
