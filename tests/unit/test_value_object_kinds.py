"""Test string, number and identifier value objects and ValueObject.extend."""

import re
from typing import Annotated

import pytest
from pydantic import StringConstraints
from pydantic import ValidationError as PydanticValidationError

from domainkit.core.errors import ConfigurationError, DomainError, ValidationError
from domainkit.value_objects import (
    IdentifierValue,
    IntegerNumberValue,
    NonEmptyStringValue,
    NonNegativeNumber,
    NonNegativeNumberValue,
    NumberValue,
    NumericIdentifier,
    PercentageNumber,
    PercentageNumberValue,
    PositiveNumberValue,
    StringValue,
    ValueObject,
)

SAMPLE_UUID = "123e4567-e89b-12d3-a456-426614174000"


class Money(ValueObject):
    amount: NonNegativeNumber
    currency: str


class TestPrimitiveValue:
    def test_create_from_bare_value(self):
        assert StringValue.create("Hello").value == "Hello"

    def test_create_from_wrapper_or_mapping(self):
        hello = StringValue.create("Hello")
        assert StringValue.create(hello) == hello
        assert StringValue.create({"value": "Hello"}) == hello

    def test_equals_bare_value(self):
        assert StringValue.create("Hello").equals("Hello")
        assert StringValue.create("Hello").equals(StringValue.create("Hello"))
        assert not StringValue.create("Hello").equals("World")
        assert StringValue.create("Hello").equals(None) is False

    def test_str_is_the_value(self):
        assert str(NumberValue.create(42)) == "42"

    def test_frozen(self):
        with pytest.raises(PydanticValidationError):
            StringValue.create("x").value = "y"


class TestStringValue:
    @pytest.fixture
    def hello(self):
        return StringValue.create("Hello World")

    def test_queries(self, hello):
        assert hello.contains("World")
        assert hello.startswith("Hell")
        assert hello.endswith("rld")
        assert hello.matches(r"^H\w+ W")
        assert not hello.is_empty()
        assert hello.split(" ") == ["Hello", "World"]
        assert len(hello) == 11

    def test_truncate(self, hello):
        assert hello.truncate(8).value == "Hello..."
        assert hello.truncate(20) is hello
        assert hello.truncate(7, suffix="~").value == "Hello ~"

    def test_case_and_trim(self, hello):
        assert hello.lower().value == "hello world"
        assert hello.upper().value == "HELLO WORLD"
        assert StringValue.create("lamp shade").capitalize().value == "Lamp shade"
        assert StringValue.create("  x ").strip().value == "x"

    def test_replace_text_and_substring(self):
        assert StringValue.create("hello").replace_text("l", "L").value == "heLLo"
        assert StringValue.create("hello").substring(1, 3).value == "el"

    def test_padding(self):
        assert StringValue.create("ab").pad(5, "*").value == "*ab**"
        assert StringValue.create("42").pad_start(5, "0").value == "00042"
        assert StringValue.create("x").pad_end(6, "ab").value == "xababa"
        assert StringValue.create("long").pad_start(2).value == "long"

    def test_padding_needs_fill(self):
        with pytest.raises(ValueError):
            StringValue.create("x").pad(4, "")

    def test_results_keep_the_class(self, hello):
        assert type(hello.lower()) is StringValue


class TestNonEmptyStringValue:
    def test_trims(self):
        title = NonEmptyStringValue.create("  desk lamp ")
        assert title.value == "desk lamp"
        assert title.capitalize().value == "Desk lamp"
        assert isinstance(title.upper(), NonEmptyStringValue)

    @pytest.mark.parametrize("raw", ["", "   "])
    def test_rejects_blank(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            NonEmptyStringValue.create(raw)
        assert exc_info.value.fields == ["value"]

    def test_operations_are_validated(self):
        with pytest.raises(ValidationError):
            NonEmptyStringValue.create("abc").substring(5)


class TestNumberValue:
    def test_int_stays_int(self):
        n = NumberValue.create(42)
        assert n.value == 42
        assert isinstance(n.value, int)

    def test_rejects_non_finite(self):
        with pytest.raises(ValidationError):
            NumberValue.create(float("nan"))

    def test_arithmetic(self):
        n = NumberValue.create(42)
        assert n.add(8).value == 50
        assert n.subtract(2).value == 40
        assert n.multiply(NumberValue.create(2)).value == 84
        assert n.divide(4).value == 10.5
        assert n.increment().value == 43
        assert n.decrement(2).value == 40
        assert NumberValue.create(-3).abs().value == 3
        assert NumberValue.create(2).pow(10).value == 1024
        assert NumberValue.create(16).sqrt().value == 4.0
        assert n.value == 42

    def test_divide_by_zero(self):
        with pytest.raises(DomainError, match="divide by zero"):
            NumberValue.create(1).divide(NumberValue.create(0))

    def test_negative_sqrt(self):
        with pytest.raises(DomainError, match="square root"):
            NumberValue.create(-4).sqrt()

    def test_complex_power(self):
        with pytest.raises(DomainError, match="no real result"):
            NumberValue.create(-8).pow(0.5)

    def test_rounding(self):
        assert NumberValue.create(3.14159).round(2).value == 3.14
        assert NumberValue.create(2.5).round().value == 3
        assert NumberValue.create(-2.5).round().value == -2
        assert NumberValue.create(1.789).floor(1).value == 1.7
        assert NumberValue.create(1.21).ceil(1).value == 1.3
        assert NumberValue.create(7.9).floor().value == 7

    def test_queries(self):
        assert NumberValue.create(0).is_zero()
        assert NumberValue.create(1).is_positive()
        assert NumberValue.create(-1).is_negative()
        assert NumberValue.create(2.0).is_integer()
        assert not NumberValue.create(2.5).is_integer()

    def test_formatting(self):
        assert NumberValue.create(1234567).format() == "1,234,567"
        assert NumberValue.create(1234567.891).format(",.2f") == "1,234,567.89"
        assert f"{NumberValue.create(2.5):.2f}" == "2.50"
        assert NumberValue.create(0.256).to_percentage(1) == "25.6%"


class TestConstrainedNumbers:
    def test_positive(self):
        price = PositiveNumberValue.create(10)
        assert price.multiply(1.5).value == 15.0
        with pytest.raises(ValidationError):
            price.subtract(20)
        with pytest.raises(ValidationError):
            PositiveNumberValue.create(0)

    def test_non_negative(self):
        assert NonNegativeNumberValue.create(1).decrement().value == 0
        with pytest.raises(ValidationError):
            NonNegativeNumberValue.create(1).decrement(2)

    def test_integer(self):
        assert IntegerNumberValue.create(6).divide(2).value == 3
        with pytest.raises(ValidationError):
            IntegerNumberValue.create(5).divide(2)

    def test_percentage(self):
        share = PercentageNumberValue.create(0.25)
        assert share.to_percentage() == "25%"
        with pytest.raises(ValidationError):
            share.add(0.8)


class TestIdentifierValue:
    def test_trims_and_formats(self):
        user_id = IdentifierValue.create("  123 ")
        assert user_id.value == "123"
        assert user_id.format("user_{id}") == "user_123"
        assert user_id.with_prefix("acct-").value == "acct-123"
        assert user_id.with_suffix("-x").value == "123-x"
        assert user_id.matches(r"^\d+$")

    def test_rejects_blank(self):
        with pytest.raises(ValidationError):
            IdentifierValue.create("   ")

    def test_length_limit_applies_to_results(self):
        with pytest.raises(ValidationError):
            IdentifierValue.create("a").with_suffix("b" * 255)

    def test_generate_uuid(self):
        uuid_type = IdentifierValue.uuid()
        assert uuid_type.create(IdentifierValue.generate_uuid()).version() == 4


class TestUUIDIdentifier:
    def test_accessors(self):
        uid = IdentifierValue.uuid().create(SAMPLE_UUID)
        assert uid.version() == 1
        assert uid.compact() == SAMPLE_UUID.replace("-", "")
        assert uid.segment(0) == "123e4567"
        assert uid.segment(4) == "426614174000"

    @pytest.mark.parametrize("index", [-1, 5])
    def test_segment_out_of_range(self, index):
        with pytest.raises(DomainError, match="out of range"):
            IdentifierValue.uuid().create(SAMPLE_UUID).segment(index)

    def test_rejects_non_uuid(self):
        with pytest.raises(ValidationError) as exc_info:
            IdentifierValue.uuid().create("not-a-uuid")
        assert exc_info.value.fields == ["value"]


class TestNumericIdentifier:
    def test_next_and_padded(self):
        seq = IdentifierValue.numeric()
        assert seq is NumericIdentifier
        assert seq.create(1).next().value == 2
        assert seq.create(7).padded(4) == "0007"

    def test_default_minimum(self):
        with pytest.raises(ValidationError):
            IdentifierValue.numeric().create(0)

    def test_custom_minimum(self):
        seq = IdentifierValue.numeric(min_value=1000)
        with pytest.raises(ValidationError):
            seq.create(999)
        following = seq.create(1000).next()
        assert following.value == 1001
        assert type(following) is seq
        assert isinstance(following, NumericIdentifier)


class TestPatternIdentifier:
    def test_valid_and_extract(self):
        order_no = IdentifierValue.pattern(r"^ORD-(\d{4})-(\d+)$", name="OrderNo")
        assert order_no.__name__ == "OrderNo"
        number = order_no.create("ORD-2024-17")
        assert number.extract(r"^ORD-(\d{4})-(\d+)$") == ["2024", "17"]
        assert number.extract(r"X(\d)") == []

    def test_invalid(self):
        order_no = IdentifierValue.pattern(r"^ORD-\d+$", name="OrderNo")
        with pytest.raises(ValidationError, match="must match pattern") as exc_info:
            order_no.create("ORD-x")
        assert exc_info.value.context["object_type"] == "OrderNo"

    def test_compiled_pattern(self):
        code = IdentifierValue.pattern(re.compile(r"^[A-Z]{3}$"))
        assert code.create("ABC").value == "ABC"
        with pytest.raises(ValidationError):
            code.create("abc")


class TestExtend:
    def test_narrows_field_and_adds_methods(self):
        email = StringValue.extend(
            "Email",
            value=Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, pattern=r"^[^@\s]+@[^@\s]+$")],
            methods={"domain": lambda self: self.value.split("@")[1]},
        )
        address = email.create(" Ann@Example.com ")
        assert address.value == "ann@example.com"
        assert address.domain() == "example.com"
        assert type(address.upper().lower()) is email
        assert isinstance(address, StringValue)
        with pytest.raises(ValidationError):
            email.create("nope")

    def test_adds_field_with_default(self):
        price = Money.extend("Price", tax_rate=(PercentageNumber, 0.0))
        taxed = price.create(amount=10, currency="EUR")
        assert taxed.tax_rate == 0.0
        assert isinstance(taxed, Money)
        with pytest.raises(ValidationError):
            price.create(amount=10, currency="EUR", tax_rate=2)

    def test_parent_untouched(self):
        StringValue.extend("Shout", methods={"shout": lambda self: self.value.upper() + "!"})
        assert not hasattr(StringValue.create("x"), "shout")

    def test_requires_name(self):
        with pytest.raises(ConfigurationError, match="name is required"):
            StringValue.extend("")

    def test_method_must_be_callable(self):
        with pytest.raises(ConfigurationError, match="not callable"):
            StringValue.extend("Bad", methods={"shout": "loud"})

    def test_method_cannot_shadow_field(self):
        with pytest.raises(ConfigurationError, match="clashes with a field"):
            StringValue.extend("Bad", methods={"value": lambda self: 1})
