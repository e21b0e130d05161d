import pytest

from waitlist_service.core.config import Settings
from waitlist_service.core.options import FieldSpec, FieldType, WaitlistOptions, mask_email, normalize_email


def test_field_spec_coerces_type():
    spec = FieldSpec("tags", "string[]")
    assert spec.type is FieldType.string_array
    assert not spec.filterable
    assert FieldSpec("age", "number").filterable


@pytest.mark.parametrize("name", ["email", "status", "page", "sort_by", "not valid", "_private"])
def test_field_spec_rejects_reserved_or_invalid_names(name):
    with pytest.raises(ValueError):
        FieldSpec(name)


def test_field_spec_rejects_unknown_type():
    with pytest.raises(ValueError):
        FieldSpec("age", "integer")


def test_duplicate_fields_rejected():
    with pytest.raises(ValueError, match="Duplicate"):
        WaitlistOptions(additional_fields=(FieldSpec("name"), FieldSpec("name", "number")))


def test_allowed_domains_normalized_and_checked():
    options = WaitlistOptions(allowed_domains=["@Test.com "])
    assert options.allowed_domains == ("@test.com",)
    with pytest.raises(ValueError):
        WaitlistOptions(allowed_domains=("test.com",))


def test_maximum_participants_must_be_positive():
    with pytest.raises(ValueError):
        WaitlistOptions(maximum_participants=0)


def test_options_are_immutable():
    options = WaitlistOptions()
    with pytest.raises(AttributeError):
        options.enabled = True


def test_from_settings():
    settings = Settings(
        DATABASE_URL="sqlite+aiosqlite://",
        JWT_SECRET_KEY="x",
        WAITLIST_ENABLED=True,
        WAITLIST_ALLOWED_DOMAINS=["@test.com"],
        WAITLIST_MAXIMUM_PARTICIPANTS=50,
        WAITLIST_ADDITIONAL_FIELDS={"name": {"type": "string", "required": True}},
    )
    validate = lambda data: True  # noqa: E731
    options = WaitlistOptions.from_settings(settings, validate_entry=validate)
    assert options.enabled
    assert options.allowed_domains == ("@test.com",)
    assert options.maximum_participants == 50
    assert options.additional_fields == (FieldSpec("name", FieldType.string, required=True),)
    assert options.validate_entry is validate


def test_normalize_email():
    assert normalize_email("  Someone@Example.ORG ") == "someone@example.org"


@pytest.mark.parametrize(
    "email,masked",
    [
        ("someone@example.org", "s***@example.org"),
        ("@example.org", "***@example.org"),
        ("not-an-email", "n***"),
    ],
)
def test_mask_email(email, masked):
    assert mask_email(email) == masked
