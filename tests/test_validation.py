import pytest

from profit_ledger.validation import EntryDraft, EntryValidationError, validate_draft


def test_valid_draft_from_text_fields():
    draft = validate_draft(
        {"amount": " 1,200 ", "categoryId": " food ", "type": "Expense", "memo": "  lunch "}
    )
    assert draft.amount == 1200
    assert draft.category_id == "food"
    assert draft.type == "expense"
    assert draft.memo == "lunch"
    assert draft.entry_id is None
    assert draft.date is None


def test_defaults_and_optional_fields():
    draft = validate_draft(
        {"amount": 300.0, "category_id": "salary", "entryId": "", "date": "2025-6-1"}
    )
    assert draft.type == "expense"
    assert draft.amount == 300
    assert draft.entry_id is None
    assert draft.date == "2025-06-01"


def test_model_instance_passes_through():
    draft = EntryDraft(amount=1, category_id="other")
    assert validate_draft(draft) is draft


@pytest.mark.parametrize(
    "amount, reason",
    [
        ("0", "must be greater than zero"),
        (-5, "must be greater than zero"),
        ("abc", "must be a whole number"),
        ("", "must be a whole number"),
        (12.5, "must be a whole number"),
        (True, "must be a number"),
        (None, "must be a number"),
    ],
)
def test_amount_rules(amount, reason):
    with pytest.raises(EntryValidationError) as exc_info:
        validate_draft({"amount": amount, "category_id": "food"})
    assert exc_info.value.errors == {"amount": reason}


def test_category_is_required_and_must_be_known():
    with pytest.raises(EntryValidationError) as missing:
        validate_draft({"amount": 10})
    assert missing.value.errors == {"category": "is required"}

    with pytest.raises(EntryValidationError) as blank:
        validate_draft({"amount": 10, "category_id": "  "})
    assert blank.value.errors == {"category": "is required"}

    with pytest.raises(EntryValidationError) as unknown:
        validate_draft({"amount": 10, "category_id": "yacht"})
    assert unknown.value.errors == {"category": "unknown category 'yacht'"}


def test_every_bad_field_is_reported():
    with pytest.raises(EntryValidationError) as exc_info:
        validate_draft({"amount": 0, "type": "refund", "date": "soon", "colour": "red"})

    errors = exc_info.value.errors
    assert set(errors) == {"amount", "category", "type", "date", "colour"}
    message = str(exc_info.value)
    assert message.startswith("Invalid entry: ")
    assert "amount: must be greater than zero" in message
    assert isinstance(exc_info.value, ValueError)
