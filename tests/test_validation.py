import uuid

import pytest

from timebank.services.validation import EntryValidationError, validate_entry

CONTRIBUTOR = "123e4567-e89b-12d3-a456-426614174000"


def make_entry(**overrides):
    data = {
        "week_start": "2025-01-20",
        "hours": 8,
        "tags": ["development", "testing"],
        "note": "Worked on feature X",
        "contributor_id": CONTRIBUTOR,
    }
    data.update(overrides)
    return data


def error_fields(exc_info):
    return [err["field"] for err in exc_info.value.errors]


def test_valid_entry_is_returned_normalized():
    entry = validate_entry(make_entry(week_start="2025-01-22", tags=["  Dev ", "DEV", "Design"]))
    assert entry.week_start.isoformat() == "2025-01-20"
    assert entry.tags == ["dev", "design"]
    assert entry.hours == 8
    assert entry.recipients == []


@pytest.mark.parametrize("hours", [100, 0.5, 99.99])
def test_hours_accepted(hours):
    assert validate_entry(make_entry(hours=hours)).hours == hours


@pytest.mark.parametrize("hours", [0, -1, 100.01, float("nan"), True, "lots", "50"])
def test_hours_rejected(hours):
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(make_entry(hours=hours))
    assert error_fields(exc_info) == ["hours"]


@pytest.mark.parametrize("week_start", ["2025/01/20", "20-01-2025", "2025-1-20", 20250120, "2025-02-30"])
def test_week_start_format(week_start):
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(make_entry(week_start=week_start))
    assert error_fields(exc_info) == ["week_start"]


def test_more_than_ten_tags_rejected_before_normalization():
    # 11 raw tags, even though they would collapse to one
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(make_entry(tags=["dev"] * 11))
    assert error_fields(exc_info) == ["tags"]


def test_note_length_limit():
    assert validate_entry(make_entry(note="x" * 1000)).note == "x" * 1000
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(make_entry(note="x" * 1001))
    assert error_fields(exc_info) == ["note"]


def test_identifiers_must_be_uuids():
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(make_entry(
            contributor_id="not-a-uuid",
            recipients=[{"recipient_id": "nope", "recipient_type": "user"}],
        ))
    assert sorted(error_fields(exc_info)) == ["contributor_id", "recipients.0.recipient_id"]


def test_recipient_type_must_be_user_or_guild():
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(make_entry(recipients=[{"recipient_id": str(uuid.uuid4()), "recipient_type": "team"}]))
    assert error_fields(exc_info) == ["recipients.0.recipient_type"]


def test_errors_are_collected_per_field():
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(make_entry(hours=0, note="x" * 1001, week_start="yesterday"))
    assert sorted(error_fields(exc_info)) == ["hours", "note", "week_start"]
    assert all(err["message"] for err in exc_info.value.errors)


def test_caller_identity_fills_missing_contributor():
    data = make_entry()
    del data["contributor_id"]
    caller = str(uuid.uuid4())
    assert validate_entry(data, contributor_id=caller).contributor_id == caller


def test_unknown_evaluation_axis_rejected():
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(make_entry(detailed_evaluations=[{"axis_key": "charisma", "score": 3}]))
    assert error_fields(exc_info) == ["detailed_evaluations.0.axis_key"]


def test_partial_update_keeps_optional_fields_unset():
    entry = validate_entry({"week_start": "2025-01-26", "hours": 2}, partial=True)
    assert entry.week_start.isoformat() == "2025-01-20"
    assert entry.tags is None
    assert entry.note is None
    assert entry.recipients is None


def test_partial_update_still_requires_hours_and_date():
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry({"tags": ["dev"]}, partial=True)
    assert sorted(error_fields(exc_info)) == ["hours", "week_start"]


def test_each_axis_scored_once():
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(make_entry(detailed_evaluations=[
            {"axis_key": "support", "score": 5},
            {"axis_key": "support", "score": 1},
        ]))
    assert error_fields(exc_info) == ["detailed_evaluations"]


def test_each_recipient_listed_once():
    recipient = {"recipient_id": str(uuid.uuid4()), "recipient_type": "user"}
    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry(make_entry(recipients=[recipient, dict(recipient)]))
    assert error_fields(exc_info) == ["recipients"]

    with pytest.raises(EntryValidationError) as exc_info:
        validate_entry({"week_start": "2025-01-20", "hours": 1, "recipients": [recipient, recipient]}, partial=True)
    assert error_fields(exc_info) == ["recipients"]
