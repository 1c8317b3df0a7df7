import pytest
from pydantic import ValidationError

from courtinvite.schemas.session import SessionCreate, SessionUpdate


@pytest.mark.parametrize("field", ["title", "start_at", "sport", "waitlist_enabled"])
def test_update_rejects_null_for_required_columns(field):
    with pytest.raises(ValidationError):
        SessionUpdate.model_validate({field: None})


def test_update_allows_clearing_optional_columns():
    update = SessionUpdate.model_validate({"capacity": None, "end_at": None, "location": None})

    assert update.model_dump(exclude_unset=True) == {"capacity": None, "end_at": None, "location": None}


def test_update_checks_end_after_start_when_both_sent():
    with pytest.raises(ValidationError):
        SessionUpdate(start_at="2030-05-07T19:00:00+00:00", end_at="2030-05-07T18:00:00+00:00")


def test_create_compares_naive_and_aware_times():
    with pytest.raises(ValidationError):
        SessionCreate(
            title="Doubles",
            start_at="2030-05-07T19:00:00+00:00",
            end_at="2030-05-07T18:00:00",
        )
