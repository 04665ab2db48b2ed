"""
Unit tests for dedup error classes.
"""
import pytest

from rolodex.core.errors import DedupError, MergeFailedError, NotFoundError, ValidationError


@pytest.mark.unit
def test_status_codes():
    assert DedupError("x").status_code == 500
    assert ValidationError().status_code == 400
    assert NotFoundError().status_code == 404
    assert MergeFailedError().status_code == 500


@pytest.mark.unit
def test_status_code_override():
    assert DedupError("teapot", status_code=418).status_code == 418


@pytest.mark.unit
def test_not_found_lists_ids():
    error = NotFoundError(resource_ids=[5, 9999])

    assert error.message == "One or both contacts not found: 5, 9999"
    assert error.resource_ids == [5, 9999]


@pytest.mark.unit
def test_validation_error_params():
    error = ValidationError("bad", invalid_params={"keepId": "None"})

    assert error.invalid_params == {"keepId": "None"}
    assert error.details == {"invalid_params": {"keepId": "None"}}


@pytest.mark.unit
def test_to_dict():
    error = MergeFailedError(keep_id=1, remove_id=2)

    assert error.to_dict() == {
        "error_type": "MergeFailedError",
        "message": "Failed to merge contacts",
        "status_code": 500,
        "details": {"keep_id": 1, "remove_id": 2},
    }


@pytest.mark.unit
def test_str_includes_status():
    assert str(NotFoundError()) == "One or both contacts not found (HTTP 404)"


@pytest.mark.unit
def test_subclasses_share_base():
    for error in (ValidationError(), NotFoundError(), MergeFailedError()):
        assert isinstance(error, DedupError)
