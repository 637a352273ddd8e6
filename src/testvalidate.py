import pytest

from errors import ReportValidationError
from validate import is_valid_pan, validate_required_fields

VALID = {"name": "John Doe", "mobilePhone": "9876543210", "pan": "ABCDE1234F", "creditScore": 750}


def test_valid_data_passes():
    assert validate_required_fields(VALID)["pan"] == "ABCDE1234F"


def test_all_missing_fields_are_listed():
    data = dict(VALID, name=None, creditScore=0)
    with pytest.raises(ReportValidationError) as excinfo:
        validate_required_fields(data)
    assert excinfo.value.fields == ["name", "creditScore"]
    assert excinfo.value.message == "Missing required fields: name, creditScore"
    assert excinfo.value.kind == "validation-error"


def test_lowercase_pan_is_upper_cased():
    data = dict(VALID, pan=" abcde1234f ")
    validated = validate_required_fields(data)
    assert validated["pan"] == "ABCDE1234F"
    assert data["pan"] == " abcde1234f "


@pytest.mark.parametrize("pan", ["ABCD1234F", "ABCDE12345", "12345ABCDE", "ABCDE1234FG"])
def test_bad_pan_rejected(pan):
    with pytest.raises(ReportValidationError) as excinfo:
        validate_required_fields(dict(VALID, pan=pan))
    assert excinfo.value.message == "Invalid PAN format"
    assert excinfo.value.fields == ["pan"]


@pytest.mark.parametrize("score", [299, 950, 901])
def test_score_out_of_range(score):
    with pytest.raises(ReportValidationError) as excinfo:
        validate_required_fields(dict(VALID, creditScore=score))
    assert excinfo.value.message == "Credit score must be between 300 and 900"
    assert excinfo.value.fields == ["creditScore"]


@pytest.mark.parametrize("score", [300, 900])
def test_score_bounds_are_inclusive(score):
    assert validate_required_fields(dict(VALID, creditScore=score))["creditScore"] == score


def test_missing_fields_checked_before_pan():
    with pytest.raises(ReportValidationError) as excinfo:
        validate_required_fields(dict(VALID, pan="bad", mobilePhone=""))
    assert excinfo.value.fields == ["mobilePhone"]


def test_is_valid_pan():
    assert is_valid_pan("abcde1234f")
    assert not is_valid_pan("invalid-pan")
    assert not is_valid_pan(None)
