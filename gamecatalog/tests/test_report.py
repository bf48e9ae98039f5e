import requests
from django.core.exceptions import ValidationError

from gamecatalog.media import UploadError
from gamecatalog.report import CREATED, GameOutcome, PopulateReport, describe_error
from gamecatalog.tests.fakes import FakeResponse


def test_describe_error_reads_nested_http_errors():
    response = FakeResponse(400, json_data={
        "error": {"message": "2 errors occurred", "details": {"errors": [{"path": ["name"], "message": "taken"}]}},
    })
    exc = requests.HTTPError("400 Error", response=response)

    message, errors = describe_error(exc)

    assert message == "400 Error"
    assert errors == [{"path": ["name"], "message": "taken"}]


def test_describe_error_without_json_body():
    exc = requests.HTTPError("502 Error", response=FakeResponse(502, text="Bad gateway"))

    assert describe_error(exc) == ("502 Error", [])


def test_describe_error_from_validation_error():
    message, errors = describe_error(ValidationError({"slug": ["Enter a valid slug."]}))

    assert errors == [{"path": ["slug"], "message": "Enter a valid slug."}]
    assert message == "Enter a valid slug."


def test_describe_error_from_upload_error():
    exc = UploadError("refused", [{"path": ["files"], "message": "empty"}])

    assert describe_error(exc) == ("refused", [{"path": ["files"], "message": "empty"}])


def test_outcome_state_machine():
    outcome = GameOutcome(title="Hades")
    assert outcome.state == "absent"

    outcome.game_id = 1
    assert outcome.state == "created"

    outcome.cover = True
    assert outcome.state == "cover_attached"

    outcome.gallery_expected = 5
    outcome.gallery = 2
    assert outcome.state == "gallery_partial"

    outcome.gallery = 5
    assert outcome.state == "gallery_complete"


def test_report_records_failures(caplog):
    report = PopulateReport(params={"limit": 2})
    report.games.append(GameOutcome(title="Hades", status=CREATED, game_id=1))

    report.fail("scrape", "Hades", ValueError("boom"))

    assert not report.ok
    assert report.errors[0].stage == "scrape"
    assert "boom" in caplog.text

    data = report.as_dict()
    assert data["ok"] is False
    assert data["games"][0]["state"] == "created"
    assert data["errors"][0]["message"] == "boom"
