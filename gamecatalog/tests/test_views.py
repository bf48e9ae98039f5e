from unittest.mock import patch

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from gamecatalog.models import Game, GameImage
from gamecatalog.report import PopulateReport

pytestmark = pytest.mark.django_db

UPLOAD = "/api/upload/"
POPULATE = "/api/games/populate/"


@pytest.fixture()
def media(settings, tmp_path):
    settings.MEDIA_ROOT = str(tmp_path)
    settings.UPLOAD_TOKEN = ""
    return tmp_path


@pytest.fixture()
def game():
    return Game.objects.create(name="Hollow Knight", slug="hollow-knight")


def jpeg(name="hollow-knight.jpg"):
    return SimpleUploadedFile(name, b"\xff\xd8\xff\xe0fake-jpeg", content_type="image/jpeg")


def test_upload_cover(client, media, game):
    response = client.post(UPLOAD, {"refId": game.pk, "ref": "gamecatalog.game", "field": "cover", "files": jpeg()})

    assert response.status_code == 201
    game.refresh_from_db()
    assert game.cover.name.startswith("games/covers/hollow-knight")
    assert response.json()["data"][0]["id"] == game.pk


def test_upload_gallery_appends_images(client, media, game):
    files = [jpeg(), jpeg()]

    response = client.post(UPLOAD, {"refId": game.pk, "ref": "gamecatalog.game", "field": "gallery", "files": files})

    assert response.status_code == 201
    assert GameImage.objects.filter(game=game).count() == 2
    assert len(response.json()["data"]) == 2
    assert not game.cover


def test_upload_validation_errors(client, media, game):
    response = client.post(UPLOAD, {"refId": game.pk, "ref": "api::game.game", "field": "banner"})

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["name"] == "ValidationError"
    assert {e["path"][0] for e in error["details"]["errors"]} == {"ref", "field", "files"}


@pytest.mark.parametrize("ref_id", ["²", "abc", "-1"])
def test_upload_rejects_non_numeric_ref_id(client, media, game, ref_id):
    response = client.post(UPLOAD, {"refId": ref_id, "ref": "gamecatalog.game", "field": "cover", "files": jpeg()})

    assert response.status_code == 400
    assert [e["path"] for e in response.json()["error"]["details"]["errors"]] == [["refId"]]


def test_upload_unknown_game(client, media):
    response = client.post(UPLOAD, {"refId": 999, "ref": "gamecatalog.game", "field": "cover", "files": jpeg()})

    assert response.status_code == 404
    assert response.json()["error"]["details"]["errors"][0]["path"] == ["refId"]


def test_upload_requires_token_when_configured(client, media, game, settings):
    settings.UPLOAD_TOKEN = "secret"
    payload = {"refId": game.pk, "ref": "gamecatalog.game", "field": "cover"}

    refused = client.post(UPLOAD, {**payload, "files": jpeg()})
    accepted = client.post(UPLOAD, {**payload, "files": jpeg()}, HTTP_AUTHORIZATION="Bearer secret")

    assert refused.status_code == 401
    assert accepted.status_code == 201


def test_upload_rejects_get(client, media):
    assert client.get(UPLOAD).status_code == 405


def test_populate_requires_staff(client):
    with patch("gamecatalog.views.Populator") as populator:
        response = client.post(POPULATE + "?limit=2")

    assert response.status_code == 302
    populator.assert_not_called()


def test_populate_forwards_query_string(admin_client):
    with patch("gamecatalog.views.Populator") as populator:
        populator.return_value.run.return_value = PopulateReport(params={"limit": "2"}, fetched=2)
        response = admin_client.post(POPULATE + "?limit=2&productType=game&productType=pack")

    assert response.status_code == 200
    populator.return_value.run.assert_called_once_with({"limit": "2", "productType": ["game", "pack"]})
    assert response.json()["fetched"] == 2
    assert response.json()["ok"] is True


def test_populate_reports_aborted_run(admin_client):
    with patch("gamecatalog.views.Populator") as populator:
        populator.return_value.run.return_value = PopulateReport(params={}, aborted=True)
        response = admin_client.post(POPULATE)

    assert response.status_code == 502
    assert response.json()["aborted"] is True
