import pytest

from gamecatalog.tests.fakes import CATALOG_URL, STORE_URL, UPLOAD_URL


@pytest.fixture
def gog_settings(settings):
    settings.GOG_CATALOG_URL = CATALOG_URL
    settings.GOG_STORE_URL = STORE_URL
    settings.UPLOAD_URL = UPLOAD_URL
    settings.UPLOAD_TOKEN = ""
    settings.DEFAULT_RATING = "BR0"
    settings.GOG_GALLERY_FORMATTER = "product_card_v2_mobile_slider_639"
    return settings
