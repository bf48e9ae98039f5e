import logging

import requests
from django.conf import settings

from gamecatalog.store import GAME_REF

logger = logging.getLogger(__name__)

GALLERY_LIMIT = 5


class UploadError(Exception):
    def __init__(self, message, errors=None):
        super().__init__(message)
        self.errors = errors or []


def gallery_urls(screenshots, formatter=None):
    """ Les 5 premières captures, au format galerie """
    formatter = formatter or settings.GOG_GALLERY_FORMATTER
    return [url.replace('{formatter}', formatter) for url in screenshots[:GALLERY_LIMIT]]


class MediaUploader:
    """
    Télécharge une image distante et la pousse sur l'endpoint d'upload,
    rattachée au champ ``cover`` ou ``gallery`` d'un jeu.
    """

    def __init__(self, session=None, upload_url=None, token=None, timeout=None):
        self.session = session or requests.Session()
        self.upload_url = upload_url or settings.UPLOAD_URL
        self.token = settings.UPLOAD_TOKEN if token is None else token
        self.timeout = timeout or settings.HTTP_TIMEOUT

    def download(self, url):
        res = self.session.get(url, timeout=self.timeout)
        res.raise_for_status()
        return res.content

    def upload(self, game, image_url, field='cover'):
        content = self.download(image_url)

        filename = f"{game.slug}.jpg"
        data = {'refId': str(game.pk), 'ref': GAME_REF, 'field': field}
        files = {'files': (filename, content, 'image/jpeg')}
        headers = {'Authorization': f'Bearer {self.token}'} if self.token else {}

        logger.info("Upload image %s : %s", field, filename)

        res = self.session.post(self.upload_url, data=data, files=files, headers=headers, timeout=self.timeout)
        if res.status_code >= 400:
            errors = []
            try:
                body = res.json()
                errors = body['error']['details']['errors']
            except (ValueError, KeyError, TypeError):
                pass
            raise UploadError(f"Upload {field} refusé ({res.status_code}) pour {filename}", errors)
        return res
