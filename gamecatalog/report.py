"""
Rapport d'exécution de l'alimentation du catalogue.

Chaque étape (catalogue, références, scraping, jeux, médias) consigne ici
ses échecs puis continue ; seul un échec du catalogue interrompt le run.
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import List, Optional

import requests
from django.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

CREATED = 'created'
SKIPPED = 'skipped'
FAILED = 'failed'


def describe_error(exc):
    """ Retourne (message, liste d'erreurs imbriquées) pour une exception """
    errors = []

    if isinstance(exc, ValidationError):
        if hasattr(exc, 'error_dict'):
            errors = [
                {'path': [path], 'message': message}
                for path, messages in exc.message_dict.items()
                for message in messages
            ]
        else:
            errors = [{'path': [], 'message': message} for message in exc.messages]
        return '; '.join(e['message'] for e in errors) or str(exc), errors

    nested = getattr(exc, 'errors', None)
    if isinstance(nested, list):
        return str(exc), nested

    response = getattr(exc, 'response', None)
    if isinstance(exc, requests.RequestException) and response is not None:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get('error') or {}
            details = error.get('details') if isinstance(error, dict) else None
            if isinstance(details, dict) and isinstance(details.get('errors'), list):
                errors = details['errors']
            elif isinstance(body.get('errors'), list):
                errors = body['errors']

    return str(exc), errors


@dataclass
class StageError:
    stage: str
    subject: str
    message: str
    errors: List[dict] = field(default_factory=list)


@dataclass
class GameOutcome:
    title: str
    status: str = SKIPPED
    game_id: Optional[int] = None
    scraped: bool = False
    cover: bool = False
    gallery: int = 0
    gallery_expected: int = 0

    @property
    def state(self):
        if self.game_id is None:
            return 'absent'
        if self.gallery and self.gallery >= self.gallery_expected:
            return 'gallery_complete'
        if self.gallery:
            return 'gallery_partial'
        if self.cover:
            return 'cover_attached'
        return 'created'


@dataclass
class PopulateReport:
    params: dict
    fetched: int = 0
    references: dict = field(default_factory=dict)
    games: List[GameOutcome] = field(default_factory=list)
    errors: List[StageError] = field(default_factory=list)
    aborted: bool = False

    def fail(self, stage, subject, exc):
        """ Consigne (et journalise) un échec sans l'interrompre """
        message, errors = describe_error(exc)
        self.errors.append(StageError(stage=stage, subject=str(subject), message=message, errors=errors))
        if errors:
            logger.error("%s [%s]: %s %s", stage, subject, message, errors)
        else:
            logger.error("%s [%s]: %s", stage, subject, message)

    @property
    def created(self):
        return [g for g in self.games if g.status == CREATED]

    @property
    def skipped(self):
        return [g for g in self.games if g.status == SKIPPED]

    @property
    def ok(self):
        return not self.aborted and not self.errors

    def as_dict(self):
        data = asdict(self)
        for outcome, raw in zip(self.games, data['games']):
            raw['state'] = outcome.state
        data['ok'] = self.ok
        return data
