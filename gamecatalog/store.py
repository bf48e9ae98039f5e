"""
Accès au stockage des entités du catalogue.

Le pipeline d'alimentation ne parle jamais directement aux modèles : il
reçoit un ContentStore. Les contraintes d'unicité sur ``name`` + get_or_create
remplacent le couple "recherche puis création" (pas de doublon en cas de
courses entre deux exécutions).
"""
from django.db import transaction
from django.utils import timezone
from django.utils.text import slugify

from gamecatalog.models import Category, Developer, Game, Platform, Publisher

GAME_REF = 'gamecatalog.game'

DEVELOPER = 'developer'
PUBLISHER = 'publisher'
CATEGORY = 'category'
PLATFORM = 'platform'

REFERENCE_MODELS = {
    DEVELOPER: Developer,
    PUBLISHER: Publisher,
    CATEGORY: Category,
    PLATFORM: Platform,
}


class ContentStore:

    def model(self, kind):
        try:
            return REFERENCE_MODELS[kind]
        except KeyError:
            raise ValueError(f"Type d'entité inconnu : {kind}")

    def ensure(self, kind, name):
        """ Upsert atomique : retourne (entité, créée ?) """
        return self.model(kind).objects.get_or_create(
            name=name,
            defaults={'slug': slugify(name)},
        )

    def resolve(self, kind, names):
        # Les noms absents (référence ratée plus tôt) ne sont simplement pas liés
        if not names:
            return []
        return list(self.model(kind).objects.filter(name__in=set(names)))

    def find_game(self, name):
        return Game.objects.filter(name=name).first()

    def create_game(self, fields, links):
        """
        Crée le jeu et ses liens M2M dans une seule transaction.
        ``links`` : {'categories': [...noms], 'platforms': ..., 'developers': ..., 'publishers': ...}
        Retourne (jeu, créé ?) ; si le nom existe déjà, rien n'est modifié.
        """
        name = fields['name']
        defaults = {k: v for k, v in fields.items() if k != 'name'}
        defaults.setdefault('published_at', timezone.now())

        with transaction.atomic():
            game, created = Game.objects.get_or_create(name=name, defaults=defaults)
            if created:
                game.categories.set(self.resolve(CATEGORY, links.get('categories')))
                game.platforms.set(self.resolve(PLATFORM, links.get('platforms')))
                game.developers.set(self.resolve(DEVELOPER, links.get('developers')))
                game.publishers.set(self.resolve(PUBLISHER, links.get('publishers')))
        return game, created
