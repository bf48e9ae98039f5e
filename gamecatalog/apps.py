from django.apps import AppConfig


class GamecatalogConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'gamecatalog'
    verbose_name = 'Catalogue de jeux'
