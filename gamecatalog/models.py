from django.db import models


class ReferenceEntity(models.Model):
    """Base commune des entités de référence (développeurs, éditeurs, catégories, plateformes)"""
    name = models.CharField(max_length=255, unique=True)
    slug = models.SlugField(max_length=255, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ['name']

    def __str__(self):
        return self.name


class Developer(ReferenceEntity):
    pass


class Publisher(ReferenceEntity):
    pass


class Category(ReferenceEntity):
    class Meta(ReferenceEntity.Meta):
        verbose_name_plural = 'categories'


class Platform(ReferenceEntity):
    pass


class Game(models.Model):
    name = models.CharField(max_length=255, unique=True)
    slug = models.SlugField(max_length=255, unique=True)
    price = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    release_date = models.DateField(null=True, blank=True, db_index=True)
    description = models.TextField(blank=True)
    short_description = models.CharField(max_length=160, blank=True)
    rating = models.CharField(max_length=20, default='BR0')
    published_at = models.DateTimeField(null=True, blank=True)

    categories = models.ManyToManyField(Category, blank=True, related_name='games')
    platforms = models.ManyToManyField(Platform, blank=True, related_name='games')
    developers = models.ManyToManyField(Developer, blank=True, related_name='games')
    publishers = models.ManyToManyField(Publisher, blank=True, related_name='games')

    cover = models.FileField(upload_to='games/covers/', blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class GameImage(models.Model):
    """Image de la galerie d'un jeu"""
    game = models.ForeignKey(Game, on_delete=models.CASCADE, related_name='gallery')
    image = models.FileField(upload_to='games/gallery/')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.game.name} #{self.pk}"
