from django.contrib import admin
from .models import Category, Developer, Game, GameImage, Platform, Publisher


class GameImageInline(admin.TabularInline):
    model = GameImage
    extra = 0


class GameAdmin(admin.ModelAdmin):
    # Recherche par nom OU par slug
    search_fields = ['name', 'slug']

    list_display = ('name', 'price', 'release_date', 'rating', 'published_at')

    list_filter = ('rating', 'platforms', 'categories')

    filter_horizontal = ('categories', 'platforms', 'developers', 'publishers')
    inlines = [GameImageInline]


class ReferenceAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'count_games')
    search_fields = ('name',)
    prepopulated_fields = {'slug': ('name',)}

    def count_games(self, obj):
        return obj.games.count()
    count_games.short_description = "Jeux liés"


admin.site.register(Game, GameAdmin)
for model in (Developer, Publisher, Category, Platform):
    admin.site.register(model, ReferenceAdmin)

admin.site.site_header = "Catalogue de jeux - Administration"
admin.site.site_title = "Catalogue de jeux"
admin.site.index_title = "Gestion du catalogue"
