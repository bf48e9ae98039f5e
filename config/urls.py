"""
URL configuration for config project.
"""
from django.contrib import admin
from django.conf import settings
from django.conf.urls.static import static
from django.urls import path, include

urlpatterns = [
    # API consommée par le pipeline d'alimentation (upload des médias, déclenchement)
    path('api/', include('gamecatalog.urls')),
    path('admin/', admin.site.urls),
]

# Fichiers médias en mode développement
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
