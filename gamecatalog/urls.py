from django.urls import path
from .views import populate_view, upload

urlpatterns = [
    path('upload/', upload, name='upload'),
    path('games/populate/', populate_view, name='populate_games'),
]
