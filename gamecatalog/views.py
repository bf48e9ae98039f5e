# views.py
import logging

from django.conf import settings
from django.contrib.admin.views.decorators import staff_member_required
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from .models import Game, GameImage
from .populate import Populator
from .store import GAME_REF

logger = logging.getLogger(__name__)

UPLOAD_FIELDS = ('cover', 'gallery')


def error_response(status, name, message, errors=None):
    # Même forme que les erreurs de validation consommées par le pipeline
    return JsonResponse({
        'data': None,
        'error': {
            'status': status,
            'name': name,
            'message': message,
            'details': {'errors': errors or []},
        },
    }, status=status)


@csrf_exempt
@require_POST
def upload(request):
    token = settings.UPLOAD_TOKEN
    if token and request.headers.get('Authorization') != f'Bearer {token}':
        return error_response(401, 'UnauthorizedError', 'Missing or invalid credentials')

    ref = request.POST.get('ref')
    ref_id = request.POST.get('refId')
    field = request.POST.get('field')
    files = request.FILES.getlist('files')

    # 1. Validation des champs du formulaire multipart
    errors = []
    if ref != GAME_REF:
        errors.append({'path': ['ref'], 'message': f"ref doit valoir '{GAME_REF}'"})
    if not ref_id or not ref_id.isdecimal():
        errors.append({'path': ['refId'], 'message': "refId doit être un identifiant numérique"})
    if field not in UPLOAD_FIELDS:
        errors.append({'path': ['field'], 'message': f"field doit être l'un de {', '.join(UPLOAD_FIELDS)}"})
    if not files:
        errors.append({'path': ['files'], 'message': "Aucun fichier reçu"})
    if errors:
        return error_response(400, 'ValidationError', f"{len(errors)} errors occurred", errors)

    game = Game.objects.filter(pk=int(ref_id)).first()
    if game is None:
        return error_response(404, 'NotFoundError', f"Jeu {ref_id} introuvable",
                              [{'path': ['refId'], 'message': 'Not Found'}])

    # 2. Rattachement au jeu
    saved = []
    if field == 'cover':
        upload_file = files[0]
        game.cover.save(upload_file.name, upload_file, save=True)
        saved.append({'id': game.pk, 'name': game.cover.name, 'url': game.cover.url})
    else:
        for upload_file in files:
            image = GameImage(game=game)
            image.image.save(upload_file.name, upload_file, save=True)
            saved.append({'id': image.pk, 'name': image.image.name, 'url': image.image.url})

    logger.info("Upload %s : %s fichier(s) pour %s", field, len(saved), game.name)
    return JsonResponse({'data': saved}, status=201)


@staff_member_required
@require_POST
def populate_view(request):
    # La query string est transmise telle quelle à l'API catalogue
    params = {key: values if len(values) > 1 else values[0] for key, values in request.GET.lists()}
    report = Populator().run(params)
    return JsonResponse(report.as_dict(), status=502 if report.aborted else 200)
