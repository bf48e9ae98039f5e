from django.core.management.base import BaseCommand, CommandError
from gamecatalog.populate import Populator
from gamecatalog.report import CREATED, FAILED


class Command(BaseCommand):
    help = 'Alimente le catalogue depuis GOG (jeux, développeurs, éditeurs, catégories, plateformes, images)'

    def add_arguments(self, parser):
        parser.add_argument(
            'params',
            nargs='*',
            help='Paramètres transmis tels quels à l\'API catalogue GOG (ex: limit=48 order=desc:trending)'
        )
        parser.add_argument('--limit', type=int, help='Nombre de produits à récupérer')
        parser.add_argument('--page', type=int, help='Page du catalogue')

    def parse_params(self, pairs):
        params = {}
        for pair in pairs:
            key, sep, value = pair.partition('=')
            if not sep or not key:
                raise CommandError(f"Paramètre invalide '{pair}' (format attendu : clé=valeur)")
            # Une clé répétée devient une liste (ex: productType=game productType=pack)
            if key in params:
                previous = params[key]
                params[key] = previous + [value] if isinstance(previous, list) else [previous, value]
            else:
                params[key] = value
        return params

    def handle(self, *args, **options):
        params = self.parse_params(options['params'])
        if options['limit'] is not None:
            params['limit'] = options['limit']
        if options['page'] is not None:
            params['page'] = options['page']

        self.stdout.write(f"🚀 Démarrage alimentation GOG (paramètres : {params or 'aucun'})")

        report = Populator().run(params)

        if report.aborted:
            self.stdout.write(self.style.ERROR("❌ Catalogue GOG injoignable ou illisible, rien n'a été importé."))
            for error in report.errors:
                self.stdout.write(self.style.ERROR(f"   {error.message}"))
            return

        # 1. Résumé
        self.stdout.write(f"📦 {report.fetched} produits récupérés.")
        refs = ", ".join(f"{kind}: {count}" for kind, count in report.references.items())
        self.stdout.write(f"🏷️  Références créées ({refs})")

        for outcome in report.games:
            if outcome.status == CREATED:
                self.stdout.write(
                    f"   ✅ {outcome.title} (couverture: {'oui' if outcome.cover else 'non'}, "
                    f"galerie: {outcome.gallery}/{outcome.gallery_expected})"
                )
            elif outcome.status == FAILED:
                self.stdout.write(self.style.ERROR(f"   ❌ {outcome.title}"))

        # 2. Erreurs partielles
        if report.errors:
            self.stdout.write(self.style.WARNING(f"⚠️ {len(report.errors)} erreur(s) pendant l'import :"))
            for error in report.errors:
                details = f" {error.errors}" if error.errors else ""
                self.stdout.write(self.style.WARNING(f"   [{error.stage}] {error.subject} : {error.message}{details}"))

        self.stdout.write(self.style.SUCCESS(
            f"✨ Terminé ! {len(report.created)} jeux créés, {len(report.skipped)} déjà présents."
        ))
