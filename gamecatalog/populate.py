"""
Alimentation du catalogue depuis GOG.

Enchaînement : catalogue -> entités de référence -> jeux (scraping de la
fiche + création + upload couverture/galerie). Les appels réseau (fiches,
images) partent dans un pool de threads ; les écritures en base restent sur
le thread appelant.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

import requests
from django.conf import settings

from gamecatalog.gog import GogClient, Product
from gamecatalog.media import MediaUploader, gallery_urls
from gamecatalog.report import CREATED, FAILED, GameOutcome, PopulateReport
from gamecatalog.store import CATEGORY, DEVELOPER, PLATFORM, PUBLISHER, ContentStore

logger = logging.getLogger(__name__)


def collect_references(products):
    """ Noms distincts (correspondance exacte) par type d'entité sur tout le lot """
    names = {DEVELOPER: {}, PUBLISHER: {}, CATEGORY: {}, PLATFORM: {}}
    for product in products:
        names[DEVELOPER].update(dict.fromkeys(product.developers))
        names[PUBLISHER].update(dict.fromkeys(product.publishers))
        names[CATEGORY].update(dict.fromkeys(product.genres))
        names[PLATFORM].update(dict.fromkeys(product.operating_systems))
    return {kind: list(values) for kind, values in names.items()}


class Populator:
    def __init__(self, store=None, client=None, uploader=None, max_workers=None):
        session = requests.Session() if client is None or uploader is None else None
        self.store = store or ContentStore()
        self.client = client or GogClient(session=session)
        self.uploader = uploader or MediaUploader(session=session)
        self.max_workers = max(1, max_workers or settings.POPULATE_MAX_WORKERS)

    def run(self, params):
        report = PopulateReport(params=dict(params or {}))

        # 1. Catalogue : un échec ici arrête tout
        try:
            raw_products = self.client.fetch_products(report.params)
        except Exception as e:
            report.fail('catalog', self.client.catalog_query_url(report.params), e)
            report.aborted = True
            return report

        report.fetched = len(raw_products)
        products = []
        for raw in raw_products:
            try:
                products.append(Product.from_api(raw))
            except Exception as e:
                subject = raw.get('title') or raw.get('id') if isinstance(raw, dict) else raw
                report.fail('product', subject, e)

        # 2. Références puis 3. Jeux
        self.create_references(products, report)
        self.create_games(products, report)

        logger.info(
            "Alimentation terminée : %s produits, %s jeux créés, %s ignorés, %s erreurs",
            report.fetched, len(report.created), len(report.skipped), len(report.errors),
        )
        return report

    def create_references(self, products, report):
        for kind, names in collect_references(products).items():
            created = 0
            for name in names:
                try:
                    _, is_new = self.store.ensure(kind, name)
                except Exception as e:
                    report.fail('reference', f"{kind}:{name}", e)
                    continue
                if is_new:
                    created += 1
            report.references[kind] = created

    def scrape(self, product, outcome, report):
        try:
            info = self.client.fetch_details(product.slug)
        except Exception as e:
            # Le jeu sera créé sans description ni rating
            report.fail('scrape', product.title, e)
            return {}
        outcome.scraped = True
        return info

    def attach(self, game, url, field, report):
        try:
            self.uploader.upload(game, url, field)
        except Exception as e:
            report.fail(field, f"{game.name} <{url}>", e)
            return False
        return True

    def create_games(self, products, report):
        pending = []
        for product in products:
            outcome = GameOutcome(title=product.title)
            report.games.append(outcome)
            try:
                existing = self.store.find_game(product.title)
            except Exception as e:
                outcome.status = FAILED
                report.fail('game', product.title, e)
                continue
            if existing is None:
                pending.append((product, outcome))
            else:
                logger.info("Déjà présent, ignoré : %s", product.title)

        if not pending:
            return

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            details = list(executor.map(lambda item: self.scrape(item[0], item[1], report), pending))

            created = []
            for (product, outcome), info in zip(pending, details):
                logger.info("Création : %s...", product.title)
                fields = {
                    'name': product.title,
                    'slug': product.slug,
                    'price': product.price,
                    'release_date': product.release_date,
                    **info,
                }
                links = {
                    'categories': product.genres,
                    'platforms': product.operating_systems,
                    'developers': product.developers,
                    'publishers': product.publishers,
                }
                try:
                    game, is_new = self.store.create_game(fields, links)
                except Exception as e:
                    outcome.status = FAILED
                    report.fail('game', product.title, e)
                    continue
                if not is_new:
                    continue
                outcome.status = CREATED
                outcome.game_id = game.pk
                created.append((game, product, outcome))

            # Couvertures d'abord, galeries ensuite ; un échec ne défait jamais le jeu
            covers = []
            for game, product, outcome in created:
                if product.cover_url:
                    covers.append((outcome, executor.submit(self.attach, game, product.cover_url, 'cover', report)))
                else:
                    logger.warning("Pas de couverture pour %s", game.name)
            for outcome, future in covers:
                outcome.cover = future.result()

            galleries = []
            for game, product, outcome in created:
                urls = gallery_urls(product.screenshots)
                outcome.gallery_expected = len(urls)
                futures = [executor.submit(self.attach, game, url, 'gallery', report) for url in urls]
                galleries.append((outcome, futures))
            for outcome, futures in galleries:
                outcome.gallery = sum(1 for future in futures if future.result())
