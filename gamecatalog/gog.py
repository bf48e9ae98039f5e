"""
Client GOG : lecture du catalogue (API JSON) et scraping des fiches boutique.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional
from urllib.parse import urlencode

import requests
from bs4 import BeautifulSoup, NavigableString, Tag
from django.conf import settings
from django.utils.dateparse import parse_date

logger = logging.getLogger(__name__)

SHORT_DESCRIPTION_LENGTH = 160


class GogError(Exception):
    pass


class CatalogError(GogError):
    pass


class DetailsError(GogError):
    pass


def store_slug(slug):
    """ 'the-witcher-3' -> 'the_witcher_3' (format des URLs boutique) """
    return slug.replace('-', '_').lower()


def parse_release_date(value):
    # GOG renvoie "2015.05.18" ou une date ISO complète
    if not value:
        return None
    try:
        return parse_date(str(value).strip()[:10].replace('.', '-'))
    except ValueError:
        return None


def parse_price(price):
    try:
        amount = price['finalMoney']['amount']
    except (KeyError, TypeError):
        return None
    try:
        return Decimal(str(amount))
    except InvalidOperation:
        return None


def _names(items):
    names = []
    for item in items or []:
        name = item.get('name') if isinstance(item, dict) else item
        if name:
            names.append(name)
    return names


@dataclass
class Product:
    title: str
    slug: str
    price: Optional[Decimal] = None
    release_date: Optional[date] = None
    genres: List[str] = field(default_factory=list)
    operating_systems: List[str] = field(default_factory=list)
    developers: List[str] = field(default_factory=list)
    publishers: List[str] = field(default_factory=list)
    cover_url: Optional[str] = None
    screenshots: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data):
        if not isinstance(data, dict):
            raise CatalogError(f"Produit illisible : {data!r}")
        title = data.get('title')
        slug = data.get('slug')
        if not title or not slug:
            raise CatalogError(f"Produit sans titre ou slug : {data.get('id', data)!r}")

        return cls(
            title=title,
            slug=slug,
            price=parse_price(data.get('price')),
            release_date=parse_release_date(data.get('releaseDate')),
            genres=_names(data.get('genres')),
            operating_systems=_names(data.get('operatingSystems')),
            developers=_names(data.get('developers')),
            publishers=_names(data.get('publishers')),
            cover_url=data.get('coverHorizontal'),
            screenshots=[url for url in data.get('screenshots') or [] if url],
        )


def _is_noise(node):
    """ Bandeau promo, vidéo, <br> ou blanc en tête de description """
    if isinstance(node, NavigableString):
        return not node.strip()
    if not isinstance(node, Tag):
        return False
    if node.name in ('br', 'video'):
        return True
    if node.name == 'div':
        return any(c.startswith('banner') for c in node.get('class') or [])
    return False


def parse_details(html, default_rating=None):
    """
    Extrait description (HTML), short_description (texte brut) et rating
    d'une fiche boutique GOG.
    """
    soup = BeautifulSoup(html, 'html.parser')

    raw_description = soup.select_one('.description')
    if raw_description is None:
        raise DetailsError("Bloc .description introuvable")

    # On retire le "bruit" de tête jusqu'au premier vrai contenu
    while raw_description.contents and _is_noise(raw_description.contents[0]):
        raw_description.contents[0].extract()
    first = raw_description.contents[0] if raw_description.contents else None
    if isinstance(first, NavigableString):
        first.replace_with(NavigableString(first.lstrip()))

    description = raw_description.decode_contents()
    short_description = raw_description.get_text().strip()[:SHORT_DESCRIPTION_LENGTH]

    rating = default_rating or settings.DEFAULT_RATING
    icon = soup.select_one('.age-restrictions__icon use')
    if icon is not None:
        href = icon.get('xlink:href') or icon.get('href')
        if href:
            rating = re.sub(r'[_#]', '', href)

    return {
        'description': description,
        'short_description': short_description,
        'rating': rating,
    }


class GogClient:
    def __init__(self, session=None, catalog_url=None, store_url=None, timeout=None):
        self.session = session or requests.Session()
        self.catalog_url = catalog_url or settings.GOG_CATALOG_URL
        self.store_url = (store_url or settings.GOG_STORE_URL).rstrip('/')
        self.timeout = timeout or settings.HTTP_TIMEOUT

    def catalog_query_url(self, params):
        query = urlencode(params or {}, doseq=True)
        return f"{self.catalog_url}?{query}" if query else self.catalog_url

    def fetch_products(self, params):
        """ Liste brute des produits du catalogue pour ces paramètres """
        url = self.catalog_query_url(params)
        logger.info("Catalogue GOG : %s", url)

        res = self.session.get(url, timeout=self.timeout)
        res.raise_for_status()

        try:
            data = res.json()
        except ValueError as e:
            raise CatalogError(f"Réponse catalogue non JSON : {e}") from e

        products = data.get('products') if isinstance(data, dict) else None
        if not isinstance(products, list):
            raise CatalogError("Réponse catalogue sans liste 'products'")
        return products

    def fetch_details(self, slug):
        url = f"{self.store_url}/{store_slug(slug)}"
        res = self.session.get(url, timeout=self.timeout)
        res.raise_for_status()
        return parse_details(res.text)
