from decimal import Decimal

import pytest

from gamecatalog.models import Category, Developer, Game, Platform
from gamecatalog.store import CATEGORY, DEVELOPER, PLATFORM, PUBLISHER, ContentStore

pytestmark = pytest.mark.django_db


@pytest.fixture()
def store():
    return ContentStore()


def test_ensure_creates_with_slug(store):
    developer, created = store.ensure(DEVELOPER, "Frictional Games")

    assert created is True
    assert developer.slug == "frictional-games"


def test_ensure_slug_strips_punctuation(store):
    category, _ = store.ensure(CATEGORY, "Indie & Casual!")

    assert category.slug == "indie-casual"


def test_ensure_is_idempotent(store):
    first, _ = store.ensure(PLATFORM, "windows")
    again, created = store.ensure(PLATFORM, "windows")

    assert created is False
    assert again.pk == first.pk
    assert Platform.objects.filter(name="windows").count() == 1


def test_ensure_is_case_sensitive(store):
    store.ensure(CATEGORY, "Action")
    store.ensure(CATEGORY, "action")

    assert Category.objects.count() == 2


def test_unknown_kind(store):
    with pytest.raises(ValueError):
        store.ensure("studio", "Nope")


def test_find_game(store):
    store.create_game({"name": "Devolver Game", "slug": "devolver-game"}, {})

    assert store.find_game("Devolver Game").slug == "devolver-game"
    assert store.find_game("Devolver") is None


def test_resolve_skips_missing_names(store):
    store.ensure(DEVELOPER, "Larian Studios")

    resolved = store.resolve(DEVELOPER, ["Larian Studios", "Unknown Studio"])

    assert [d.name for d in resolved] == ["Larian Studios"]
    assert store.resolve(DEVELOPER, []) == []


def test_create_game_links_references(store):
    store.ensure(CATEGORY, "RPG")
    store.ensure(PLATFORM, "windows")
    store.ensure(DEVELOPER, "Larian Studios")
    store.ensure(PUBLISHER, "Larian Studios")

    game, created = store.create_game(
        {"name": "Baldur's Gate 3", "slug": "baldurs-gate-3", "price": Decimal("59.99"), "rating": "PEGI18"},
        {
            "categories": ["RPG", "Strategy"],
            "platforms": ["windows"],
            "developers": ["Larian Studios"],
            "publishers": ["Larian Studios"],
        },
    )

    assert created is True
    assert game.published_at is not None
    assert list(game.categories.values_list("name", flat=True)) == ["RPG"]
    assert game.platforms.count() == 1
    assert game.developers.get().name == "Larian Studios"
    assert game.publishers.count() == 1


def test_create_game_never_updates_existing(store):
    store.create_game({"name": "Hades", "slug": "hades", "rating": "PEGI12"}, {})

    game, created = store.create_game({"name": "Hades", "slug": "hades-2", "rating": "PEGI18"}, {})

    assert created is False
    assert game.rating == "PEGI12"
    assert Game.objects.count() == 1
    assert Developer.objects.count() == 0
