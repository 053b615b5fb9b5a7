"""Tests for collection selection."""

from collection_tags.models import Collection
from collection_tags.services.selector import parse_collection_names, select_collections

COLLECTIONS = [
    Collection(id="1", name="Marvel"),
    Collection(id="2", name="  dc  "),
    Collection(id="3", name=None),
    Collection(id="4", name=""),
    Collection(id="5", name="Anime"),
]


def test_parse_collection_names_trims_and_drops_empty_entries():
    assert parse_collection_names(" Marvel, ,DC ,, Star Wars ") == [
        "Marvel",
        "DC",
        "Star Wars",
    ]
    assert parse_collection_names("") == []
    assert parse_collection_names(None) == []


def test_select_by_name_is_case_insensitive_and_trimmed():
    selected = select_collections(COLLECTIONS, False, ["marvel", "DC"])
    assert [c.id for c in selected] == ["1", "2"]


def test_select_requires_exact_match():
    assert select_collections(COLLECTIONS, False, ["Marv", "Anime Classics"]) == []


def test_select_does_not_fold_sharp_s():
    collections = [Collection(id="1", name="Straße")]
    assert select_collections(collections, False, ["STRASSE"]) == []
    assert [c.id for c in select_collections(collections, False, ["STRAßE"])] == ["1"]


def test_tag_all_collections_ignores_name_list():
    selected = select_collections(COLLECTIONS, True, [])
    assert [c.id for c in selected] == ["1", "2", "3", "4", "5"]


def test_unnamed_collections_never_match_by_name():
    selected = select_collections(COLLECTIONS, False, ["", "  ", "Anime"])
    assert [c.id for c in selected] == ["5"]


def test_empty_name_list_selects_nothing():
    assert select_collections(COLLECTIONS, False, []) == []
