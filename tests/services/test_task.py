"""End-to-end tests for the collection tag task."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from collection_tags.clients.memory import MemoryLibrary
from collection_tags.models import Collection, Item, ItemKind
from collection_tags.services.common.cancellation import CancellationToken
from collection_tags.services.reconciler import partition_tags
from collection_tags.services.task import CollectionTagTask


@pytest.mark.asyncio
async def test_scenario_a_writes_only_items_that_differ(library, make_settings):
    settings = make_settings(tag_prefix="#CT_", collections_to_tag="Marvel")

    summary = await CollectionTagTask(library, settings).run()

    assert library.update_calls == [("X", ["foo", "#CT_Marvel"])]
    assert library.get_item("X").tags == ("foo", "#CT_Marvel")
    assert library.get_item("Y").tags == ("#CT_Marvel", "bar")
    assert summary.scanned == 3
    assert summary.updated == 1
    assert summary.collections == 1


@pytest.mark.asyncio
async def test_scenario_b_removes_tag_of_collection_out_of_scope(
    library, make_settings
):
    await library.update_item(library.get_item("Z"), ["#CT_DC", "keep"])
    library.update_calls.clear()
    settings = make_settings(tag_prefix="#CT_", collections_to_tag="Marvel")

    await CollectionTagTask(library, settings).run()

    assert library.get_item("Z").tags == ("keep",)


@pytest.mark.asyncio
async def test_scenario_c_tag_all_collections_with_empty_name_list(
    library, make_settings
):
    settings = make_settings(
        tag_prefix="#CT_", tag_all_collections=True, collections_to_tag=""
    )

    await CollectionTagTask(library, settings).run()

    assert library.get_item("X").tags == ("foo", "#CT_Marvel")
    assert library.get_item("Z").tags == ("#CT_DC",)


@pytest.mark.asyncio
async def test_scenario_d_case_collision_yields_single_tag(make_settings):
    lib = MemoryLibrary()
    lib.add_item(Item(id="W", name="Akira", kind=ItemKind.MOVIE))
    lib.add_collection(Collection(id="C1", name="Anime"), ["W"])
    lib.add_collection(Collection(id="C2", name="ANIME"), ["W"])
    settings = make_settings(tag_prefix="#CT_", tag_all_collections=True)

    await CollectionTagTask(lib, settings).run()

    managed, _ = partition_tags(lib.get_item("W").tags, "#CT_")
    assert len(managed) == 1
    assert managed[0].lower() == "#ct_anime"


@pytest.mark.asyncio
async def test_second_run_issues_no_writes(library, make_settings):
    settings = make_settings(tag_prefix="#CT_", tag_all_collections=True)
    task = CollectionTagTask(library, settings)

    await task.run()
    library.update_calls.clear()
    summary = await task.run()

    assert library.update_calls == []
    assert summary.changed == 0
    assert summary.checked == 3


@pytest.mark.asyncio
async def test_unmanaged_tags_are_preserved_in_order(make_settings):
    lib = MemoryLibrary()
    lib.add_item(
        Item(id="A", tags=["z", "#CT_Gone", "a", "#ct_keep", "m"], kind=ItemKind.BOOK)
    )
    lib.add_collection(Collection(id="K", name="Keep"), ["A"])
    settings = make_settings(tag_prefix="#CT_", collections_to_tag="keep")

    await CollectionTagTask(lib, settings).run()

    tags = lib.get_item("A").tags
    _, unmanaged = partition_tags(tags, "#CT_")
    assert unmanaged == ["z", "a", "m"]
    assert tags[-1].lower() == "#ct_keep"


@pytest.mark.asyncio
@pytest.mark.parametrize("prefix", ["", "   "])
async def test_empty_prefix_short_circuits(prefix, make_settings):
    library = MagicMock()
    library.list_items = AsyncMock()
    library.list_collections = AsyncMock()
    library.update_item = AsyncMock()
    progress = []

    summary = await CollectionTagTask(
        library, make_settings(tag_prefix=prefix, tag_all_collections=True)
    ).run(progress=progress.append)

    library.list_items.assert_not_awaited()
    library.list_collections.assert_not_awaited()
    library.update_item.assert_not_awaited()
    assert progress == [100.0]
    assert summary.skipped_reason == "empty_prefix"


@pytest.mark.asyncio
async def test_progress_is_monotonic_and_ends_at_100(library, make_settings):
    progress = []
    settings = make_settings(tag_prefix="#CT_", tag_all_collections=True)

    await CollectionTagTask(library, settings).run(progress=progress.append)

    assert progress[:3] == [10.0, 20.0, 30.0]
    assert progress == sorted(progress)
    assert progress[-1] == 100.0
    assert all(0 <= value <= 100 for value in progress)


@pytest.mark.asyncio
async def test_only_configured_kinds_are_reconciled(make_settings):
    lib = MemoryLibrary()
    lib.add_item(Item(id="B", kind=ItemKind.BOOK))
    lib.add_item(Item(id="V", kind=ItemKind.VIDEO))
    lib.add_collection(Collection(id="C", name="Shelf"), ["B", "V"])
    settings = make_settings(tag_prefix="#CT_", tag_all_collections=True)

    await CollectionTagTask(lib, settings, kinds=frozenset({ItemKind.BOOK})).run()

    assert lib.get_item("B").tags == ("#CT_Shelf",)
    assert lib.get_item("V").tags == ()


@pytest.mark.asyncio
async def test_cancelled_before_start_performs_no_writes(library, make_settings):
    token = CancellationToken()
    token.cancel()
    settings = make_settings(tag_prefix="#CT_", tag_all_collections=True)

    with pytest.raises(asyncio.CancelledError):
        await CollectionTagTask(library, settings).run(cancel=token)

    assert library.update_calls == []


@pytest.mark.asyncio
async def test_dry_run_plans_without_writing(library, make_settings):
    settings = make_settings(tag_prefix="#CT_", tag_all_collections=True)

    summary = await CollectionTagTask(library, settings).run(dry_run=True)

    assert library.update_calls == []
    assert {u.item_id for u in summary.updates} == {"X", "Z"}
