import asyncio

from kbindex.catalog.metadata import ProjectMetadataStore, parse_metadata
from kbindex.config import Settings
from kbindex.models import ProjectMetadata
from kbindex.retrieval.cache import RequestCache
from tests._fixtures.site import FakeFetcher, index_json


def _store(fetcher: FakeFetcher, cache: RequestCache | None = None) -> ProjectMetadataStore:
    return ProjectMetadataStore(cache if cache is not None else RequestCache("metadata"), fetcher, Settings())


def test_parse_metadata_reads_all_fields() -> None:
    metadata = parse_metadata({"name": " Beta ", "dependency": ["Alpha", "Core"], "player": ["hero"]}, "Beta")

    assert metadata == ProjectMetadata(display_name="Beta", dependencies=("Alpha", "Core"), asset_owners=("hero",))


def test_parse_metadata_defaults_and_invalid_entries() -> None:
    assert parse_metadata({"name": "A"}, "A") == ProjectMetadata(display_name="A")
    assert parse_metadata({"dependency": ["B", 3, ""]}, "A") == ProjectMetadata(display_name=None, dependencies=("B",))
    assert parse_metadata({"name": "A", "dependency": "B"}, "A").dependencies == ()
    assert parse_metadata(["not", "an", "object"], "A") is None


def test_concurrent_lookups_issue_one_request() -> None:
    fetcher = FakeFetcher({"/experiment/A/index.json": index_json("A")})
    store = _store(fetcher)

    async def scenario():
        return await asyncio.gather(store.get_metadata("A"), store.get_metadata("A"), store.get_metadata("A"))

    results = asyncio.run(scenario())
    assert all(r == ProjectMetadata(display_name="A") for r in results)
    assert fetcher.count("/experiment/A/index.json") == 1


def test_missing_record_is_cached_as_absent() -> None:
    fetcher = FakeFetcher({})
    cache: RequestCache = RequestCache("metadata")

    assert asyncio.run(_store(fetcher, cache).get_metadata("Ghost")) is None
    # A second build sharing the session cache does not ask again
    assert asyncio.run(_store(fetcher, cache).get_metadata("Ghost")) is None
    assert fetcher.count("/experiment/Ghost/index.json") == 1


def test_malformed_record_is_cached_as_absent() -> None:
    fetcher = FakeFetcher({"/experiment/A/index.json": "{not json"})
    cache: RequestCache = RequestCache("metadata")

    assert asyncio.run(_store(fetcher, cache).get_metadata("A")) is None
    assert asyncio.run(_store(fetcher, cache).get_metadata("A")) is None
    assert fetcher.count("/experiment/A/index.json") == 1


def test_transient_failure_is_absent_for_this_build_only() -> None:
    url = "/experiment/A/index.json"
    fetcher = FakeFetcher({url: index_json("A")}, fail={url: 1})
    cache: RequestCache = RequestCache("metadata")

    first = _store(fetcher, cache)
    assert asyncio.run(first.get_metadata("A")) is None
    assert asyncio.run(first.get_metadata("A")) is None  # memoized within the build
    assert fetcher.count(url) == 1

    assert asyncio.run(_store(fetcher, cache).get_metadata("A")) == ProjectMetadata(display_name="A")
    assert fetcher.count(url) == 2


def test_prefetch_follows_dependencies_transitively() -> None:
    fetcher = FakeFetcher(
        {
            "/experiment/P/index.json": index_json("P", dependency=["A"]),
            "/experiment/A/index.json": index_json(dependency=["B", "P"]),
            "/experiment/B/index.json": index_json("B"),
        }
    )
    store = _store(fetcher)

    asyncio.run(store.prefetch(["P"]))

    assert store.lookup("B") == ProjectMetadata(display_name="B")
    assert store.lookup("A") == ProjectMetadata(display_name=None, dependencies=("B", "P"))
    assert store.lookup("Unknown") is None
    assert sorted(fetcher.calls) == sorted(
        ["/experiment/P/index.json", "/experiment/A/index.json", "/experiment/B/index.json"]
    )
