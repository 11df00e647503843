from kbindex.catalog.assets import build_asset_index, fallback_candidates, resolve_thumbnail
from kbindex.catalog.merge import build_catalog
from kbindex.catalog.paths import classify_paths
from kbindex.config import Settings
from kbindex.models import Document, ProjectMetadata


def _doc(project: str, version: str, file_path: str, source_project: str | None = None) -> Document:
    origin = source_project or project
    return Document(
        id=f"{project}:{file_path}",
        project=project,
        version=version,
        file_path=file_path,
        document_name=file_path.rsplit("/", 1)[-1],
        title=file_path,
        content_url=f"/experiment/{origin}/KB/{version}/{file_path}.md",
        source_path=f"experiment/{origin}/KB/{version}/{file_path}.md",
        source_project=source_project,
    )


def test_asset_index_collects_image_files(settings: Settings) -> None:
    index = build_asset_index(
        [
            "public/experiment/W/KB/latest/hero.PNG",
            "experiment/W/KB/v1/hero.md",
            "elsewhere/W/KB/latest/hero.png",
        ],
        settings,
    )
    assert index == {"W/KB/latest/hero.png": "W/KB/latest/hero.PNG"}


def test_colocated_thumbnail_is_used_directly(settings: Settings) -> None:
    assets = build_asset_index(["experiment/Z/KB/v2/hero.jpg", "experiment/W/KB/v2/hero.png"], settings)

    url = resolve_thumbnail(_doc("Z", "v2", "hero"), ["W"], assets, settings)

    assert url == "/experiment/Z/KB/v2/hero.jpg"


def test_upper_case_extension_resolves_to_listed_file(settings: Settings) -> None:
    assets = build_asset_index(["experiment/Z/KB/v2/hero.PNG", "experiment/W/KB/latest/hero.Jpg"], settings)

    assert resolve_thumbnail(_doc("Z", "v2", "hero"), [], assets, settings) == "/experiment/Z/KB/v2/hero.PNG"
    assert resolve_thumbnail(_doc("Y", "v2", "hero"), ["W"], assets, settings) == "/experiment/W/KB/latest/hero.Jpg"


def test_falls_back_to_dependency_latest(settings: Settings) -> None:
    assets = build_asset_index(["experiment/W/KB/latest/hero.png"], settings)

    url = resolve_thumbnail(_doc("Z", "v2", "hero"), ["W"], assets, settings)

    assert url == "/experiment/W/KB/latest/hero.png"


def test_own_latest_is_tried_before_dependencies(settings: Settings) -> None:
    assets = build_asset_index(["experiment/Z/KB/latest/hero.png", "experiment/W/KB/v2/hero.png"], settings)

    url = resolve_thumbnail(_doc("Z", "v2", "hero"), ["W"], assets, settings)

    assert url == "/experiment/Z/KB/latest/hero.png"


def test_highest_priority_dependency_is_searched_first(settings: Settings) -> None:
    assets = build_asset_index(["experiment/A/KB/latest/hero.png", "experiment/B/KB/latest/hero.png"], settings)

    url = resolve_thumbnail(_doc("Z", "latest", "hero"), ["A", "B"], assets, settings)

    assert url == "/experiment/B/KB/latest/hero.png"


def test_no_candidate_yields_none(settings: Settings) -> None:
    assets = build_asset_index(["experiment/W/KB/latest/other.png"], settings)

    assert resolve_thumbnail(_doc("Z", "v2", "hero"), ["W"], assets, settings) is None


def test_fallback_order_skips_latest_duplicates(settings: Settings) -> None:
    assert fallback_candidates(_doc("Z", "latest", "hero"), ["A", "B"], settings) == [
        ("B", "latest"),
        ("A", "latest"),
    ]
    assert fallback_candidates(_doc("Z", "v2", "hero", source_project="A"), ["A"], settings) == [
        ("Z", "v2"),
        ("Z", "latest"),
        ("A", "latest"),
    ]


def test_catalog_assigns_fallback_thumbnails(settings: Settings) -> None:
    paths = ["experiment/Z/KB/v2/hero.md", "experiment/W/KB/latest/hero.png", "experiment/W/KB/latest/map.md"]
    metadata = {
        "Z": ProjectMetadata(display_name="Z", dependencies=("W",)),
        "W": ProjectMetadata(display_name="W"),
    }

    catalog = build_catalog(classify_paths(paths, settings), metadata.get, build_asset_index(paths, settings), settings)

    hero = catalog.find_document("Z", "v2", "hero")
    assert hero is not None
    assert hero.thumbnail_url == "/experiment/W/KB/latest/hero.png"
    assert catalog.find_document("W", "latest", "map").thumbnail_url is None


def test_inherited_document_keeps_origin_thumbnail(settings: Settings) -> None:
    paths = [
        "experiment/Alpha/KB/latest/intro.md",
        "experiment/Alpha/KB/latest/intro.webp",
        "experiment/Beta/KB/latest/intro.png",
    ]
    metadata = {
        "Alpha": ProjectMetadata(display_name="Alpha"),
        "Beta": ProjectMetadata(display_name="Beta", dependencies=("Alpha",)),
    }

    catalog = build_catalog(classify_paths(paths, settings), metadata.get, build_asset_index(paths, settings), settings)

    intro = catalog.find_document("Beta", "latest", "intro")
    assert intro is not None and intro.source_project == "Alpha"
    assert intro.thumbnail_url == "/experiment/Alpha/KB/latest/intro.webp"
