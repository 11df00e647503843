import pytest

from kbindex.retrieval.frontmatter import parse_frontmatter, split_frontmatter, strip_frontmatter


def test_leading_yaml_block_is_parsed() -> None:
    metadata, body = split_frontmatter("---\ntitle: Hello\n---\nBody\n")

    assert metadata == {"title": "Hello"}
    assert body == "Body"


@pytest.mark.parametrize(
    "text",
    [
        "{\nnot: json, really\n}\nBody\n",
        '{\n"title": "json"\n}\nBody\n',
        "+++\ntitle = 'toml'\n+++\nBody\n",
    ],
)
def test_only_dashed_blocks_count_as_front_matter(text: str) -> None:
    assert parse_frontmatter(text) == {}
    assert strip_frontmatter(text).endswith("Body")


def test_unparseable_block_is_stripped_from_body() -> None:
    assert strip_frontmatter("---\ntitle: [unclosed\n---\nBody\n") == "Body\n"
