"""Front-matter parsing for raw document text."""

import logging
import re

import frontmatter
import yaml
from frontmatter.default_handlers import YAMLHandler

logger = logging.getLogger(__name__)

# Leading delimited block, used to strip blocks YAML cannot parse
FRONTMATTER_BLOCK = re.compile(r"\A\ufeff?---\r?\n.*?\r?\n---[ \t]*(?:\r?\n|\Z)\s*", re.DOTALL)


def split_frontmatter(text: str) -> tuple[dict, str]:
    """Split raw text into (front matter, body).

    Only a leading ``---`` block counts. A block that does not parse as a
    mapping yields empty metadata; the body is returned without it.
    """
    try:
        post = frontmatter.loads(text, handler=YAMLHandler())
    except (yaml.YAMLError, ValueError) as e:
        logger.debug("Unparseable front matter block: %s", e)
        return {}, FRONTMATTER_BLOCK.sub("", text, count=1)

    metadata = post.metadata if isinstance(post.metadata, dict) else {}
    return dict(metadata), post.content


def parse_frontmatter(text: str) -> dict:
    """Front matter of raw text as a dict; empty when absent or malformed."""
    metadata, _ = split_frontmatter(text)
    return metadata


def strip_frontmatter(text: str) -> str:
    """Body of raw text with any leading front matter block removed."""
    _, body = split_frontmatter(text)
    return body
