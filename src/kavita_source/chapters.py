"""Flatten a book's nested table of contents into page-range chapters."""

import logging
from typing import Sequence

from kavita_source.models import ContentNode, FlatChapterRef, NovelPath

logger = logging.getLogger(__name__)


def flatten(
    nodes: Sequence[ContentNode],
    range_start: int,
    range_end: int,
    start_index: int = 0,
    novel: NovelPath | None = None,
) -> list[FlatChapterRef]:
    """Turn a nested chapter tree into leaf chapters in document order.

    Each node runs from its own start page to the page before its next
    sibling starts; the last sibling runs to ``range_end``. Only leaves are
    emitted, numbered consecutively from ``start_index``. Siblings are taken
    in the order given and are not re-sorted by page.
    """
    logger.debug(
        "Flattening %d nodes in pages %d..%d from index %d",
        len(nodes),
        range_start,
        range_end,
        start_index,
    )
    chapters: list[FlatChapterRef] = []
    index = start_index

    for position, node in enumerate(nodes):
        end_page = range_end
        if position < len(nodes) - 1:
            end_page = nodes[position + 1].page - 1

        if node.children:
            children = flatten(node.children, node.page, end_page, index, novel)
            index += len(children)
            chapters.extend(children)
            continue

        chapters.append(
            FlatChapterRef(
                name=node.title,
                index=index,
                start_page=node.page,
                end_page=end_page,
                novel=novel,
            )
        )
        index += 1

    return chapters
