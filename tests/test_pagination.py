"""Tests for pagination behind a "more" node."""

from __future__ import annotations

import pytest

from tektontree.tree.category import Category
from tektontree.tree.nodes import MoreNode, TreeNode
from tektontree.tree.pagination import Paginator


def runs(count: int, parent: TreeNode) -> list[TreeNode]:
    return [
        TreeNode(name=f"run-{i}", category=Category.PIPELINE_RUN, parent=parent)
        for i in range(count)
    ]


@pytest.fixture
def parent() -> TreeNode:
    return TreeNode(name="PipelineRuns", category=Category.PIPELINE_RUN_LIST)


class TestPaginator:
    def test_rejects_non_positive_page_size(self):
        with pytest.raises(ValueError):
            Paginator(0)

    def test_first_page_and_more(self, parent):
        page = Paginator(5).limit_view(parent, runs(12, parent))

        assert [n.name for n in page[:5]] == [f"run-{i}" for i in range(5)]
        more = page[5]
        assert isinstance(more, MoreNode)
        assert more.parent is parent
        assert (more.show_next, more.total_count) == (5, 12)
        assert parent.visible_children == 5

    def test_show_more_until_exhausted(self, parent):
        paginator = Paginator(5)
        children = runs(12, parent)

        page = paginator.limit_view(parent, children)
        assert paginator.show_more(page[-1]) is parent
        assert parent.visible_children == 10

        page = paginator.limit_view(parent, children)
        assert len(page) == 11
        assert (page[-1].show_next, page[-1].total_count) == (2, 12)

        paginator.show_more(page[-1])
        page = paginator.limit_view(parent, children)
        assert len(page) == 12
        assert not any(isinstance(n, MoreNode) for n in page)

    def test_short_list_has_no_more(self, parent):
        page = Paginator(5).limit_view(parent, runs(5, parent))
        assert len(page) == 5
        assert not any(isinstance(n, MoreNode) for n in page)

    def test_empty_list(self, parent):
        assert Paginator(5).limit_view(parent, []) == []

    def test_cursor_survives_shrinking_list(self, parent):
        paginator = Paginator(2)
        page = paginator.limit_view(parent, runs(5, parent))
        paginator.show_more(page[-1])

        assert len(paginator.limit_view(parent, runs(3, parent))) == 3
        assert parent.visible_children == 4

    def test_show_more_without_parent(self):
        with pytest.raises(ValueError):
            Paginator(5).show_more(MoreNode(show_next=5, total_count=9))
