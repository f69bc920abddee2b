# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2025  Rami Ardati

"""
Bounding-box R-tree with bulk loading and lazy deletion.

Bulk loading uses the overlap-minimizing top-down (OMT) packing of
sort-tile-recursive slices; single inserts split overflowing nodes on
the axis with the smallest total margin, at the index with the least
overlap. Items are any hashable objects; a ``to_bbox`` callable maps
an item to its :class:`BoundingBox`.

Besides ``remove`` (immediate, with condensing of under-full nodes) the
tree supports ``mark_removed``: the entry stays in place but is skipped
by queries, and the tree is rebuilt from the live entries once the share
of marked entries passes the compaction ratio.
"""

import math
from typing import Callable, Dict, Hashable, Iterable, List, Optional

import structlog

from ..config import settings
from ..exceptions import ShapeNotFoundError
from ..geometry.shapes import BoundingBox

logger = structlog.get_logger()


class _Entry:
    __slots__ = ('item', 'min_x', 'min_y', 'max_x', 'max_y', 'active')

    def __init__(self, item, bbox: BoundingBox):
        self.item = item
        self.min_x = bbox.min_x
        self.min_y = bbox.min_y
        self.max_x = bbox.max_x
        self.max_y = bbox.max_y
        self.active = True


class _Node:
    __slots__ = ('children', 'leaf', 'height', 'min_x', 'min_y', 'max_x', 'max_y')

    def __init__(self, children: Optional[list] = None, leaf: bool = True, height: int = 1):
        self.children = children if children is not None else []
        self.leaf = leaf
        self.height = height
        self.min_x = math.inf
        self.min_y = math.inf
        self.max_x = -math.inf
        self.max_y = -math.inf


def _reset(node) -> None:
    node.min_x = math.inf
    node.min_y = math.inf
    node.max_x = -math.inf
    node.max_y = -math.inf


def _extend(a, b) -> None:
    a.min_x = min(a.min_x, b.min_x)
    a.min_y = min(a.min_y, b.min_y)
    a.max_x = max(a.max_x, b.max_x)
    a.max_y = max(a.max_y, b.max_y)


def _calc_bbox(node: _Node) -> None:
    _dist_bbox(node, 0, len(node.children), node)


def _dist_bbox(node: _Node, k: int, p: int, dest: Optional[_Node] = None) -> _Node:
    # box of node.children[k:p]
    if dest is None:
        dest = _Node()
    _reset(dest)
    for child in node.children[k:p]:
        _extend(dest, child)
    return dest


def _area(a) -> float:
    return (a.max_x - a.min_x) * (a.max_y - a.min_y)


def _margin(a) -> float:
    return (a.max_x - a.min_x) + (a.max_y - a.min_y)


def _enlarged_area(a, b) -> float:
    return ((max(b.max_x, a.max_x) - min(b.min_x, a.min_x))
            * (max(b.max_y, a.max_y) - min(b.min_y, a.min_y)))


def _intersection_area(a, b) -> float:
    min_x = max(a.min_x, b.min_x)
    min_y = max(a.min_y, b.min_y)
    max_x = min(a.max_x, b.max_x)
    max_y = min(a.max_y, b.max_y)
    return max(0.0, max_x - min_x) * max(0.0, max_y - min_y)


def _contains(a, b) -> bool:
    return (a.min_x <= b.min_x and a.min_y <= b.min_y
            and b.max_x <= a.max_x and b.max_y <= a.max_y)


def _intersects(a, b) -> bool:
    return (b.min_x <= a.max_x and b.min_y <= a.max_y
            and b.max_x >= a.min_x and b.max_y >= a.min_y)


def _default_to_bbox(item) -> BoundingBox:
    if hasattr(item, 'bounding_box'):
        return item.bounding_box()
    return item


class RTree:
    """
    R-tree over hashable items.

    :param max_entries: Node capacity; defaults to ``settings.rtree_max_entries``.
    :type max_entries: Optional[int]
    :param to_bbox: Maps an item to its bounding box. Defaults to calling
        ``item.bounding_box()`` or using the item itself as the box.
    :type to_bbox: Optional[Callable]
    """

    def __init__(self, max_entries: Optional[int] = None,
                 to_bbox: Optional[Callable[[Hashable], BoundingBox]] = None):
        max_entries = settings.rtree_max_entries if max_entries is None else max_entries
        self._max_entries = max(4, max_entries)
        self._min_entries = max(2, math.ceil(self._max_entries * 0.4))
        self._to_bbox = to_bbox or _default_to_bbox
        self._entries: Dict[Hashable, _Entry] = {}
        self._removed = 0
        self.clear()

    def __len__(self):
        return len(self._entries) - self._removed

    def __contains__(self, item):
        entry = self._entries.get(item)
        return entry is not None and entry.active

    @property
    def height(self) -> int:
        return self._root.height

    def bounding_box(self) -> BoundingBox:
        root = self._root
        return BoundingBox(root.min_x, root.min_y, root.max_x, root.max_y)

    def clear(self) -> 'RTree':
        self._root = _Node()
        self._entries = {}
        self._removed = 0
        return self

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def all(self) -> List:
        return [entry.item for entry in self._all(self._root, []) if entry.active]

    def search(self, bbox: BoundingBox) -> List:
        """
        Items whose boxes intersect ``bbox``.

        :param bbox: Query box.
        :type bbox: BoundingBox
        :return: Matching items, each once.
        :rtype: List
        """
        node = self._root
        result: List = []
        if not _intersects(bbox, node):
            return result

        nodes_to_search: List[_Node] = []
        while node is not None:
            for child in node.children:
                if not _intersects(bbox, child):
                    continue
                if node.leaf:
                    if child.active:
                        result.append(child.item)
                elif _contains(bbox, child):
                    result.extend(e.item for e in self._all(child, []) if e.active)
                else:
                    nodes_to_search.append(child)
            node = nodes_to_search.pop() if nodes_to_search else None
        return result

    def collides(self, bbox: BoundingBox) -> bool:
        """True if any live item's box intersects ``bbox``."""
        node = self._root
        if not _intersects(bbox, node):
            return False

        nodes_to_search: List[_Node] = []
        while node is not None:
            for child in node.children:
                if not _intersects(bbox, child):
                    continue
                if node.leaf:
                    if child.active:
                        return True
                elif _contains(bbox, child) and any(e.active for e in self._all(child, [])):
                    return True
                else:
                    nodes_to_search.append(child)
            node = nodes_to_search.pop() if nodes_to_search else None
        return False

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert(self, item) -> 'RTree':
        entry = self._make_entry(item)
        self._insert(entry, self._root.height - 1)
        return self

    def load(self, items: Iterable) -> 'RTree':
        """
        Bulk insert items.

        Small batches go through :meth:`insert`; larger ones are packed
        into a subtree that is spliced into the existing tree at the
        matching height.
        """
        entries = [self._make_entry(item) for item in items]
        self._load_entries(entries)
        return self

    def remove(self, item) -> 'RTree':
        """
        Remove an item and condense under-full ancestors.

        :raises ShapeNotFoundError: If the item is not in the tree.
        """
        entry = self._entries.get(item)
        if entry is None:
            raise ShapeNotFoundError(f"Item {item!r} is not in the tree")

        node = self._root
        path: List[_Node] = []
        indexes: List[int] = []
        i = 0
        parent = None
        going_up = False

        while node is not None or path:
            if node is None:
                node = path.pop()
                parent = path[-1] if path else None
                i = indexes.pop()
                going_up = True

            if node.leaf:
                index = next((k for k, child in enumerate(node.children) if child is entry), -1)
                if index != -1:
                    del node.children[index]
                    path.append(node)
                    self._condense(path)
                    del self._entries[item]
                    if not entry.active:
                        self._removed -= 1
                    return self

            if not going_up and not node.leaf and _contains(node, entry):
                path.append(node)
                indexes.append(i)
                i = 0
                parent = node
                node = node.children[0]
            elif parent is not None:
                i += 1
                node = parent.children[i] if i < len(parent.children) else None
                going_up = False
            else:
                node = None

        raise ShapeNotFoundError(f"Item {item!r} is indexed but unreachable")

    def mark_removed(self, item) -> None:
        """
        Hide an item from queries without restructuring the tree.

        :raises ShapeNotFoundError: If the item is not in the tree.
        """
        entry = self._entries.get(item)
        if entry is None or not entry.active:
            raise ShapeNotFoundError(f"Item {item!r} is not in the tree")
        entry.active = False
        self._removed += 1
        if self._removed > settings.rtree_compaction_ratio * len(self._entries):
            self.compact()

    def compact(self) -> 'RTree':
        """Rebuild the tree from its live entries."""
        live = [entry for entry in self._entries.values() if entry.active]
        logger.debug("rtree_compact", live=len(live), removed=self._removed)
        self.clear()
        for entry in live:
            self._entries[entry.item] = entry
        self._load_entries(live)
        return self

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _make_entry(self, item) -> _Entry:
        old = self._entries.get(item)
        if old is not None:
            self.remove(item)
        entry = _Entry(item, self._to_bbox(item))
        self._entries[item] = entry
        return entry

    def _load_entries(self, entries: List[_Entry]) -> None:
        if not entries:
            return
        if len(entries) < self._min_entries:
            for entry in entries:
                self._insert(entry, self._root.height - 1)
            return

        node = self._build(list(entries), 0, len(entries) - 1, 0)

        if not self._root.children:
            self._root = node
        elif self._root.height == node.height:
            self._split_root(self._root, node)
        else:
            if self._root.height < node.height:
                self._root, node = node, self._root
            self._insert(node, self._root.height - node.height - 1)

    @staticmethod
    def _all(node: _Node, result: List[_Entry]) -> List[_Entry]:
        nodes_to_search: List[_Node] = []
        while node is not None:
            if node.leaf:
                result.extend(node.children)
            else:
                nodes_to_search.extend(node.children)
            node = nodes_to_search.pop() if nodes_to_search else None
        return result

    def _build(self, items: List[_Entry], left: int, right: int, height: int) -> _Node:
        n = right - left + 1
        m = self._max_entries

        if n <= m:
            node = _Node(items[left:right + 1])
            _calc_bbox(node)
            return node

        if not height:
            # target height of the bulk-loaded tree
            height = math.ceil(math.log(n) / math.log(m))
            m = math.ceil(n / m ** (height - 1))

        node = _Node(leaf=False, height=height)

        n2 = math.ceil(n / m)
        n1 = n2 * math.ceil(math.sqrt(m))

        items[left:right + 1] = sorted(items[left:right + 1], key=lambda e: e.min_x)
        for i in range(left, right + 1, n1):
            right2 = min(i + n1 - 1, right)
            items[i:right2 + 1] = sorted(items[i:right2 + 1], key=lambda e: e.min_y)
            for j in range(i, right2 + 1, n2):
                right3 = min(j + n2 - 1, right2)
                node.children.append(self._build(items, j, right3, height - 1))

        _calc_bbox(node)
        return node

    def _choose_subtree(self, bbox, node: _Node, level: int, path: List[_Node]) -> _Node:
        while True:
            path.append(node)
            if node.leaf or len(path) - 1 == level:
                break

            min_area = math.inf
            min_enlargement = math.inf
            target = None
            for child in node.children:
                area = _area(child)
                enlargement = _enlarged_area(bbox, child) - area
                if enlargement < min_enlargement:
                    min_enlargement = enlargement
                    min_area = min(area, min_area)
                    target = child
                elif enlargement == min_enlargement and area < min_area:
                    min_area = area
                    target = child

            node = target or node.children[0]
        return node

    def _insert(self, item, level: int) -> None:
        # item is an _Entry or, when splicing a bulk-loaded subtree, a _Node
        insert_path: List[_Node] = []
        node = self._choose_subtree(item, self._root, level, insert_path)
        node.children.append(item)
        _extend(node, item)

        while level >= 0:
            if len(insert_path[level].children) > self._max_entries:
                self._split(insert_path, level)
                level -= 1
            else:
                break

        for i in range(level, -1, -1):
            _extend(insert_path[i], item)

    def _split(self, insert_path: List[_Node], level: int) -> None:
        node = insert_path[level]
        total = len(node.children)
        m = self._min_entries

        self._choose_split_axis(node, m, total)
        split_index = self._choose_split_index(node, m, total)

        new_node = _Node(node.children[split_index:], leaf=node.leaf, height=node.height)
        del node.children[split_index:]
        _calc_bbox(node)
        _calc_bbox(new_node)

        if level:
            insert_path[level - 1].children.append(new_node)
        else:
            self._split_root(node, new_node)

    def _split_root(self, node: _Node, new_node: _Node) -> None:
        self._root = _Node([node, new_node], leaf=False, height=node.height + 1)
        _calc_bbox(self._root)

    def _choose_split_index(self, node: _Node, m: int, total: int) -> int:
        index = None
        min_overlap = math.inf
        min_area = math.inf

        for i in range(m, total - m + 1):
            bbox1 = _dist_bbox(node, 0, i)
            bbox2 = _dist_bbox(node, i, total)
            overlap = _intersection_area(bbox1, bbox2)
            area = _area(bbox1) + _area(bbox2)

            if overlap < min_overlap:
                min_overlap = overlap
                index = i
                min_area = min(area, min_area)
            elif overlap == min_overlap and area < min_area:
                min_area = area
                index = i

        return index or total - m

    def _choose_split_axis(self, node: _Node, m: int, total: int) -> None:
        by_x = lambda c: c.min_x  # noqa: E731
        by_y = lambda c: c.min_y  # noqa: E731
        x_margin = self._all_dist_margin(node, m, total, by_x)
        y_margin = self._all_dist_margin(node, m, total, by_y)
        # children are left sorted by y; re-sort when x is better
        if x_margin < y_margin:
            node.children.sort(key=by_x)

    def _all_dist_margin(self, node: _Node, m: int, total: int, key) -> float:
        node.children.sort(key=key)

        left_bbox = _dist_bbox(node, 0, m)
        right_bbox = _dist_bbox(node, total - m, total)
        margin = _margin(left_bbox) + _margin(right_bbox)

        for i in range(m, total - m):
            _extend(left_bbox, node.children[i])
            margin += _margin(left_bbox)

        for i in range(total - m - 1, m - 1, -1):
            _extend(right_bbox, node.children[i])
            margin += _margin(right_bbox)

        return margin

    def _condense(self, path: List[_Node]) -> None:
        for i in range(len(path) - 1, -1, -1):
            if not path[i].children:
                if i > 0:
                    siblings = path[i - 1].children
                    siblings.remove(path[i])
                else:
                    self._root = _Node()
            else:
                _calc_bbox(path[i])
