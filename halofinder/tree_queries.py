"""Box and nearest-distance queries on a :class:`Fast3Tree`."""

from __future__ import annotations

import math
from typing import List, Sequence

from .fast3tree import Fast3Tree, TreeNode, _box_not_intersect_sphere


def _check_box(tree: Fast3Tree, box: Sequence[float]) -> List[float]:
    if len(box) < 2 * tree.dim:
        raise ValueError(f"box needs {2 * tree.dim} values, got {len(box)}")
    return list(box[: 2 * tree.dim])


def _node_inside_box(node: TreeNode, box: Sequence[float], dim: int) -> bool:
    return all(
        node.max[i] <= box[i + dim] and node.min[i] >= box[i] for i in range(dim)
    )


def _node_intersects_box(node: TreeNode, box: Sequence[float], dim: int) -> bool:
    return all(
        node.max[i] >= box[i] and node.min[i] <= box[i + dim] for i in range(dim)
    )


def _point_inside_box(pos: Sequence[float], box: Sequence[float], dim: int) -> bool:
    return all(box[j] <= pos[j] <= box[j + dim] for j in range(dim))


def _outside(tree: Fast3Tree, node: TreeNode, box, out: List[int]) -> None:
    dim = tree.dim
    if _node_inside_box(node, box, dim):
        return
    if not _node_intersects_box(node, box, dim):
        out.extend(range(node.start, node.stop))
    elif node.is_leaf:
        out.extend(
            i
            for i in range(node.start, node.stop)
            if not _point_inside_box(tree.position(tree.points[i]), box, dim)
        )
    else:
        _outside(tree, node.left, box, out)
        _outside(tree, node.right, box, out)


def _inside(tree: Fast3Tree, node: TreeNode, box, out: List[int]) -> None:
    dim = tree.dim
    if not _node_intersects_box(node, box, dim):
        return
    if _node_inside_box(node, box, dim):
        out.extend(range(node.start, node.stop))
    elif node.is_leaf:
        out.extend(
            i
            for i in range(node.start, node.stop)
            if _point_inside_box(tree.position(tree.points[i]), box, dim)
        )
    else:
        _inside(tree, node.left, box, out)
        _inside(tree, node.right, box, out)


def find_inside_of_box(tree: Fast3Tree, box: Sequence[float]) -> List[int]:
    """Indices of points with every coordinate within the box, edges included.

    The box holds ``dim`` minima followed by ``dim`` maxima.
    """
    b = _check_box(tree, box)
    out: List[int] = []
    _inside(tree, tree.root, b, out)
    return out


def find_outside_of_box(tree: Fast3Tree, box: Sequence[float]) -> List[int]:
    """Indices of points lying outside the box on at least one axis."""
    b = _check_box(tree, box)
    out: List[int] = []
    _outside(tree, tree.root, b, out)
    return out


def _next_closest(
    tree: Fast3Tree, node: TreeNode, c: Sequence[float], r: float, skip: TreeNode
) -> float:
    if node is skip or _box_not_intersect_sphere(node, c, r):
        return r
    if node.is_leaf:
        r2 = r * r
        for i in range(node.start, node.stop):
            dist = tree._dist2(c, i)
            if dist < r2:
                r2 = dist
        return math.sqrt(r2)
    d = node.div_dim
    first, second = node.left, node.right
    if c[d] > 0.5 * (node.min[d] + node.max[d]):
        first, second = second, first
    r = _next_closest(tree, first, c, r, skip)
    return _next_closest(tree, second, c, r, skip)


def find_next_closest_distance(tree: Fast3Tree, center: Sequence[float]) -> float:
    """Distance from ``center`` to the nearest point not lying exactly on it.

    Within the leaf holding ``center`` points at zero distance are ignored.
    """
    c = list(center[: tree.dim])
    node = tree.root
    while not node.is_leaf:
        d = node.div_dim
        node = node.left if c[d] <= node.left.max[d] else node.right

    while node is not tree.root:
        d = node.parent.div_dim
        if node.min[d] != node.max[d]:
            break
        node = node.parent

    min_dist = sum((hi - lo) ** 2 for lo, hi in zip(node.min, node.max))
    for i in range(node.start, node.stop):
        dist = tree._dist2(c, i)
        if dist and dist < min_dist:
            min_dist = dist
    return _next_closest(tree, tree.root, c, math.sqrt(min_dist), node)