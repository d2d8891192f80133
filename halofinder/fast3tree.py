"""A binary space-partitioning tree for fast spatial searches.

Points are arbitrary objects; their coordinates come from a ``position``
callable (by default the object's ``pos`` attribute, or the object itself
when it has none). The tree reorders its list of points so that every node
covers a contiguous run of it. Search results are indices into
``tree.points``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Iterable, List, Optional, Sequence

MARKED = 1
POINTS_PER_LEAF = 40


class PeriodicStatus(IntEnum):
    """Outcome of a periodic sphere search."""

    FAILED = 0  # sphere wider than half the box; no search was done
    WRAPPED = 1  # periodic images were searched
    DIRECT = 2  # sphere lay inside the box; a plain search was done


def _default_position(item):
    return getattr(item, "pos", item)


@dataclass(eq=False)
class TreeNode:
    """A node covering ``points[start:stop]`` inside the box ``min``..``max``."""

    min: List[float]
    max: List[float]
    start: int = 0
    num_points: int = 0
    div_dim: int = -1
    flags: int = 0
    left: Optional["TreeNode"] = field(default=None, repr=False)
    right: Optional["TreeNode"] = field(default=None, repr=False)
    parent: Optional["TreeNode"] = field(default=None, repr=False)

    @property
    def stop(self) -> int:
        return self.start + self.num_points

    @property
    def is_leaf(self) -> bool:
        return self.div_dim < 0


def _box_not_intersect_sphere(node: TreeNode, c: Sequence[float], r: float) -> bool:
    d = 0.0
    r2 = r * r
    for ci, lo, hi in zip(c, node.min, node.max):
        e = ci - lo
        if e < 0:
            d += e * e
            if d >= r2:
                return True
        else:
            e = ci - hi
            if e > 0:
                d += e * e
                if d >= r2:
                    return True
    return False


def _box_inside_sphere(node: TreeNode, c: Sequence[float], r: float) -> bool:
    if abs(c[0] - node.min[0]) > r:
        return False
    dist = 0.0
    r2 = r * r
    for ci, lo, hi in zip(c, node.min, node.max):
        dist += max((lo - ci) ** 2, (ci - hi) ** 2)
        if dist > r2:
            return False
    return True


def _sphere_inside_box(node: TreeNode, c: Sequence[float], r: float) -> bool:
    return all(
        ci - r >= lo and ci + r <= hi for ci, lo, hi in zip(c, node.min, node.max)
    )


class Fast3Tree:
    """Spatial tree over points in ``dim`` dimensions."""

    def __init__(
        self,
        points: Iterable = (),
        dim: int = 3,
        points_per_leaf: int = POINTS_PER_LEAF,
        position: Optional[Callable] = None,
    ):
        if dim < 1:
            raise ValueError("dim must be at least 1")
        if points_per_leaf < 1:
            raise ValueError("points_per_leaf must be at least 1")
        self.dim = dim
        self.points_per_leaf = points_per_leaf
        self.position = position or _default_position
        self.points: list = []
        self.num_points = 0
        self.num_nodes = 0
        self.root = TreeNode([0.0] * dim, [0.0] * dim)
        self.rebuild(points)

    # -- building -------------------------------------------------------

    def rebuild(self, points: Iterable) -> None:
        """Build the tree over new points.

        A list is reordered in place and kept; points with non-finite
        coordinates are moved past ``num_points`` and left out of the tree.
        """
        self.points = points if isinstance(points, list) else list(points)
        self._build()

    def _coords(self, index: int) -> Sequence[float]:
        return self.position(self.points[index])

    def _build(self) -> None:
        pts = self.points
        dim = self.dim
        n = len(pts)
        i = 0
        while i < n:
            pos = self._coords(i)
            if all(math.isfinite(pos[j]) for j in range(dim)):
                i += 1
            else:
                n -= 1
                pts[i], pts[n] = pts[n], pts[i]
        self.num_points = n
        root = TreeNode([0.0] * dim, [0.0] * dim, 0, n)
        if n:
            self._find_minmax(root)
        self.root = root
        self.num_nodes = 1
        if n > self.points_per_leaf:
            self._split(root)

    def _find_minmax(self, node: TreeNode) -> None:
        dim = self.dim
        first = self._coords(node.start)
        lows = [first[j] for j in range(dim)]
        highs = list(lows)
        for i in range(node.start + 1, node.stop):
            pos = self._coords(i)
            for j in range(dim):
                x = pos[j]
                if x < lows[j]:
                    lows[j] = x
                elif x > highs[j]:
                    highs[j] = x
        node.min, node.max = lows, highs

    def _largest_dim(self, node: TreeNode) -> int:
        dim = self.dim - 1
        d = node.max[dim] - node.min[dim]
        for i in range(self.dim - 1):
            d2 = node.max[i] - node.min[i]
            if d2 > d:
                d, dim = d2, i
        return dim

    def _sort_dim_pos(self, node: TreeNode) -> int:
        d = node.div_dim = self._largest_dim(node)
        if node.max[d] == node.min[d]:
            return node.num_points
        lim = 0.5 * (node.max[d] + node.min[d])
        pts = self.points
        i, j = node.start, node.stop - 1
        while i < j:
            if self._coords(i)[d] > lim:
                pts[i], pts[j] = pts[j], pts[i]
                j -= 1
            else:
                i += 1
        if i == j and self._coords(i)[d] <= lim:
            i += 1
        return i - node.start

    def _split(self, node: TreeNode) -> None:
        num_left = self._sort_dim_pos(node)
        if num_left in (0, node.num_points):
            node.div_dim = -1
            return
        dim = self.dim
        left = TreeNode([0.0] * dim, [0.0] * dim, node.start, num_left, parent=node)
        right = TreeNode(
            [0.0] * dim,
            [0.0] * dim,
            node.start + num_left,
            node.num_points - num_left,
            parent=node,
        )
        self._find_minmax(left)
        self._find_minmax(right)
        node.left, node.right = left, right
        self.num_nodes += 2
        if left.num_points > self.points_per_leaf:
            self._split(left)
        if right.num_points > self.points_per_leaf:
            self._split(right)

    def maxmin_rebuild(self) -> None:
        """Recompute node boxes after points moved, keeping the structure."""
        self._maxmin(self.root)

    def _maxmin(self, node: TreeNode) -> None:
        if node.is_leaf:
            if node.num_points:
                self._find_minmax(node)
            return
        self._maxmin(node.left)
        self._maxmin(node.right)
        node.min = list(map(min, node.left.min, node.right.min))
        node.max = list(map(max, node.left.max, node.right.max))

    def _mark(self, node: TreeNode, mark: int) -> None:
        node.flags = mark
        if not node.is_leaf:
            self._mark(node.left, mark)
            self._mark(node.right, mark)

    # -- searches -------------------------------------------------------

    def _dist2(self, c: Sequence[float], index: int) -> float:
        pos = self._coords(index)
        return sum((c[j] - pos[j]) ** 2 for j in range(self.dim))

    def find_sphere(self, center: Sequence[float], r: float) -> List[int]:
        """Indices of points closer than ``r`` to ``center``."""
        out: List[int] = []
        self._find_sphere(self.root, list(center[: self.dim]), r, out)
        return out

    def _find_sphere(self, node: TreeNode, c, r: float, out: List[int]) -> None:
        if _box_not_intersect_sphere(node, c, r):
            return
        if self.dim < 6 and _box_inside_sphere(node, c, r):
            out.extend(range(node.start, node.stop))
            return
        if node.is_leaf:
            r2 = r * r
            out.extend(i for i in range(node.start, node.stop) if self._dist2(c, i) < r2)
            return
        self._find_sphere(node.left, c, r, out)
        self._find_sphere(node.right, c, r, out)

    def find_sphere_skip(self, index: int, r: float) -> List[int]:
        """Neighbours of point ``index``, skipping points stored before it.

        The point itself is always included.
        """
        if not 0 <= index < self.num_points:
            raise IndexError("point index out of range")
        c = list(self._coords(index)[: self.dim])
        out: List[int] = []
        self._find_sphere_skip(self.root, c, r, index, out)
        return out

    def _find_sphere_skip(self, node, c, r: float, tp: int, out: List[int]) -> None:
        if node.stop <= tp:
            return
        if _box_not_intersect_sphere(node, c, r):
            return
        if self.dim < 6 and _box_inside_sphere(node, c, r):
            out.extend(range(node.start, node.stop))
            return
        if node.is_leaf:
            r2 = r * r
            first = node.start
            if node.start < tp:
                out.append(tp)
                first = tp + 1
            out.extend(i for i in range(first, node.stop) if self._dist2(c, i) < r2)
            return
        self._find_sphere_skip(node.left, c, r, tp, out)
        self._find_sphere_skip(node.right, c, r, tp, out)

    def _find_sphere_offset(
        self, node, c, c2, o, r: float, marked: bool, do_marking: bool, out: List[int]
    ) -> None:
        onlyone = marked and bool(node.flags & MARKED)
        if _box_not_intersect_sphere(node, c2, r * 1.01):
            return
        if _box_inside_sphere(node, c2, r * 0.99):
            if do_marking:
                node.flags |= MARKED
            if onlyone:
                out.append(node.start)
            else:
                out.extend(range(node.start, node.stop))
            return
        if node.is_leaf:
            r2 = r * r
            for i in range(node.start, node.stop):
                pos = self._coords(i)
                dist = sum((o[j] - abs(c[j] - pos[j])) ** 2 for j in range(self.dim))
                if dist < r2:
                    out.append(i)
                    if onlyone:
                        return
            return
        before = len(out)
        self._find_sphere_offset(node.left, c, c2, o, r, marked, do_marking, out)
        if onlyone and len(out) > before:
            return
        self._find_sphere_offset(node.right, c, c2, o, r, marked, do_marking, out)

    def _find_sphere_periodic_dim(
        self, c, c2, o, r, dims, dim: int, marked: bool, do_marking: bool, out
    ) -> None:
        if dim < 0:
            self._find_sphere_offset(self.root, c, c2, o, r, marked, do_marking, out)
            return
        c3 = list(c2)
        o[dim] = 0.0
        self._find_sphere_periodic_dim(c, c3, o, r, dims, dim - 1, marked, do_marking, out)
        if c[dim] + r > self.root.max[dim]:
            c3[dim] = c[dim] - dims[dim]
            o[dim] = dims[dim]
            self._find_sphere_periodic_dim(
                c, c3, o, r, dims, dim - 1, marked, do_marking, out
            )
        if c[dim] - r < self.root.min[dim]:
            c3[dim] = c[dim] + dims[dim]
            o[dim] = dims[dim]
            self._find_sphere_periodic_dim(
                c, c3, o, r, dims, dim - 1, marked, do_marking, out
            )

    def _periodic_dims(self, r: float) -> Optional[List[float]]:
        dims = [hi - lo for lo, hi in zip(self.root.min, self.root.max)]
        if any(r * 2.0 > d for d in dims):
            return None
        return dims

    def find_sphere_periodic(self, center: Sequence[float], r: float):
        """Sphere search treating the root box as periodic.

        Returns ``(status, indices)``; with FAILED no search is done.
        """
        c = list(center[: self.dim])
        if _sphere_inside_box(self.root, c, r):
            return PeriodicStatus.DIRECT, self.find_sphere(c, r)
        dims = self._periodic_dims(r)
        if dims is None:
            return PeriodicStatus.FAILED, []
        out: List[int] = []
        o = [0.0] * self.dim
        self._find_sphere_periodic_dim(c, c, o, r, dims, self.dim - 1, False, False, out)
        return PeriodicStatus.WRAPPED, out

    def find_sphere_marked(
        self, center: Sequence[float], r: float, periodic: bool, do_marking: bool
    ):
        """Sphere search that reports one point per already-marked node.

        With ``do_marking`` nodes found entirely inside the sphere get marked.
        Returns ``(status, indices)`` as :meth:`find_sphere_periodic` does.
        """
        c = list(center[: self.dim])
        out: List[int] = []
        if not periodic or _sphere_inside_box(self.root, c, r):
            o = [0.0] * self.dim
            self._find_sphere_offset(self.root, c, c, o, r, True, do_marking, out)
            return PeriodicStatus.DIRECT, out
        dims = self._periodic_dims(r)
        if dims is None:
            return PeriodicStatus.FAILED, out
        o = [0.0] * self.dim
        self._find_sphere_periodic_dim(c, c, o, r, dims, self.dim - 1, True, do_marking, out)
        return PeriodicStatus.WRAPPED, out