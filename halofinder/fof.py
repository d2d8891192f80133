"""Friends-of-friends grouping with union-find over particle links."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, MutableSequence, Sequence


@dataclass
class Fof:
    """A group: a contiguous run of the sorted particle list."""

    start: int
    num_p: int = 0

    @property
    def stop(self) -> int:
        return self.start + self.num_p


def _partition_sort(
    items: MutableSequence, assignments: MutableSequence[int], lo: int, hi: int
) -> None:
    if hi - lo < 2:
        return
    window = assignments[lo:hi]
    low, high = min(window), max(window)
    if low == high:
        return
    pivot = low + (high - low) // 2
    i, si = lo, hi - 1
    while i < si:
        if assignments[i] > pivot:
            items[i], items[si] = items[si], items[i]
            assignments[i], assignments[si] = assignments[si], assignments[i]
            si -= 1
        else:
            i += 1
    if i == si and assignments[si] <= pivot:
        si += 1
    _partition_sort(items, assignments, lo, si)
    _partition_sort(items, assignments, si, hi)


def partition_sort(items: MutableSequence, assignments: MutableSequence[int]) -> None:
    """Sort both sequences in place, in step, by ascending assignment."""
    if len(items) != len(assignments):
        raise ValueError("items and assignments must have the same length")
    _partition_sort(items, assignments, 0, len(items))


class FofBuilder:
    """Collects particle links and turns them into groups.

    Particles are referred to by their index in the list given at
    construction; ``build`` reorders ``particles`` so that every group is
    contiguous.
    """

    def __init__(self, particles: Iterable, min_halo_particles: int = 10):
        self.particles: List = list(particles)
        self.min_halo_particles = min_halo_particles
        self.assignments: List[int] = [-1] * len(self.particles)
        self._roots: List[int] = []
        self.num_boundary_fofs = 0

    def _new_smallfof(self) -> int:
        self._roots.append(len(self._roots))
        return len(self._roots) - 1

    def _collapse(self, f: int) -> None:
        roots = self._roots
        if roots[roots[f]] == roots[f]:
            return
        r = roots[f]
        while r != roots[r]:
            r = roots[r]
        while f != r:
            following = roots[f]
            roots[f] = r
            f = following

    def _merge(self, f1: int, f2: int) -> None:
        roots = self._roots
        if roots[f2] == roots[f1]:
            return
        self._collapse(f1)
        if f2 == roots[f2]:
            roots[f2] = roots[f1]
            return
        f1root = roots[f1]
        while True:
            r = roots[f2]
            roots[f2] = f1root
            f2 = r
            if r == f1root:
                break

    def link_particle(self, index: int, links: Sequence[int]) -> None:
        """Join a particle's neighbours (usually including itself) into one group."""
        if len(links) < 2:
            return
        marks = self.assignments
        f = marks[index]
        if f < 0:
            f = next((marks[j] for j in links if marks[j] != -1), -1)
            if f < 0:
                f = self._new_smallfof()
        for j in links:
            if marks[j] == -1:
                marks[j] = f
            else:
                self._merge(marks[j], f)

    def link_fof(self, index: int, links: Sequence[int]) -> None:
        """Merge existing groups of the neighbours into this particle's group."""
        marks = self.assignments
        f = marks[index]
        if len(links) < 2 or f < 0:
            return
        for j in links:
            if marks[j] == -1 or marks[j] == f:
                continue
            self._merge(marks[j], f)

    def tag_boundary_particle(self, index: int) -> int:
        """Mark a particle's group as touching the boundary; return its boundary id."""
        f = self.assignments[index]
        if f < 0:
            self.assignments[index] = self._new_smallfof()
            self.num_boundary_fofs += 1
            return self.num_boundary_fofs - 1
        self._collapse(f)
        roots = self._roots
        first_boundary = len(roots) - self.num_boundary_fofs
        if roots[f] >= first_boundary:
            return roots[f] - first_boundary
        new_fof = self._new_smallfof()
        roots[roots[f]] = new_fof
        self.num_boundary_fofs += 1
        return self.num_boundary_fofs - 1

    def build(self) -> List[Fof]:
        """Sort particles by group and return the groups that are kept.

        Groups smaller than ``min_halo_particles`` are dropped unless they
        touch the boundary.
        """
        for f in range(len(self._roots)):
            self._collapse(f)
        self.assignments = [
            self._roots[f] if f >= 0 else f for f in self.assignments
        ]
        partition_sort(self.particles, self.assignments)

        first_boundary = len(self._roots) - self.num_boundary_fofs
        fofs: List[Fof] = []
        sf = last_sf = -1
        for i, assignment in enumerate(self.assignments):
            if assignment < 0:
                continue
            sf = assignment
            if sf != last_sf:
                if fofs:
                    fofs[-1].num_p = i - fofs[-1].start
                if (
                    not fofs
                    or fofs[-1].num_p >= self.min_halo_particles
                    or last_sf >= first_boundary
                ):
                    fofs.append(Fof(i))
                else:
                    fofs[-1].start = i
                last_sf = sf
        if fofs:
            fofs[-1].num_p = len(self.assignments) - fofs[-1].start
            if fofs[-1].num_p < self.min_halo_particles and sf < first_boundary:
                fofs.pop()
        return fofs