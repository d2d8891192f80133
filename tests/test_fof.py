import pytest

from halofinder.fof import Fof, FofBuilder, partition_sort


def members(builder, fof):
    return set(builder.particles[fof.start:fof.stop])


def test_partition_sort_orders_and_keeps_pairs():
    items = ["a", "b", "c", "d", "e", "f"]
    keys = [3, -1, 2, 3, 0, -1]
    pairs = sorted(zip(keys, items))
    partition_sort(items, keys)
    assert keys == sorted(keys)
    assert sorted(zip(keys, items)) == pairs


def test_partition_sort_length_mismatch():
    with pytest.raises(ValueError):
        partition_sort([1, 2], [0])


def test_fof_stop():
    assert Fof(start=4, num_p=3).stop == 7


def test_two_groups():
    builder = FofBuilder("abcde", min_halo_particles=2)
    builder.link_particle(0, [0, 1, 2])
    builder.link_particle(3, [3, 4])
    fofs = builder.build()
    assert [members(builder, f) for f in fofs] == [{"a", "b", "c"}, {"d", "e"}]


def test_small_groups_dropped():
    builder = FofBuilder("abcde", min_halo_particles=3)
    builder.link_particle(0, [0, 1, 2])
    builder.link_particle(3, [3, 4])
    fofs = builder.build()
    assert len(fofs) == 1
    assert members(builder, fofs[0]) == {"a", "b", "c"}


def test_small_group_first_is_replaced():
    builder = FofBuilder("abcde", min_halo_particles=3)
    builder.link_particle(0, [0, 1])
    builder.link_particle(2, [2, 3, 4])
    fofs = builder.build()
    assert len(fofs) == 1
    assert members(builder, fofs[0]) == {"c", "d", "e"}


def test_chain_merges_groups():
    builder = FofBuilder("abcd", min_halo_particles=2)
    builder.link_particle(0, [0, 1])
    builder.link_particle(2, [2, 3])
    builder.link_particle(1, [1, 2])
    fofs = builder.build()
    assert len(fofs) == 1
    assert members(builder, fofs[0]) == set("abcd")


def test_single_link_ignored():
    builder = FofBuilder("abc", min_halo_particles=1)
    builder.link_particle(0, [0])
    assert builder.build() == []


def test_link_fof_merges_existing_groups():
    builder = FofBuilder("abcde", min_halo_particles=2)
    builder.link_particle(0, [0, 1])
    builder.link_particle(2, [2, 3])
    builder.link_fof(0, [0, 2])
    builder.link_fof(4, [4, 0])
    fofs = builder.build()
    assert len(fofs) == 1
    assert members(builder, fofs[0]) == set("abcd")


def test_boundary_tags_stable_per_group():
    builder = FofBuilder("abcd", min_halo_particles=10)
    builder.link_particle(0, [0, 1])
    builder.link_particle(2, [2, 3])
    first = builder.tag_boundary_particle(0)
    second = builder.tag_boundary_particle(2)
    assert first != second
    assert builder.tag_boundary_particle(1) == first
    assert builder.tag_boundary_particle(3) == second
    assert builder.num_boundary_fofs == 2


def test_boundary_groups_kept_when_small():
    builder = FofBuilder("abcd", min_halo_particles=10)
    builder.link_particle(0, [0, 1])
    builder.link_particle(2, [2, 3])
    builder.tag_boundary_particle(0)
    builder.tag_boundary_particle(2)
    fofs = builder.build()
    assert sorted(map(frozenset, (members(builder, f) for f in fofs)), key=sorted) == [
        frozenset("ab"),
        frozenset("cd"),
    ]


def test_lone_boundary_particle_forms_group():
    builder = FofBuilder("abc", min_halo_particles=10)
    assert builder.tag_boundary_particle(2) == 0
    fofs = builder.build()
    assert len(fofs) == 1
    assert members(builder, fofs[0]) == {"c"}


def test_build_groups_are_contiguous_and_disjoint():
    builder = FofBuilder(range(8), min_halo_particles=2)
    builder.link_particle(5, [5, 1, 7])
    builder.link_particle(0, [0, 6])
    builder.link_particle(2, [2, 4])
    fofs = builder.build()
    seen = [m for f in fofs for m in members(builder, f)]
    assert len(seen) == len(set(seen))
    assert set(seen) == {0, 1, 2, 4, 5, 6, 7}
    assert sorted(builder.particles) == list(range(8))