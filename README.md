# halofinder

Building blocks for finding dark matter halos in cosmological N-body
simulations: run configuration, background cosmology, periodic box
geometry, friends-of-friends grouping and a BSP tree for spatial queries.
Pure Python, no dependencies outside the standard library.

## Installation

```
pip install .
pip install ".[test]"   # with the test dependencies
```

## Modules

### `halofinder.config`

- `Config` is a dataclass holding every run option with its default, as
  lower-case attributes (`box_size`, `om`, `ol`, `h0`, `num_blocks`, ...).
- `parse_config(text)` reads `KEY = value` lines (keys such as `BOX_SIZE`,
  `Om`, `Ol`, `h0`; `#` starts a comment; three-value options are written
  `(x, y, z)`), then calls `Config.setup()`. Unknown keys and unparsable
  lines give a `ConfigWarning`; bad values raise `ConfigError`.
- `load_config(path)` does the same for a file and records the path in
  `rockstar_config_filename`; an empty path gives the defaults.
- `Config.setup()` fills in derived values (particle mass from the box
  size, `Om` and particle count; mean particle spacing; reader count;
  `force_res_phys_max`), turns off periodicity and temporal halo finding
  where they cannot apply, raises the process's open-file and core-size
  limits where the platform allows, and raises `ConfigError` when
  `NUM_READERS > NUM_BLOCKS`.
- `Config.to_text()` renders the configuration in the same file format;
  `Config.write(path=None)` writes it under `outbase` (default file name
  `rockstar.cfg`) and returns the written path.

### `halofinder.cosmology`

`Cosmology(h0, om, ol, w0, wa)` (a frozen dataclass) gives the Hubble
scaling E(z) with a w0–wa dark energy model, comoving distance from a
table up to z = 300 (built on first use, which takes a moment), transverse,
angular diameter and luminosity distances, the comoving volume element and
volume, and their inverses (`comoving_distance_to_redshift`,
`comoving_distance_h_to_redshift`, `comoving_volume_to_redshift`).
Distances are in Mpc; the `_h` variants in Mpc/h. `redshift(a)` and
`scale_factor(z)` convert between scale factor and redshift.

### `halofinder.bounds`

Boxes are six numbers, three minima then three maxima.
`check_bounds` returns the (periodically wrapped) position when it fits
the box, else `None`; `check_bounds_raw` tests `min <= x < max`;
`wrap_into_box` moves a position back into the periodic box;
`bounds_overlap` returns the second box grown by the overlap when the
boxes meet (allowing periodic images), else `None`; `bounds_union` gives
the enclosing box.

### `halofinder.fof`

`FofBuilder(particles, min_halo_particles=10)` collects links between
particle indices (`link_particle`, `link_fof`, `tag_boundary_particle`)
in a union–find structure. `build()` reorders `particles` so each group is
contiguous and returns `Fof` groups (`start`, `num_p`, `stop`), dropping
groups below the minimum size unless they touch the boundary.
`partition_sort(items, assignments)` sorts both lists in step by
assignment.

### `halofinder.fast3tree`

`Fast3Tree(points, dim=3, points_per_leaf=40, position=None)` is a BSP
tree over arbitrary objects; coordinates come from `position(item)`, by
default the item's `pos` attribute or the item itself. The tree reorders
`tree.points`, and searches return indices into it. Points with
non-finite coordinates are left out. Searches: `find_sphere`,
`find_sphere_skip` (neighbours of a point stored at or after it),
`find_sphere_periodic` and `find_sphere_marked`; the last two return a
`(PeriodicStatus, indices)` pair. `rebuild` and `maxmin_rebuild` update
the tree.

### `halofinder.tree_queries`

`find_inside_of_box(tree, box)`, `find_outside_of_box(tree, box)` and
`find_next_closest_distance(tree, center)` on a `Fast3Tree`.

### `halofinder.halo_density`

`vir_density(cosmology, a)` gives the virial overdensity;
`threshold_density(definition, cosmology, scale, particle_mass)` the
threshold density in particles per (Mpc/h)^3 for definitions such as
`vir`, `200b`, `m200b` or `500c`; `find_median_r(radii, frac)` the value
at rank `int(len(radii) * frac)` of the sorted radii.

## Example

```python
from halofinder.config import parse_config
from halofinder.cosmology import Cosmology

config = parse_config("BOX_SIZE = 100\nOm = 0.3\nOl = 0.7\n")
cosmo = Cosmology(h0=config.h0, om=config.om, ol=config.ol)
print(config.particle_mass, cosmo.comoving_distance(1.0))
```

## What this package does not do

It provides the pieces listed above and nothing more. There is no
command-line program, no reader for simulation snapshot formats, no
complete halo-finding run that turns particles into a halo catalogue, no
catalogue or merger-tree output, and no parallel reader/writer
coordination over the network.

## Tests

```
pytest
```