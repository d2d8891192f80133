"""Run-time configuration of the halo finder: defaults, parsing and output."""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, fields
from pathlib import Path

#: Critical density of the universe in (Msun/h) / (Mpc/h)^3.
CRITICAL_DENSITY = 2.77519737e11

Vec3 = tuple  # three floats
_ZERO3 = (0.0, 0.0, 0.0)
_KEY_CASE = {"h0": "h0", "ol": "Ol", "om": "Om", "w0": "W0", "wa": "WA"}


class ConfigError(ValueError):
    """Raised for an invalid configuration."""


class ConfigWarning(UserWarning):
    """Issued for questionable but usable configuration settings."""


def _key(name: str) -> str:
    return _KEY_CASE.get(name, name.upper())


def _divide(numerator: float, denominator: float) -> float:
    if denominator:
        return numerator / denominator
    if numerator == 0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator)


def _cbrt(x: float) -> float:
    if math.isnan(x) or math.isinf(x):
        return x
    return math.copysign(abs(x) ** (1.0 / 3.0), x)


def _raise_resource_limits() -> None:
    try:
        import resource
    except ImportError:
        return
    for limit in (resource.RLIMIT_NOFILE, resource.RLIMIT_CORE):
        try:
            _soft, hard = resource.getrlimit(limit)
            resource.setrlimit(limit, (hard, hard))
        except (ValueError, OSError):
            pass


@dataclass
class Config:
    """All settings of a run, with their default values."""

    file_format: str = "GADGET2"
    particle_mass: float = 0.0

    mass_definition: str = "vir"
    mass_definition2: str = "200b"
    mass_definition3: str = "200c"
    mass_definition4: str = "500c"
    mass_definition5: str = "2500c"
    strict_so_masses: int = 0
    min_halo_output_size: int = 20
    force_res: float = 0.003
    force_res_phys_max: float = 0.0

    non_cosmological: float = 0.0
    scale_now: float = 1.0
    h0: float = 0.7
    ol: float = 0.73
    om: float = 0.27
    w0: float = -1.0
    wa: float = 0.0

    gadget_id_bytes: int = 4
    gadget_mass_conversion: float = 1e10
    gadget_length_conversion: float = 1.0
    gadget_skip_non_halo_particles: int = 1
    gadget_halo_particle_type: int = 1
    rescale_particle_mass: int = 0

    tipsy_length_conversion: float = 1.0
    tipsy_velocity_conversion: float = 1.0

    parallel_io: int = 0
    parallel_io_server_address: str = "auto"
    parallel_io_server_port: str = "auto"
    parallel_io_writer_port: int = 32001
    parallel_io_server_interface: str = ""
    parallel_io_catalogs: int = 0
    run_on_success: str = ""
    run_parallel_on_success: str = ""
    load_balance_script: str = ""

    inbase: str = "."
    filename: str = "tests/halo_nfw"
    starting_snap: int = 0
    restart_snap: int = 0
    num_snaps: int = 1
    num_blocks: int = 1
    num_readers: int = 0
    preload_particles: int = 0
    snapshot_names: str = ""
    lightcone_alt_snaps: str = ""
    block_names: str = ""

    outbase: str = "."
    overlap_length: float = 3.0
    num_writers: int = 1
    fork_readers_from_writers: int = 0
    fork_processors_per_machine: int = 1

    output_format: str = "BOTH"
    delete_binary_output_after_finished: int = 0
    full_particle_chunks: int = 0
    output_every_n_particles: int = 1
    unfiltered_halo_output: int = 0
    bgc2_snapnames: str = ""
    weak_lensing_fraction: float = 0.0

    shape_iterations: int = 10
    weighted_shapes: int = 1
    bound_props: int = 1
    bound_out_to_halo_edge: int = 0
    do_merger_tree_only: int = 0
    ignore_particle_ids: int = 0
    exact_ll_calc: int = 0
    trim_overlap: float = 0.0
    round_after_trim: float = 1.0
    lightcone: int = 0
    periodic: int = 1

    lightcone_origin: Vec3 = _ZERO3
    lightcone_alt_origin: Vec3 = _ZERO3

    limit_center: Vec3 = _ZERO3
    limit_radius: float = 0.0

    swap_endianness: int = 0
    gadget_variant: int = 0
    art_variant: int = 0

    fof_fraction: float = 0.7
    fof_linking_length: float = 0.28
    initial_metric_scaling: float = 1.0
    include_host_potential_ratio: float = 0.3
    temporal_halo_finding: int = 1
    min_halo_particles: int = 10
    unbound_threshold: float = 0.5
    alt_nfw_metric: int = 0
    extra_profiling: int = 1

    total_particles: int = 8589934592
    box_size: float = 250.0
    output_levels: int = 0
    dump_particles: Vec3 = _ZERO3

    rockstar_config_filename: str = ""
    avg_particle_spacing: float = 0.0
    single_snap: int = 0

    def setup(self) -> None:
        """Fill in derived settings and check consistency."""
        if not self.num_readers:
            self.num_readers = self.num_blocks

        if not self.particle_mass:
            self.particle_mass = _divide(
                CRITICAL_DENSITY * self.box_size ** 3 * self.om,
                self.total_particles,
            )
        if not self.avg_particle_spacing:
            self.avg_particle_spacing = _cbrt(
                _divide(self.particle_mass, self.om * CRITICAL_DENSITY)
            )

        if self.lightcone or not self.parallel_io:
            self.periodic = 0
            self.temporal_halo_finding = 0

        if self.ignore_particle_ids:
            self.temporal_halo_finding = 0

        if not self.force_res_phys_max:
            self.force_res_phys_max = self.force_res

        _raise_resource_limits()

        if self.num_writers < self.fork_processors_per_machine:
            self.num_writers = self.fork_processors_per_machine

        if self.starting_snap >= self.num_snaps:
            warnings.warn(
                "[Warning] No work will be done unless NUM_SNAPS > "
                "STARTING_SNAP in config file!",
                ConfigWarning,
                stacklevel=2,
            )

        if self.num_readers > self.num_blocks:
            raise ConfigError("NUM_READERS must be <= NUM_BLOCKS in config file.")

        if self.output_format.startswith("ASCII") and self.strict_so_masses:
            warnings.warn(
                "[Warning] STRICT_SO_MASSES requires binary outputs; "
                "setting OUTPUT_FORMAT=BOTH.",
                ConfigWarning,
                stacklevel=2,
            )
            self.output_format = "BOTH"

    def to_text(self) -> str:
        """Render the configuration in the config-file format."""
        lines = []
        for f in fields(self):
            key = _key(f.name)
            value = getattr(self, f.name)
            kind = _FIELD_KINDS[f.name]
            if kind is str:
                lines.append(f'{key} = "{value}"')
            elif kind is float:
                lines.append(f"{key} = {value:g}")
            elif kind is int:
                lines.append(f"{key} = {value}")
            else:
                x, y, z = value
                lines.append(f"{key} = ({x:g}, {y:g}, {z:g})")
        return "\n".join(lines) + "\n"

    def write(self, path=None) -> Path:
        """Write the configuration below OUTBASE; return the written path."""
        target = Path(self.outbase) / (path if path else "rockstar.cfg")
        target.write_text(self.to_text())
        return target


def _kind(f) -> type:
    annotation = f.type if isinstance(f.type, str) else f.type.__name__
    return {"str": str, "float": float, "int": int}.get(annotation, tuple)


_FIELD_KINDS = {f.name: _kind(f) for f in fields(Config)}
_FIELDS_BY_KEY = {_key(f.name): f.name for f in fields(Config)}


def _strip_comment(line: str) -> str:
    quote = None
    for position, ch in enumerate(line):
        if quote:
            if ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == "#":
            return line[:position]
    return line


def _unquote(raw: str) -> str:
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in "\"'":
        return raw[1:-1]
    return raw


def _convert(name: str, key: str, raw: str):
    kind = _FIELD_KINDS[name]
    try:
        if kind is str:
            return raw
        if kind is float:
            return float(raw)
        if kind is int:
            try:
                return int(raw)
            except ValueError:
                return int(float(raw))
        parts = raw.strip().strip("()").replace(",", " ").split()
        if len(parts) != 3:
            raise ConfigError(f"{key} needs three values, got {raw!r}")
        return tuple(float(part) for part in parts)
    except (ValueError, OverflowError) as exc:
        if isinstance(exc, ConfigError):
            raise
        raise ConfigError(f"Invalid value for {key}: {raw!r}") from exc


def _parse_into(config: Config, text: str) -> None:
    for number, line in enumerate(text.splitlines(), start=1):
        content = _strip_comment(line).strip()
        if not content:
            continue
        key, sep, raw = content.partition("=")
        key = key.strip()
        if not sep or not key:
            warnings.warn(
                f"[Warning] Could not parse config line {number}: {line!r}",
                ConfigWarning,
                stacklevel=3,
            )
            continue
        name = _FIELDS_BY_KEY.get(key)
        if name is None:
            warnings.warn(
                f"[Warning] Unknown config option {key}",
                ConfigWarning,
                stacklevel=3,
            )
            continue
        setattr(config, name, _convert(name, key, _unquote(raw)))


def parse_config(text: str) -> Config:
    """Build a configuration from config-file text and derive settings."""
    config = Config()
    _parse_into(config, text)
    config.setup()
    return config


def load_config(path) -> Config:
    """Load a configuration file; an empty path gives the defaults."""
    if not path or not str(path):
        config = Config()
        config.setup()
        return config
    config = parse_config(Path(path).read_text())
    config.rockstar_config_filename = str(path)
    return config