"""Voxel types and per-voxel operations: merging, comparison and evaluation."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field

_SAME_VOXEL_TOLERANCE = 1e-10
_MIN_OBSERVED_WEIGHT = 1e-6


def _to_channel(value: float) -> int:
    return max(0, min(255, math.floor(value + 0.5)))


@dataclass
class Color:
    """An RGBA color with 8-bit channels."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0

    @staticmethod
    def blend(first: "Color", first_weight: float, second: "Color", second_weight: float) -> "Color":
        """Weighted average of two colors, rounded per channel."""
        total = first_weight + second_weight
        if total == 0:
            raise ValueError("cannot blend colors with a total weight of zero")
        w1 = first_weight / total
        w2 = second_weight / total
        return Color(
            _to_channel(first.r * w1 + second.r * w2),
            _to_channel(first.g * w1 + second.g * w2),
            _to_channel(first.b * w1 + second.b * w2),
            _to_channel(first.a * w1 + second.a * w2),
        )


@dataclass
class TsdfVoxel:
    """Truncated signed distance voxel."""

    distance: float = 0.0
    weight: float = 0.0
    color: Color = field(default_factory=Color)


@dataclass
class EsdfVoxel:
    """Euclidean signed distance voxel."""

    distance: float = 0.0
    observed: bool = False
    in_queue: bool = False
    fixed: bool = False
    parent: tuple[int, int, int] = (0, 0, 0)


@dataclass
class OccupancyVoxel:
    """Occupancy voxel holding a log-odds probability."""

    probability_log: float = 0.0
    observed: bool = False


@dataclass
class IntensityVoxel:
    """Voxel holding a fused intensity value."""

    intensity: float = 0.0
    weight: float = 0.0


class VoxelEvaluationMode(enum.Enum):
    EVALUATE_ALL_VOXELS = enum.auto()
    IGNORE_ERROR_BEHIND_TEST_SURFACE = enum.auto()
    IGNORE_ERROR_BEHIND_GT_SURFACE = enum.auto()
    IGNORE_ERROR_BEHIND_ALL_SURFACES = enum.auto()


class VoxelEvaluationResult(enum.Enum):
    EVALUATED = enum.auto()
    IGNORED = enum.auto()
    NO_OVERLAP = enum.auto()


_SDF_TYPES = (TsdfVoxel, EsdfVoxel)


def _require_sdf(voxel) -> None:
    if not isinstance(voxel, _SDF_TYPES):
        raise TypeError(f"{type(voxel).__name__} carries no signed distance")


def merge_voxel_into(source, target) -> None:
    """Merge the contents of ``source`` into ``target`` in place."""
    if type(source) is not type(target):
        raise TypeError("can only merge voxels of the same type")
    if isinstance(target, TsdfVoxel):
        combined_weight = source.weight + target.weight
        if combined_weight > 0:
            target.distance = (
                source.distance * source.weight + target.distance * target.weight
            ) / combined_weight
            target.color = Color.blend(source.color, source.weight, target.color, target.weight)
            target.weight = combined_weight
    elif isinstance(target, EsdfVoxel):
        if source.observed and target.observed:
            target.distance = (source.distance + target.distance) / 2.0
        elif source.observed:
            target.distance = source.distance
        target.observed = target.observed or source.observed
    elif isinstance(target, OccupancyVoxel):
        target.probability_log += source.probability_log
        target.observed = target.observed or source.observed
    else:
        raise TypeError(f"merging is not defined for {type(target).__name__}")


def is_same_voxel(voxel_a, voxel_b) -> bool:
    """Whether two voxels hold the same data within a small tolerance."""
    if type(voxel_a) is not type(voxel_b):
        raise TypeError("can only compare voxels of the same type")
    if isinstance(voxel_a, TsdfVoxel):
        return (
            abs(voxel_a.distance - voxel_b.distance) < _SAME_VOXEL_TOLERANCE
            and abs(voxel_a.weight - voxel_b.weight) < _SAME_VOXEL_TOLERANCE
            and voxel_a.color == voxel_b.color
        )
    if isinstance(voxel_a, EsdfVoxel):
        return (
            abs(voxel_a.distance - voxel_b.distance) < _SAME_VOXEL_TOLERANCE
            and voxel_a.observed == voxel_b.observed
            and voxel_a.in_queue == voxel_b.in_queue
            and voxel_a.fixed == voxel_b.fixed
            and tuple(voxel_a.parent) == tuple(voxel_b.parent)
        )
    if isinstance(voxel_a, OccupancyVoxel):
        return (
            abs(voxel_a.probability_log - voxel_b.probability_log) < _SAME_VOXEL_TOLERANCE
            and voxel_a.observed == voxel_b.observed
        )
    raise TypeError(f"comparison is not defined for {type(voxel_a).__name__}")


def is_observed_voxel(voxel) -> bool:
    """Whether a voxel holds an observation."""
    if isinstance(voxel, TsdfVoxel):
        return voxel.weight > _MIN_OBSERVED_WEIGHT
    if isinstance(voxel, EsdfVoxel):
        return voxel.observed
    return False


def compute_voxel_error(voxel_gt, voxel_test, evaluation_mode: VoxelEvaluationMode):
    """Return ``(result, error)`` comparing a test voxel against ground truth."""
    _require_sdf(voxel_gt)
    _require_sdf(voxel_test)
    if type(voxel_gt) is not type(voxel_test):
        raise TypeError("ground truth and test voxels must be of the same type")

    if not is_observed_voxel(voxel_gt) or not is_observed_voxel(voxel_test):
        return VoxelEvaluationResult.NO_OVERLAP, 0.0

    ignore_behind_test = evaluation_mode in (
        VoxelEvaluationMode.IGNORE_ERROR_BEHIND_TEST_SURFACE,
        VoxelEvaluationMode.IGNORE_ERROR_BEHIND_ALL_SURFACES,
    )
    ignore_behind_gt = evaluation_mode in (
        VoxelEvaluationMode.IGNORE_ERROR_BEHIND_GT_SURFACE,
        VoxelEvaluationMode.IGNORE_ERROR_BEHIND_ALL_SURFACES,
    )
    if (ignore_behind_test and voxel_test.distance < 0.0) or (
        ignore_behind_gt and voxel_gt.distance < 0.0
    ):
        return VoxelEvaluationResult.IGNORED, 0.0

    return VoxelEvaluationResult.EVALUATED, voxel_test.distance - voxel_gt.distance


def get_voxel_sdf(voxel) -> float:
    """Signed distance stored in a TSDF or ESDF voxel."""
    _require_sdf(voxel)
    return voxel.distance


def set_voxel_sdf(voxel, sdf: float) -> None:
    """Store a signed distance in a TSDF or ESDF voxel."""
    _require_sdf(voxel)
    voxel.distance = sdf


def set_voxel_weight(voxel, weight: float) -> None:
    """Store a weight; ESDF voxels become observed for any positive weight."""
    if isinstance(voxel, TsdfVoxel):
        voxel.weight = weight
    elif isinstance(voxel, EsdfVoxel):
        voxel.observed = weight > 0.0
    else:
        raise TypeError(f"{type(voxel).__name__} carries no weight")