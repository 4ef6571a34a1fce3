# voxgrid

Building blocks for volumetric mapping with signed distance fields, written on
top of NumPy.

## What it offers

- **Voxels** (`voxgrid.voxels`): the dataclasses `TsdfVoxel`, `EsdfVoxel`,
  `OccupancyVoxel` and `IntensityVoxel`, and `Color` with `Color.blend` for a
  weighted average of two colors. The module also has these functions:
  - `merge_voxel_into(source, target)` merges one voxel into another in place.
  - `is_same_voxel` compares two voxels within a tolerance.
  - `is_observed_voxel` tells whether a voxel holds an observation.
  - `get_voxel_sdf`, `set_voxel_sdf` and `set_voxel_weight` read and set a
    voxel's distance and weight.
  - `compute_voxel_error(voxel_gt, voxel_test, mode)` returns a
    `(VoxelEvaluationResult, error)` pair, with the mode taken from
    `VoxelEvaluationMode`.
- **Length-delimited records** (`voxgrid.delimited`): varint-prefixed framing
  for binary streams.
  - `encode_varint32` and `decode_varint32` encode and decode the varints.
  - `write_message_count` and `read_message_count` write and read a count.
  - `write_message` and `read_message` write and read size-prefixed payloads.
  - `write_message` takes bytes or any object with a `SerializeToString`
    method.
  - The read functions take a byte offset and return the value together with
    the offset that follows it. They raise `ValueError` on malformed, empty
    or truncated data.
- **Neighbourhoods** (`voxgrid.neighbor_tools`): `neighbors(index,
  connectivity)` gives the 6-, 18- or 26-connected neighbours of a grid index
  with their distances, faces first. The tables are `OFFSETS` and `DISTANCES`.
- **Marching cubes** (`voxgrid.cube_tables`, `voxgrid.marching_cubes`):
  - `triangle_edges` and `edge_corners` look up the triangle table and the
    edge table.
  - `calculate_vertex_configuration`, `interpolate_vertex` and
    `interpolate_edge_vertices` are the steps of the algorithm.
  - `mesh_cube_triangles` returns the triangles of one cube.
  - `mesh_cube` appends the triangles, with face normals, to a `Mesh` and
    returns the next free vertex index.
  - Cube corners are an `(8, 3)` array with one row per corner.
- **Meshes** (`voxgrid.mesh`, `voxgrid.mesh_utils`, `voxgrid.mesh_layer`):
  - `Mesh` holds vertices, normals, colors and triangle indices. Its methods
    are `resize`, `colorize`, `concatenate` and the `clear_*` family.
  - `create_connected_mesh` welds vertices that lie closer together than a
    threshold and drops degenerate triangles.
  - `MeshLayer` holds one mesh per integer block index. It allocates, finds
    and removes meshes by block index or by coordinates.
  - `MeshLayer.clear_distant_mesh` empties meshes far from a point.
  - `MeshLayer.combined_mesh` and `MeshLayer.connected_mesh` join all blocks
    into one mesh.
- **Geometry and cameras** (`voxgrid.geometry`, `voxgrid.camera_model`):
  - `Rotation` is a unit quaternion. It is built with `from_axis_angle` or
    `from_two_vectors`.
  - `Transformation` is a rotation followed by a translation. It has
    `transform`, `compose`/`*` and `inverse`.
  - `Plane` is built with `Plane.from_points`.
  - `CameraModel` is a view frustum. It is set from a focal length or from
    fields of view, and has a camera or body pose.
  - `CameraModel` answers `is_point_in_view`. It gives its `aabb`, its
    `bounding_lines` and its `far_plane_points`.
- **Simulation** (`voxgrid.simulation_world`):
  - `SimulationWorld` holds `SimulationObject`s and casts one ray per pixel
    of a virtual depth camera.
  - The results come from `pointcloud_from_viewpoint`,
    `pointcloud_from_transform` and their `noisy_*` counterparts. Each
    returns an `(N, 3)` point array and the colors of the hits.
  - The noise comes from a generator with a fixed seed.
  - `SimulationObject` is abstract. Subclass it and implement
    `distance_to_point` and `ray_intersection`.
- **Visualisation filters** (`voxgrid.visualization`):
  - Per-voxel predicates decide what to show for each voxel:
    `tsdf_color`, `tsdf_near_surface_color`, `tsdf_distance_intensity`,
    `tsdf_slice_intensity`, `esdf_distance_intensity`,
    `esdf_slice_intensity`, `esdf_free_intensity`,
    `intensity_voxel_intensity`, `tsdf_occupied`, `occupancy_occupied` and
    others.
  - `collect_points(samples, visualize)` applies a predicate to
    `(voxel, coord)` pairs and keeps the ones that are shown.
  - `adjust_slice_level` and `log_odds_from_probability` are helpers for the
    predicates.

## What it does not do

This package works on single voxels, single cubes and meshes. It has none of
the following:

- a voxel layer or block container;
- TSDF or ESDF integrators that fuse point clouds into a map;
- a full-map mesh integrator;
- map files on disk;
- built-in simulation shapes;
- timing or profiling utilities;
- a command-line program.

Voxel storage and iteration over a map are left to the caller.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
import numpy as np

from voxgrid.marching_cubes import mesh_cube
from voxgrid.mesh import Mesh
from voxgrid.mesh_utils import create_connected_mesh

corners = np.array(
    [[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0],
     [0, 0, 1], [1, 0, 1], [1, 1, 1], [0, 1, 1]],
    dtype=float,
)
sdf = np.array([-0.5, 0.5, 0.5, 0.5, 0.5, 0.5, 0.5, 0.5])

mesh = Mesh()
next_index = mesh_cube(corners, sdf, 0, mesh)   # 3: one triangle was added
connected = create_connected_mesh([mesh])
```

Checking whether a point is in a camera's view:

```python
from voxgrid.camera_model import CameraModel
from voxgrid.geometry import Transformation

camera = CameraModel()
camera.set_intrinsics_from_focal_length((640, 480), 320.0, 0.5, 10.0)
camera.set_camera_pose(Transformation())
camera.is_point_in_view([2.0, 0.0, 0.0])   # True: the camera looks along +x
```