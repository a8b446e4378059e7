# voxmap

Building blocks for volumetric maps made of voxels: signed-distance voxels and
their merging and evaluation, surface extraction with marching cubes on single
cubes, block-wise mesh storage with combined and connected mesh export, a
camera frustum model, point-cloud filters for visualisation, varint-framed
message streams and a small timing registry.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## What is inside

| Module | Purpose |
| --- | --- |
| `voxmap.voxel` | `TsdfVoxel`, `EsdfVoxel`, `OccupancyVoxel`, `IntensityVoxel` and `Color`; `blend_colors`, `merge_voxel_into`, `is_same_voxel`, `is_observed_voxel`, `get_voxel_sdf`, `set_voxel_sdf`, `set_voxel_weight`, and `compute_voxel_error` with `VoxelEvaluationMode` and `VoxelEvaluationResult`. |
| `voxmap.timing` | `Timing`, a registry of tagged timers with sample count, total, mean, variance, min, max and rate (`hz`); `Timer`, usable as a context manager, records into a given `Timing` or a shared default one. `Timing.report()` renders a table sorted by tag; `seconds_to_time_string` formats seconds. |
| `voxmap.neighbor_tools` | `neighbors(index, connectivity)` yields the 6-, 18- or 26-connected neighbours of a voxel index with their distances in voxels; `OFFSETS` and `DISTANCES` hold the tables. |
| `voxmap.protobuf_utils` | Size-prefixed message framing with base-128 varints: `encode_varint`, `decode_varint`, `read_message_count`, `write_message_count`, `read_message`, `write_message`. Messages are any objects with `SerializeToString` and `ParseFromString`. |
| `voxmap.mesh` | `Mesh`: vertices, normals, colours and triangle indices of one block, with `resize`, `colorize`, `concatenate` and the `clear*` methods. |
| `voxmap.mesh_utils` | `create_connected_mesh` merges vertices closer than a threshold, averages their normals and drops degenerate triangles. |
| `voxmap.marching_cubes_tables` | The marching cubes lookup tables, `TRIANGLE_TABLE` and `EDGE_INDEX_PAIRS`, read through `triangle_edges` and `edge_corners`. |
| `voxmap.marching_cubes` | Surface extraction on one cube of eight samples: `vertex_configuration`, `interpolate_vertex`, `interpolate_edge_vertices`, `mesh_cube_triangles`, `mesh_cube`. |
| `voxmap.mesh_layer` | `MeshLayer`: one `Mesh` per block index, with allocation, removal, distance-based clearing, `combined_mesh` and `connected_mesh`. |
| `voxmap.camera_model` | `Pose` (rotation matrix and translation), `Plane` and `CameraModel` for frustum bounding planes, bounding boxes, view tests and frustum edges. |
| `voxmap.visualization` | Per-voxel rules that return a colour, an intensity or a flag (or `None` when a voxel is not drawn), `adjust_slice_level`, and `build_pointcloud` to apply a rule to `(voxel, coordinate)` pairs. |

## Examples

Which corners of a cube lie inside the surface decides the marching cubes
configuration, and `mesh_cube` appends the resulting triangles to a mesh:

```python
from voxmap.marching_cubes import mesh_cube, vertex_configuration
from voxmap.mesh import Mesh

corners = [(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0),
           (0, 0, 1), (1, 0, 1), (1, 1, 1), (0, 1, 1)]
sdf = [-1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0]

vertex_configuration(sdf)  # -> 1
mesh = Mesh()
mesh_cube(corners, sdf, mesh)  # -> 1 triangle; mesh now has 3 vertices
```

Meshes are stored per block; a point maps to the block that contains it:

```python
from voxmap.mesh_layer import MeshLayer

layer = MeshLayer(1.0)
layer.block_index_from_coordinates((1.5, -0.5, 0.2))  # -> (1, -1, 0)
block = layer.allocate_mesh((1, -1, 0))  # created empty, origin at (1, -1, 0)
```

Messages on disk are prefixed by their size as a varint:

```python
from voxmap.protobuf_utils import encode_varint

encode_varint(300)  # -> b"\xac\x02"
```

Timers record into a registry:

```python
from voxmap.timing import Timer, Timing, seconds_to_time_string

timing = Timing()
with Timer("integrate", timing=timing):
    ...
timing.num_samples("integrate")  # -> 1
seconds_to_time_string(1.5)      # -> "01.500000"
```

Merging two observations of the same TSDF voxel averages their distances
by weight and adds the weights:

```python
from voxmap.voxel import TsdfVoxel, merge_voxel_into

a = TsdfVoxel(distance=0.2, weight=1.0)
b = TsdfVoxel(distance=0.4, weight=1.0)
merge_voxel_into(a, b)
# b.distance is now about 0.3 and b.weight 2.0
```

## What it does not do

voxmap works on single voxels, single cubes and mesh blocks. It has no
voxel block grid or layer type for TSDF or ESDF voxels, no integrators that
fuse depth measurements or compute distance fields, no mesh generation over a
whole voxel map (only `mesh_cube` per cube), and no saving or loading of maps
beyond the message framing in `voxmap.protobuf_utils`. It has no command-line
tool and no server; the visualisation rules return points and values but do
not draw or publish them.