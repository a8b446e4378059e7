"""Voxel map building blocks: voxels, marching cubes, mesh layers, cameras and timing."""

__version__ = "0.1.0"

__all__ = [
    "camera_model",
    "marching_cubes",
    "marching_cubes_tables",
    "mesh",
    "mesh_layer",
    "mesh_utils",
    "neighbor_tools",
    "protobuf_utils",
    "timing",
    "visualization",
    "voxel",
]