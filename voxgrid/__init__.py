"""Voxel map utilities: SDF voxels, delimited records, marching cubes meshing, mesh layers, camera models, simulation and visualization filters."""

__version__ = "0.1.0"