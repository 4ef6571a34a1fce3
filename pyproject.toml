[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "voxgrid"
version = "0.1.0"
description = "Voxel map utilities: SDF voxels, marching cubes meshing, mesh layers, camera frustums and a ray-cast simulation world."
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "voxel",
    "tsdf",
    "esdf",
    "marching-cubes",
    "mesh",
    "mapping",
    "robotics",
    "simulation",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["voxgrid"]

[tool.hatch.build.targets.sdist]
include = [
    "voxgrid",
    "tests",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
