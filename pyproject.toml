[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "voxmap"
version = "0.1.0"
description = "Voxel map building blocks: TSDF/ESDF voxels, marching cubes meshing, mesh layers, camera frusta and timing utilities."
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
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
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
packages = ["voxmap"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
