[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "budsim"
version = "0.1.0"
description = "Triangulated membrane mechanics: edge, area and bending springs, bucket neighbour search, and VTK output"
requires-python = ">=3.10"
dependencies = []
keywords = ["membrane", "mechanics", "simulation", "triangulated mesh", "vtk", "budding"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
budsim = "budsim.cli:main"

[tool.setuptools.packages.find]
include = ["budsim*"]

[tool.pytest.ini_options]
addopts = "-ra"
