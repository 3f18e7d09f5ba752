[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "camgeom"
version = "0.1.0"
description = "Pinhole camera models, essential matrix decomposition, bicubic sampling and PLY point-cloud export"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "computer-vision",
    "pinhole-camera",
    "essential-matrix",
    "epipolar-geometry",
    "bicubic-interpolation",
    "ply",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Image Processing",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["camgeom"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
