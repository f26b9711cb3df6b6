[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "brian"
version = "0.1.0"
description = "Small fully connected neural networks with gradient-descent training, a binary model format and command-line demos"
requires-python = ">=3.10"
dependencies = [
    "pillow",
]
keywords = ["neural network", "machine learning", "backpropagation", "mnist", "gradient descent"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
brian-mnist = "brian.mnist:main"
brian-imgnn = "brian.imgnn:main"
brian-demos = "brian.demos:main"

[tool.hatch.build.targets.wheel]
packages = ["brian"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
