[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gradmatrix"
version = "0.1.0"
description = "Reverse-mode automatic differentiation on 2-D matrices, with a multilayer perceptron, an MNIST CSV reader, a token embedding and transformer settings"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["autograd", "neural network", "mlp", "backpropagation", "mnist", "matrix", "embedding"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gradmatrix"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
