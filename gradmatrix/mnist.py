"""Reading MNIST images stored as comma-separated rows."""

from __future__ import annotations

import os
import re
from typing import Union

from .matrix import Matrix

IMAGE_SIZE = 784
TRAIN_IMAGES = 60000
TEST_IMAGES = 10000

_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _leading_float(text: str) -> float:
    """Parse the numeric prefix of ``text``, or 0.0 when there is none."""
    match = _NUMBER.match(text)
    return float(match.group().strip()) if match else 0.0


def read_mnist(path: Union[str, os.PathLike], n_images: int) -> Matrix:
    """Load up to ``n_images`` rows of ``label,pixel,...`` into a matrix.

    The result has ``IMAGE_SIZE + 1`` columns: the pixels scaled to [0, 1]
    followed by the label. Rows that are not present in the file stay zero.
    """
    images = Matrix(n_images, IMAGE_SIZE + 1)
    count = 0
    with open(path, encoding="utf-8", errors="replace") as handle:
        for line in handle:
            if count >= n_images:
                break
            tokens = [token for token in line.split(",") if token]
            if not tokens:
                continue
            label, *pixels = tokens
            images.data[count, IMAGE_SIZE] = _leading_float(label)
            values = [_leading_float(token) / 255.0 for token in pixels[:IMAGE_SIZE]]
            images.data[count, : len(values)] = values
            count += 1
    print(f"Read {count} images from {path} dataset")
    return images