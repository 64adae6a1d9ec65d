"""Pytest configuration and fixtures."""
import numpy as np
import pytest


@pytest.fixture
def block_image():
    """5x5 single-channel image: 3x3 block of 100 inside a border of 0."""
    image = np.zeros((5, 5), dtype=np.uint8)
    image[1:4, 1:4] = 100
    return image


@pytest.fixture
def block_image_rgb(block_image):
    """RGB version of block_image."""
    return np.stack([block_image] * 3, axis=-1)


@pytest.fixture
def thick_annulus():
    """7x7 mask: 5x5 square with a single-pixel hole at its center."""
    mask = np.zeros((7, 7), dtype=bool)
    mask[1:6, 1:6] = True
    mask[3, 3] = False
    return mask


@pytest.fixture
def thin_annulus():
    """5x5 mask: one-pixel-wide ring around a single-pixel hole."""
    mask = np.zeros((5, 5), dtype=bool)
    mask[1:4, 1:4] = True
    mask[2, 2] = False
    return mask
