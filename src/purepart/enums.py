"""Enumerations and flags"""
from enum import IntFlag


class BC7Mode(IntFlag):
    """BC7 block encoding modes, as a selectable mode mask"""
    MODE0 = 1 << 0  # 3 subsets, RGB
    MODE1 = 1 << 1  # 2 subsets, RGB
    MODE2 = 1 << 2  # 3 subsets, RGB
    MODE3 = 1 << 3  # 2 subsets, RGB
    MODE4 = 1 << 4  # 1 subset, separate alpha
    MODE5 = 1 << 5  # 1 subset, separate alpha
    MODE6 = 1 << 6  # 1 subset, RGBA
    MODE7 = 1 << 7  # 2 subsets, RGBA
    ALL = 0xFF


TWO_SUBSET_MODES = BC7Mode.MODE1 | BC7Mode.MODE3 | BC7Mode.MODE7
THREE_SUBSET_MODES = BC7Mode.MODE0 | BC7Mode.MODE2
SEPARATE_ALPHA_MODES = BC7Mode.MODE4 | BC7Mode.MODE5
