"""Leaf helpers: checksum and byte-order normalisation."""

from .checksum import checksum
from .endian import htole32, pack_u32, pack_f32
