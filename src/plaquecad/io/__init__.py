"""Mesh file formats."""

from plaquecad.io.stl import read_stl, stl_bytes, write_stl

__all__ = ['read_stl', 'stl_bytes', 'write_stl']
