"""Pinhole camera models, essential matrices, bicubic sampling and PLY export."""

__version__ = "0.1.0"

__all__ = ["bicubic", "camera", "essential", "export"]