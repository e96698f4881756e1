"""
Go toolchain integration.
"""

from gox.toolchain.go import GoToolchain

__all__ = ["GoToolchain"]
