"""
gox - parallel cross-compilation for Go packages.

Selects the GOOS/GOARCH platforms to build from OS, Arch and OS/Arch filters,
then runs ``go build`` once per package and platform with bounded
parallelism.
"""

__version__ = "0.1.0"
