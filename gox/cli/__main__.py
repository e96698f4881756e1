"""
Entry point for running the gox CLI as a module.

Usage: python -m gox.cli [options] [packages]
"""

from .parser import main

if __name__ == "__main__":
    main()
