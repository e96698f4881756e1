"""
Entry point for running gox as a module.

Usage: python -m gox [options] [packages]
"""

from gox.cli.parser import main

if __name__ == "__main__":
    main()
