#!/usr/bin/env python3
"""
Convenience shim to run Arrmeta from a source checkout.
Usage: python arrmeta.py [--stats|--list [SEARCH]|--help|--config PATH]
"""

from arrmeta.cli import main


if __name__ == "__main__":
    main()
