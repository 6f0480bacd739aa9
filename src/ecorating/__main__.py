"""
EcoRating CLI Entry Point

Allows running the package as a module: python -m ecorating
"""

from ecorating.cli import main

if __name__ == "__main__":
    main()
