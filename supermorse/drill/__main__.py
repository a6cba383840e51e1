"""
Entry point for running SuperMorse as a module.

Usage:
    python -m supermorse.drill drill
    python -m supermorse.drill status
    python -m supermorse.drill --help
"""
from .drill_cli import main

if __name__ == "__main__":
    main()
