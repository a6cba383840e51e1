"""
SuperMorse: adaptive Morse code drill trainer.

The ``supermorse.drill`` package holds the progression scheduler and its
collaborators; ``supermorse.config`` holds environment-driven settings.
"""

__version__ = "1.0.0"
