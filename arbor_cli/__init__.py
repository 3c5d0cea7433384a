"""
Arbor CLI

Thin command-line driver over the arbor.merkle public operations.
"""

from arbor_cli.main import main

__all__ = ["main"]
