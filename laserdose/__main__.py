#!/usr/bin/env python3
"""
Convenience entry point for running laserdose directly.

Usage: python -m laserdose [command] [options]
"""

from laserdose.cli.app import app

if __name__ == "__main__":
    app()
