"""
Iridium SDK Command-Line Interface
==================================

This package provides the command-line tools for the Iridium SDK:

- **iasm**: Iridium assembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["iasm"]
