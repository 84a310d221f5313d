"""reqtrace-cli: Command-line interface for reqtrace.

Commands:
- reqtrace run: Execute the suite and export reports
- reqtrace validate: Check a suite configuration
- reqtrace catalog: List requirements and the modules covering them
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
