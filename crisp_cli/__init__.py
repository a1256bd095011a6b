"""
Crisp CLI - Three-layer client for the Crisp plugin API.

Layers:
- core: Raw types and HTTP client
- sdk: High-level CrispClient with one method per endpoint
- cli: Command-line interface
"""

from crisp_cli.sdk import CrispClient

__version__ = "0.1.0"
__all__ = ["CrispClient"]
