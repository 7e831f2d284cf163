"""SwitchTube downloader package root.

Public surface kept intentionally small; internal modules may evolve.
"""

__version__ = "1.0.0"

from .config import AppConfig, DownloadOptions  # noqa: E402
from .downloader import Downloader, download  # noqa: E402
from .tokens import TokenManager  # noqa: E402

__all__ = [
    "AppConfig",
    "DownloadOptions",
    "Downloader",
    "TokenManager",
    "download",
    "__version__",
]


def main():
    """Console entry point."""
    import sys

    from .cli import run_cli

    sys.exit(run_cli())
