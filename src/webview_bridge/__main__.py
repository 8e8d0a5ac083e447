"""Entry point for ``python -m webview_bridge``."""

from .cli import main

if __name__ == "__main__":
    main()
