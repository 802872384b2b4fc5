"""
CLI entry point for USB Viewer.

Allows running with: python -m usb_viewer
"""

import os


def main():
    """Main entry point for the USB Viewer CLI."""
    from .config_manager import get_config_manager
    from .main import run_server

    config = get_config_manager().config

    port = int(os.environ.get("USB_VIEWER_PORT", config.port))
    host = os.environ.get("USB_VIEWER_HOST", config.host)
    open_browser = os.environ.get("USB_VIEWER_OPEN_BROWSER", "1" if config.auto_open_browser else "0").lower() not in ("0", "false", "no")

    run_server(host=host, port=port, open_browser=open_browser)


if __name__ == "__main__":
    main()
