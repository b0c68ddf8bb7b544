#!/usr/bin/env python3
"""
Unified entry point for the Jatsi front ends.

Usage:
    python jatsi.py                                  # Default: terminal (Textual)
    python jatsi.py --ui tui --names Ann Bob         # Hot-seat game for two
    python jatsi.py --ui web --port 8080             # Leader relay on custom port

Individual entry points (tui.py, web.py) still work independently.
"""
import argparse
import sys


def main(argv=None):
    # Pre-parse just the --ui flag, pass everything else through
    parser = argparse.ArgumentParser(
        description="Jatsi — play in the terminal or run a websocket leader",
        add_help=False,
    )
    parser.add_argument("--ui", choices=["tui", "web"], default="tui",
                        help="Interface: tui (terminal, default) or web (websocket relay)")
    args, remaining = parser.parse_known_args(sys.argv[1:] if argv is None else argv)

    if args.ui == "tui":
        from tui import main as run_tui
        run_tui(remaining)

    elif args.ui == "web":
        from web import main as run_web
        run_web(remaining)


if __name__ == "__main__":
    main()
