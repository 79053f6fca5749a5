"""Unified command-line interface for the asset scanner.

Usage:
    assetscan scan <payload> [--period YYYY-MM] [--offline]
    assetscan sync [--offline]
    assetscan list [--query TEXT]
    assetscan delete <identity>...
    assetscan clear [--yes]
    assetscan export [--query TEXT] [--output-dir DIR]
    assetscan serve [--host] [--port]
"""
