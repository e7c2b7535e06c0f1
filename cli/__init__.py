"""Unified command-line interface for tillroll.

Usage:
    tillroll parse <image_url> [<image_url>...]
    tillroll parse <image_url> --store "Tesco" --total 12.40
    tillroll parse <image_url> --record
    tillroll serve [--port]
"""
