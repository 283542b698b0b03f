"""Command line interface for the prompt library.

Updates: v0.1.0 - 2026-10-16 - Package the argparse parser, runtime helpers, and command handlers.
"""
