"""
Entry point for running telebox as a module: python -m telebox
"""

from telebox.cli.commands import app

if __name__ == "__main__":
    app()
