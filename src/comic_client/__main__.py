"""
Main entry point for the Comic Client package.

This module allows the package to be executed directly using:
python -m comic_client [command] [options]
"""

from comic_client.cli.main import app

if __name__ == "__main__":
    app()
