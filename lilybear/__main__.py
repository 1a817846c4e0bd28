"""
Entry point for running lilybear as a module: python -m lilybear
"""

from lilybear.cli.commands import app

if __name__ == "__main__":
    app()
