from hrpa.cli.main import main

__all__ = ["main"]
