"""Module entrypoint for `python -m surfacectl`."""

from surfacectl.cli import run

if __name__ == "__main__":
    raise SystemExit(run())
