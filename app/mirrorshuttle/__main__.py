"""Allow running mirrorshuttle as ``python -m mirrorshuttle``."""

from mirrorshuttle.cli.main import run

if __name__ == "__main__":
    run()
