"""Run tome with ``python -m tome``."""
from tome.cli.main import cli


def main() -> None:
    """Console entry point for ``tome``; click sets the exit status."""
    cli(prog_name="tome")


if __name__ == "__main__":
    main()
