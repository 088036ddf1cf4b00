"""Project root entry point for the command line interface."""

from res_translator.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
