"""
Main entry point for the EstreUI CLI.
"""

from estreui.cli import cli


def main() -> None:
    """Main function for the EstreUI CLI."""
    cli()


if __name__ == "__main__":
    main()
