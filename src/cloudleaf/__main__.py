"""Main entry point for the cloudleaf package."""

from cloudleaf.cli import main


if __name__ == "__main__":
    main()
