"""Main entry point for price_comparer package."""

from price_comparer.cli.commands import main

if __name__ == '__main__':
    main()
