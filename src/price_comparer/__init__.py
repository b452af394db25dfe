"""Sweden/Denmark grocery price comparison."""

__version__ = '1.0.0'
