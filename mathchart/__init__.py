"""mathchart: analysis engine behind the math chart tools."""

__version__ = "1.0.0"
