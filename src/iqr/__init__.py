"""iqr — iterative quality refinement: learn a codebase's conventions, then gate changes on them."""

__version__ = "0.1.0"
