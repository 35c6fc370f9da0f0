"""pgcmd - locate and run PostgreSQL client tools."""

from pgcmd.__about__ import __version__

__all__ = ["__version__"]
