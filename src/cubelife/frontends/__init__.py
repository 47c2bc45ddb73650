"""Frontend interfaces for cube Life."""

from .cli import CLICubeLife

__all__ = ["CLICubeLife"]
