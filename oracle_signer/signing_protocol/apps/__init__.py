"""Built-in computation apps."""

from .echo import EchoApp
from .price import PriceApp

__all__ = ["EchoApp", "PriceApp"]
