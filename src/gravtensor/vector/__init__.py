from ._exceptions import IncompatibleDimensionsError, ShapeError
from .matrix import Matrix
from .vector import Vector
