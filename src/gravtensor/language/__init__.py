from . import ast
from ._exceptions import LineError
from ._parser import parse_equation, parse_equations
