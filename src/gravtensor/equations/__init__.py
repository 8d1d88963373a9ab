from ..generator import CoefficientKey
from ._exceptions import ComputationError, EquationError
from .coefficient import CoefficientCache, CoefficientEntry, CoefficientState, generate_coefficient
from .equation import Equation
from .system import EquationSystem, Solution
