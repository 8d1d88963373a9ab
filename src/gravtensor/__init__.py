from .equations import (
    CoefficientCache,
    CoefficientKey,
    ComputationError,
    Equation,
    EquationError,
    EquationSystem,
    Solution,
)
from .expression import (
    Delta,
    Epsilon,
    Gamma,
    Indices,
    Numeric,
    Substitution,
    Symbols,
    Tensor,
    Variable,
    parse_scalar,
    parse_substitution,
)
from .generator import arbitrary, coefficient, homogeneous_system, select_basis
from .language import parse_equation, parse_equations
from .vector import Matrix, Vector
