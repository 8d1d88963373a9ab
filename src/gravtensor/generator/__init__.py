from ._exceptions import InvalidSubstitutionError
from .base_tensor import arbitrary, candidates
from .basis_selector import component_matrix, component_vector, linear_dependencies, select_basis
from .coefficient import CoefficientKey, coefficient, coefficient_blocks
from .homogeneous import homogeneous_system
