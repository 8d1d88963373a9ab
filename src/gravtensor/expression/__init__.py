from . import ast
from ._exceptions import (
    IndexAssignmentError,
    IndexMismatchError,
    NonlinearExpressionError,
    RankError,
    RuleError,
    SymbolicComponentError,
    ZeroDenominatorError,
)
from ._parser import parse_scalar, parse_substitution
from .ast import Expression, Kind, Precedence, rendering_equal
from .container import TensorContainer
from .indices import Index, Indices
from .scalar import (
    Numeric,
    Product,
    Scalar,
    Sum,
    Symbols,
    Variable,
    add,
    as_scalar,
    multiply,
    negate,
    subtract,
)
from .substitution import Substitution
from .tensor import (
    UNIT,
    ZERO,
    Delta,
    Epsilon,
    Gamma,
    ScaledTensor,
    Tensor,
    TensorLeaf,
    TensorProduct,
    TensorSum,
    permutation_sign,
    scale,
    tensor_product,
    tensor_sum,
)
