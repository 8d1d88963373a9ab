__all__ = ["homogeneous_system"]

from ..expression import Numeric, Substitution, Tensor, add, multiply
from ..vector import Matrix
from ._exceptions import InvalidSubstitutionError


def homogeneous_system(tensor: Tensor) -> Substitution:
    """Solve `tensor = 0` for its variables.

    Every index combination gives one linear equation in the variables of the tensor. The system is
    brought into reduced row-echelon form with the variables as columns in order of appearance, and
    every nonzero row becomes a rule expressing its pivot variable through the remaining ones.

    Raises:
        InvalidSubstitutionError: If the system forces a nonzero constant to vanish.
        NonlinearExpressionError: If a component is not linear in the variables.
    """
    variables = tensor.variables()

    rows = []
    for assignment in tensor.indices.assignments():
        constant, coefficients = tensor.evaluate(assignment).linear_coefficients()
        rows.append([coefficients.get(variable, 0) for variable in variables] + [constant])

    substitution = Substitution()
    for row in Matrix(rows).row_echelon_form():
        pivot = row.leading_position()
        if pivot is None:
            break
        if pivot == len(variables):
            raise InvalidSubstitutionError(tensor)

        replacement = add(
            *(
                multiply(Numeric(-row[j]), variables[j])
                for j in range(pivot + 1, len(variables))
                if row[j] != 0
            ),
            Numeric(-row[len(variables)]),
        )
        substitution.insert(variables[pivot], replacement)
    return substitution
