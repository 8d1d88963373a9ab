from __future__ import annotations

__all__ = [
    "Tensor",
    "TensorLeaf",
    "Gamma",
    "Epsilon",
    "Delta",
    "TensorProduct",
    "ScaledTensor",
    "TensorSum",
    "ZERO",
    "UNIT",
    "scale",
    "tensor_sum",
    "tensor_product",
    "permutation_sign",
]

import itertools
from abc import abstractmethod
from collections import Counter
from dataclasses import dataclass, replace
from fractions import Fraction
from math import factorial
from typing import TYPE_CHECKING, Hashable, Iterable, Iterator, Mapping, Sequence

from ._exceptions import IndexAssignmentError, IndexMismatchError, RankError
from .ast import Expression, Kind, Precedence
from .indices import Index, Indices
from .scalar import Numeric, Scalar, Variable, add, as_scalar, multiply, negate

if TYPE_CHECKING:
    from .substitution import Substitution


class Tensor(Expression):
    __slots__ = ()

    # Free indices in order of first appearance
    indices: Indices

    @property
    def is_zero(self) -> bool:
        return False

    @property
    def is_unit(self) -> bool:
        return False

    @abstractmethod
    def evaluate(self, assignment: Mapping[str, int]) -> Scalar:
        """Component at the given values of the free indices.

        Contracted indices are summed over their range.
        """
        raise NotImplementedError()

    @abstractmethod
    def monomials(self) -> list[tuple[Scalar, Tensor]]:
        """Fully expanded form as pairs of coefficient and base.

        Each base is a leaf, a product of leaves, or `UNIT`.
        """
        raise NotImplementedError()

    @abstractmethod
    def variables(self) -> tuple[Variable, ...]:
        raise NotImplementedError()

    @abstractmethod
    def substitute_variables(self, substitution: Substitution) -> Tensor:
        raise NotImplementedError()

    @abstractmethod
    def rename_indices(self, mapping: Mapping[str, str]) -> Tensor:
        """Rename indices simultaneously, so that `{a: b, b: a}` swaps them."""
        raise NotImplementedError()

    @abstractmethod
    def clone(self) -> Tensor:
        raise NotImplementedError()

    def canonical_base(self) -> tuple[int, Tensor]:
        """Sign and canonical form of a base."""
        return 1, self

    def summands(self) -> tuple[Tensor, ...]:
        return (self,)

    def separate_scalefactor(self) -> tuple[Scalar, Tensor]:
        return Numeric(1), self

    def index_combinations(self) -> Iterator[tuple[int, ...]]:
        return self.indices.combinations()

    def __call__(self, *values: int) -> Scalar:
        return self.evaluate(dict(zip(self.indices.names, values)))

    def canonicalize(self) -> Tensor:
        """Bring every base into canonical form.

        Metric indices are sorted, Levi-Civita indices are sorted with the sign of the permutation,
        and the factors of each product are ordered.
        """
        terms = []
        for coefficient, base in self.monomials():
            sign, base = base.canonical_base()
            terms.append(scale(multiply(Numeric(sign), coefficient), base))
        return tensor_sum(*terms)

    def symmetrize(self, names: Sequence[str]) -> Tensor:
        names = tuple(names)
        permutations = list(itertools.permutations(names))
        total = tensor_sum(*(self.rename_indices(dict(zip(names, p))) for p in permutations))
        return scale(Numeric(Fraction(1, len(permutations))), total)

    def antisymmetrize(self, names: Sequence[str]) -> Tensor:
        names = tuple(names)
        terms = [
            scale(Numeric(permutation_sign(p)), self.rename_indices(dict(zip(names, p))))
            for p in itertools.permutations(names)
        ]
        return scale(Numeric(Fraction(1, factorial(len(names)))), tensor_sum(*terms))

    def exchange_symmetrize(self, source: Sequence[str], target: Sequence[str]) -> Tensor:
        exchanged = self.rename_indices(dict(zip(source, target)))
        return scale(Numeric(Fraction(1, 2)), tensor_sum(self, exchanged))

    def simplify(self) -> Tensor:
        """Collect the tensor into groups of bases sharing a coefficient.

        Bases are canonicalized and merged, bases that are linear combinations of the others are
        rewritten in terms of them, and bases with identical coefficients are grouped. Larger groups
        come first; groups of equal size keep their order of appearance.
        """
        merged: dict[Tensor, Scalar] = {}
        for coefficient, base in self.monomials():
            sign, base = base.canonical_base()
            if sign == 0:
                continue
            coefficient = multiply(Numeric(sign), coefficient).expand()
            merged[base] = add(merged[base], coefficient) if base in merged else coefficient

        merged = _rewrite_dependent_bases(merged)

        groups: dict[Hashable, tuple[Scalar, list[Tensor]]] = {}
        for base, coefficient in merged.items():
            if coefficient.is_zero:
                continue
            key = coefficient.key()
            if key not in groups:
                groups[key] = (coefficient, [])
            groups[key][1].append(base)

        ordered = sorted(groups.values(), key=lambda group: -len(group[1]))
        return tensor_sum(*(scale(coefficient, _join_sum(bases)) for coefficient, bases in ordered))

    def collect_by_variables(self) -> Tensor:
        """Group the expanded tensor by the variable monomials of its coefficients.

        Bases are merged but not canonicalized, so the index structure of the result matches the
        input.
        """
        merged: dict[Tensor, Scalar] = {}
        for coefficient, base in self.monomials():
            coefficient = coefficient.expand()
            merged[base] = add(merged[base], coefficient).expand() if base in merged else coefficient

        groups: dict[Hashable, tuple[Scalar | None, list[Tensor]]] = {}
        for base, coefficient in merged.items():
            if coefficient.is_zero:
                continue
            for term in coefficient.addends():
                value, monomial = term.split_coefficient()
                key = None if monomial is None else monomial.key()
                if key not in groups:
                    groups[key] = (monomial, [])
                groups[key][1].append(scale(Numeric(value), base))

        terms = []
        for monomial, scaled in groups.values():
            if monomial is None:
                terms.extend(scaled)
            elif len(scaled) == 1:
                terms.append(scale(monomial, scaled[0]))
            else:
                terms.append(scale(monomial, TensorSum(tuple(scaled))))
        return tensor_sum(*terms)

    def redefine_variables(self, prefix: str = "e") -> Tensor:
        """Replace the coefficient of every summand by a fresh variable.

        Summands with equal coefficients share the new variable. The variables are named
        `{prefix}_1`, `{prefix}_2`, ... in order of appearance. Purely numeric summands are kept.
        """
        replacements: dict[Hashable, Variable] = {}
        terms = []
        for term in self.summands():
            scalar, tensor = term.separate_scalefactor()
            if len(scalar.variables()) == 0:
                terms.append(term)
                continue
            key = scalar.key()
            if key not in replacements:
                replacements[key] = Variable(f"{prefix}_{len(replacements) + 1}")
            terms.append(scale(replacements[key], tensor))
        return tensor_sum(*terms)

    def __add__(self, other):
        if not isinstance(other, Tensor):
            return NotImplemented
        return tensor_sum(self, other)

    def __sub__(self, other):
        if not isinstance(other, Tensor):
            return NotImplemented
        return tensor_sum(self, scale(Numeric(-1), other))

    def __neg__(self):
        return scale(Numeric(-1), self)

    def __mul__(self, other):
        if isinstance(other, Tensor):
            return tensor_product(self, other)
        scalar = as_scalar(other)
        return NotImplemented if scalar is None else scale(scalar, self)

    def __rmul__(self, other):
        scalar = as_scalar(other)
        return NotImplemented if scalar is None else scale(scalar, self)


def _as_indices(value: Indices | Iterable[Index | str]) -> Indices:
    if isinstance(value, Indices):
        return value
    return Indices(index if isinstance(index, Index) else Index(index) for index in value)


def permutation_sign(sequence: Sequence) -> int:
    """Sign of the permutation that sorts the sequence, or 0 if any element repeats."""
    if len(set(sequence)) != len(sequence):
        return 0
    inversions = sum(
        1 for i, j in itertools.combinations(range(len(sequence)), 2) if sequence[i] > sequence[j]
    )
    return -1 if inversions % 2 else 1


@dataclass(frozen=True, slots=True)
class TensorLeaf(Tensor):
    """Leaf tensor; a name given to two of its slots is contracted, as in a product."""

    labels: Indices

    kind = Kind.tensor_leaf
    precedence = Precedence.atom
    printed_text = ""
    rank = None
    sort_order = 0

    def __post_init__(self):
        labels = _as_indices(self.labels)
        object.__setattr__(self, "labels", labels)
        if self.rank is not None and len(labels) != self.rank:
            raise RankError(type(self).__name__, self.rank, len(labels))
        if any(count > 2 for count in Counter(labels.names).values()):
            raise IndexMismatchError(tuple(dict.fromkeys(labels.names)), labels.names)

    @property
    def indices(self) -> Indices:
        counts = Counter(self.labels.names)
        return Indices(index for index in self.labels if counts[index.name] == 1)

    @property
    def contracted(self) -> Indices:
        counts = Counter(self.labels.names)
        first = {}
        for index in self.labels:
            if counts[index.name] == 2:
                first.setdefault(index.name, index)
        return Indices(first.values())

    @abstractmethod
    def component(self, values: tuple[int, ...]) -> int:
        """Component at zero-based values of the slots."""
        raise NotImplementedError()

    def _component_at(self, assignment) -> int:
        values = []
        for index in self.labels:
            value = assignment.get(index.name)
            if value is None:
                raise IndexAssignmentError(index.name, None)
            if value not in index.range:
                raise IndexAssignmentError(index.name, value)
            values.append(value - index.lower)
        return self.component(tuple(values))

    def evaluate(self, assignment):
        # A surrounding product may already have fixed the contracted names
        contracted = Indices(index for index in self.contracted if index.name not in assignment)
        if len(contracted) == 0:
            return Numeric(self._component_at(assignment))
        return Numeric(
            sum(self._component_at({**assignment, **inner}) for inner in contracted.assignments())
        )

    def monomials(self):
        return [(Numeric(1), self)]

    def variables(self):
        return ()

    def substitute_variables(self, substitution):
        return self

    def rename_indices(self, mapping):
        return replace(self, labels=self.labels.rename(mapping))

    def clone(self):
        return replace(self, labels=Indices(self.labels))

    def deparse(self):
        return f"{self.printed_text}{self.labels.deparse()}"


@dataclass(frozen=True, slots=True)
class Gamma(TensorLeaf):
    """Spatial metric."""

    printed_text = "\\gamma"
    rank = 2
    sort_order = 1

    def component(self, values):
        return 1 if values[0] == values[1] else 0

    def canonical_base(self):
        return 1, replace(self, labels=Indices(sorted(self.labels, key=lambda index: index.name)))


@dataclass(frozen=True, slots=True)
class Delta(TensorLeaf):
    """Kronecker delta with its first index raised."""

    printed_text = "\\delta"
    rank = 2
    sort_order = 2

    def __post_init__(self):
        super(Delta, self).__post_init__()
        first, second = self.labels
        if not first.contravariant or second.contravariant:
            labels = Indices((replace(first, contravariant=True), replace(second, contravariant=False)))
            object.__setattr__(self, "labels", labels)

    def component(self, values):
        return 1 if values[0] == values[1] else 0


@dataclass(frozen=True, slots=True)
class Epsilon(TensorLeaf):
    """Levi-Civita symbol; its components are relative to the start of each index range."""

    printed_text = "\\epsilon"

    def __post_init__(self):
        super(Epsilon, self).__post_init__()
        for index in self.labels:
            if len(index.range) != len(self.labels):
                raise RankError(type(self).__name__, len(index.range), len(self.labels))

    def component(self, values):
        if sorted(values) != list(range(len(values))):
            return 0
        return permutation_sign(values)

    def canonical_base(self):
        sign = permutation_sign(self.labels.names)
        if sign == 0:
            return 0, self
        return sign, replace(self, labels=Indices(sorted(self.labels, key=lambda index: index.name)))


def _leaf_order(leaf: Tensor):
    return (getattr(leaf, "sort_order", 3), _slots(leaf).names)


def _slots(tensor: Tensor) -> Indices:
    return tensor.labels if isinstance(tensor, TensorLeaf) else tensor.indices


def _join_product(bases: Iterable[Tensor]) -> Tensor:
    factors = []
    for base in bases:
        factors.extend(base.factors if isinstance(base, TensorProduct) else (base,))
    return factors[0] if len(factors) == 1 else TensorProduct(tuple(factors))


def _join_sum(bases: Sequence[Tensor]) -> Tensor:
    return bases[0] if len(bases) == 1 else TensorSum(tuple(bases))


@dataclass(frozen=True, slots=True)
class TensorProduct(Tensor):
    """Juxtaposed tensors; an index named twice is contracted. The empty product is `UNIT`."""

    factors: tuple[Tensor, ...]

    kind = Kind.tensor_product
    precedence = Precedence.product

    def __post_init__(self):
        names = [index.name for factor in self.factors for index in _slots(factor)]
        if any(count > 2 for count in Counter(names).values()):
            raise IndexMismatchError(tuple(dict.fromkeys(names)), tuple(names))

    @property
    def is_unit(self) -> bool:
        return len(self.factors) == 0

    def _all_indices(self) -> list[Index]:
        return [index for factor in self.factors for index in _slots(factor)]

    @property
    def indices(self) -> Indices:
        all_indices = self._all_indices()
        counts = Counter(index.name for index in all_indices)
        return Indices(index for index in all_indices if counts[index.name] == 1)

    @property
    def contracted(self) -> Indices:
        all_indices = self._all_indices()
        counts = Counter(index.name for index in all_indices)
        first = {}
        for index in all_indices:
            if counts[index.name] == 2:
                first.setdefault(index.name, index)
        return Indices(first.values())

    def evaluate(self, assignment):
        contracted = self.contracted
        if len(contracted) == 0:
            return multiply(*(factor.evaluate(assignment) for factor in self.factors))

        terms = []
        for inner in contracted.assignments():
            inner = {**assignment, **inner}
            terms.append(multiply(*(factor.evaluate(inner) for factor in self.factors)))
        return add(*terms)

    def monomials(self):
        result = []
        for combination in itertools.product(*(factor.monomials() for factor in self.factors)):
            coefficient = multiply(*(c for c, _ in combination))
            bases = [base for _, base in combination if not base.is_unit]
            result.append((coefficient, _join_product(bases) if bases else UNIT))
        return result

    def canonical_base(self):
        sign = 1
        leaves = []
        for factor in self.factors:
            factor_sign, leaf = factor.canonical_base()
            sign *= factor_sign
            leaves.append(leaf)
        if sign == 0:
            return 0, self
        return sign, TensorProduct(tuple(sorted(leaves, key=_leaf_order)))

    def variables(self):
        return tuple(dict.fromkeys(v for factor in self.factors for v in factor.variables()))

    def substitute_variables(self, substitution):
        return tensor_product(*(factor.substitute_variables(substitution) for factor in self.factors))

    def rename_indices(self, mapping):
        return TensorProduct(tuple(factor.rename_indices(mapping) for factor in self.factors))

    def clone(self):
        return TensorProduct(tuple(factor.clone() for factor in self.factors))

    def deparse(self):
        if self.is_unit:
            return "1"
        return "".join(self.deparse_child(factor) for factor in self.factors)


UNIT = TensorProduct(())


@dataclass(frozen=True, slots=True)
class ScaledTensor(Tensor):
    scalar: Scalar
    tensor: Tensor

    kind = Kind.scaled_tensor

    @property
    def precedence(self):
        return self.scalar.precedence if self.tensor.is_unit else Precedence.product

    @property
    def indices(self):
        return self.tensor.indices

    def evaluate(self, assignment):
        return multiply(self.scalar, self.tensor.evaluate(assignment))

    def monomials(self):
        return [(multiply(self.scalar, c), base) for c, base in self.tensor.monomials()]

    def separate_scalefactor(self):
        return self.scalar, self.tensor

    def variables(self):
        return tuple(dict.fromkeys(self.scalar.variables() + self.tensor.variables()))

    def substitute_variables(self, substitution):
        return scale(substitution.apply(self.scalar), self.tensor.substitute_variables(substitution))

    def rename_indices(self, mapping):
        return ScaledTensor(self.scalar, self.tensor.rename_indices(mapping))

    def clone(self):
        return ScaledTensor(self.scalar.clone(), self.tensor.clone())

    def deparse(self):
        if self.tensor.is_unit:
            return self.scalar.deparse()

        tensor_text = self.deparse_child(self.tensor)
        value, rest = self.scalar.split_coefficient()
        if rest is None:
            if value == -1:
                return f"-{tensor_text}"
            else:
                return f"{value} * {tensor_text}"
        else:
            return f"{self.deparse_child(self.scalar)} * {tensor_text}"


@dataclass(frozen=True, slots=True)
class TensorSum(Tensor):
    """Sum of tensors with the same free indices. The empty sum is `ZERO`."""

    terms: tuple[Tensor, ...]

    kind = Kind.tensor_sum
    precedence = Precedence.sum

    def __post_init__(self):
        if len(self.terms) > 1:
            expected = self.terms[0].indices.names
            for term in self.terms[1:]:
                actual = term.indices.names
                if sorted(actual) != sorted(expected):
                    raise IndexMismatchError(expected, actual)

    @property
    def is_zero(self) -> bool:
        return len(self.terms) == 0

    @property
    def indices(self):
        return self.terms[0].indices if self.terms else Indices()

    def evaluate(self, assignment):
        return add(*(term.evaluate(assignment) for term in self.terms))

    def monomials(self):
        return [monomial for term in self.terms for monomial in term.monomials()]

    def summands(self):
        return self.terms

    def variables(self):
        return tuple(dict.fromkeys(v for term in self.terms for v in term.variables()))

    def substitute_variables(self, substitution):
        return tensor_sum(*(term.substitute_variables(substitution) for term in self.terms))

    def rename_indices(self, mapping):
        return TensorSum(tuple(term.rename_indices(mapping) for term in self.terms))

    def clone(self):
        return TensorSum(tuple(term.clone() for term in self.terms))

    def deparse(self):
        if self.is_zero:
            return "0"

        parts = []
        for i, term in enumerate(self.terms):
            scalar, base = term.separate_scalefactor()
            value, _ = scalar.split_coefficient()
            if value < 0:
                positive = scale(negate(scalar), base)
                text = positive.deparse()
                if positive.precedence <= self.precedence:
                    text = f"({text})"
                parts.append(f"-{text}" if i == 0 else f" - {text}")
            else:
                text = self.deparse_child(term)
                parts.append(text if i == 0 else f" + {text}")
        return "".join(parts)


ZERO = TensorSum(())


def scale(scalar: Scalar | int | Fraction, tensor: Tensor) -> Tensor:
    scalar = as_scalar(scalar)
    if scalar.is_zero or tensor.is_zero:
        return ZERO
    elif scalar == Numeric(1):
        return tensor
    elif isinstance(tensor, ScaledTensor):
        return scale(multiply(scalar, tensor.scalar), tensor.tensor)
    else:
        return ScaledTensor(scalar, tensor)


def tensor_sum(*terms: Tensor) -> Tensor:
    flat = []
    for term in terms:
        flat.extend(term.terms if isinstance(term, TensorSum) else (term,))
    return flat[0] if len(flat) == 1 else TensorSum(tuple(flat))


def tensor_product(*factors: Tensor) -> Tensor:
    scalars = []
    bases = []
    for factor in factors:
        scalar, factor = factor.separate_scalefactor()
        if factor.is_zero:
            return ZERO
        scalars.append(scalar)
        if not factor.is_unit:
            bases.append(factor)
    return scale(multiply(*scalars), _join_product(bases) if bases else UNIT)


def _rewrite_dependent_bases(merged: dict[Tensor, Scalar]) -> dict[Tensor, Scalar]:
    from ..generator.basis_selector import linear_dependencies

    bases = [base for base, coefficient in merged.items() if not coefficient.is_zero]
    if len(bases) < 2:
        return merged

    dependencies = linear_dependencies(bases)
    if len(dependencies) == 0:
        return merged

    result = {base: merged[base] for i, base in enumerate(bases) if i not in dependencies}
    for i, expansion in dependencies.items():
        coefficient = merged[bases[i]]
        for j, factor in expansion:
            contribution = multiply(Numeric(factor), coefficient)
            result[bases[j]] = add(result[bases[j]], contribution).expand()
    return result
