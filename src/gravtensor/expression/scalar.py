from __future__ import annotations

__all__ = [
    "Scalar",
    "Numeric",
    "Variable",
    "Sum",
    "Product",
    "Symbols",
    "as_scalar",
    "add",
    "multiply",
    "negate",
    "subtract",
]

import itertools
import threading
from abc import abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Hashable, Iterable, Iterator

from ._exceptions import NonlinearExpressionError
from .ast import Expression, Kind, Precedence

_variable_ids = itertools.count(1)


class Scalar(Expression):
    __slots__ = ()

    @property
    def is_numeric(self) -> bool:
        return False

    @property
    def is_zero(self) -> bool:
        return False

    @abstractmethod
    def key(self) -> Hashable:
        """Structural identity that ignores the order of terms and factors."""
        raise NotImplementedError()

    @abstractmethod
    def variables(self) -> tuple[Variable, ...]:
        """Distinct variables in order of first appearance."""
        raise NotImplementedError()

    @abstractmethod
    def substitute(self, variable: Variable, replacement: Scalar) -> Scalar:
        raise NotImplementedError()

    @abstractmethod
    def expand(self) -> Scalar:
        """Distribute every product over its sums, giving a sum of monomials."""
        raise NotImplementedError()

    @abstractmethod
    def clone(self) -> Scalar:
        raise NotImplementedError()

    def split_coefficient(self) -> tuple[Fraction, Scalar | None]:
        """Separate the numeric factor from the rest.

        Returns:
            The numeric coefficient and the remaining non-numeric part, which is `None` when the
            scalar is a plain number.
        """
        return Fraction(1), self

    def addends(self) -> tuple[Scalar, ...]:
        return (self,)

    def linear_coefficients(self) -> tuple[Fraction, dict[Variable, Fraction]]:
        """Coefficients of an expression linear in its variables.

        Returns:
            The constant part and a mapping from each variable to its coefficient, in order of
            first appearance in the expanded expression.

        Raises:
            NonlinearExpressionError: If a monomial contains anything other than one variable.
        """
        constant = Fraction(0)
        coefficients: dict[Variable, Fraction] = {}
        for term in self.expand().addends():
            value, rest = term.split_coefficient()
            if rest is None:
                constant += value
            elif isinstance(rest, Variable):
                coefficients[rest] = coefficients.get(rest, Fraction(0)) + value
            else:
                raise NonlinearExpressionError(self)
        return constant, coefficients

    def __add__(self, other):
        other = as_scalar(other)
        return NotImplemented if other is None else add(self, other)

    def __radd__(self, other):
        other = as_scalar(other)
        return NotImplemented if other is None else add(other, self)

    def __sub__(self, other):
        other = as_scalar(other)
        return NotImplemented if other is None else subtract(self, other)

    def __rsub__(self, other):
        other = as_scalar(other)
        return NotImplemented if other is None else subtract(other, self)

    def __mul__(self, other):
        other = as_scalar(other)
        return NotImplemented if other is None else multiply(self, other)

    def __rmul__(self, other):
        other = as_scalar(other)
        return NotImplemented if other is None else multiply(other, self)

    def __truediv__(self, other):
        if isinstance(other, Numeric):
            other = other.value
        if not isinstance(other, (int, Fraction)):
            return NotImplemented
        return multiply(Numeric(1 / Fraction(other)), self)

    def __neg__(self):
        return negate(self)


@dataclass(frozen=True, slots=True)
class Numeric(Scalar):
    value: Fraction

    kind = Kind.numeric
    precedence = Precedence.atom

    def __post_init__(self):
        object.__setattr__(self, "value", Fraction(self.value))

    @property
    def is_numeric(self) -> bool:
        return True

    @property
    def is_zero(self) -> bool:
        return self.value == 0

    def key(self):
        return ("numeric", self.value)

    def variables(self):
        return ()

    def substitute(self, variable, replacement):
        return self

    def expand(self):
        return self

    def clone(self):
        return Numeric(self.value)

    def split_coefficient(self):
        return self.value, None

    def deparse(self):
        return str(self.value)


@dataclass(frozen=True, slots=True, eq=False)
class Variable(Scalar):
    """Symbolic unknown.

    Two variables are the same only if they have the same `id`, which is drawn from a process-wide
    counter, so distinct variables may share a name.
    """

    name: str
    printed_text: str | None = None
    id: int = field(default_factory=lambda: next(_variable_ids))

    kind = Kind.variable
    precedence = Precedence.atom

    def __eq__(self, other):
        if isinstance(other, Variable):
            return self.id == other.id
        return NotImplemented

    def __hash__(self):
        return hash(("variable", self.id))

    def key(self):
        return ("variable", self.id)

    def variables(self):
        return (self,)

    def substitute(self, variable, replacement):
        return replacement if self == variable else self

    def expand(self):
        return self

    def clone(self):
        return self

    def deparse(self):
        return self.name if self.printed_text is None else self.printed_text


@dataclass(frozen=True, slots=True)
class Sum(Scalar):
    terms: tuple[Scalar, ...]

    kind = Kind.sum
    precedence = Precedence.sum

    def key(self):
        return ("sum", frozenset(term.key() for term in self.terms))

    def addends(self):
        return self.terms

    def variables(self):
        return _unique_variables(self.terms)

    def substitute(self, variable, replacement):
        return add(*(term.substitute(variable, replacement) for term in self.terms))

    def expand(self):
        return add(*(term.expand() for term in self.terms))

    def clone(self):
        return Sum(tuple(term.clone() for term in self.terms))

    def deparse(self):
        parts = []
        for i, term in enumerate(self.terms):
            value, _ = term.split_coefficient()
            if value < 0:
                positive = negate(term)
                text = positive.deparse()
                if positive.precedence <= self.precedence:
                    text = f"({text})"
                parts.append(f"-{text}" if i == 0 else f" - {text}")
            else:
                text = self.deparse_child(term)
                parts.append(text if i == 0 else f" + {text}")
        return "".join(parts)


@dataclass(frozen=True, slots=True)
class Product(Scalar):
    factors: tuple[Scalar, ...]

    kind = Kind.product
    precedence = Precedence.product

    def key(self):
        return ("product", frozenset(Counter(factor.key() for factor in self.factors).items()))

    def variables(self):
        return _unique_variables(self.factors)

    def substitute(self, variable, replacement):
        return multiply(*(factor.substitute(variable, replacement) for factor in self.factors))

    def expand(self):
        expansions = [factor.expand().addends() for factor in self.factors]
        return add(*(multiply(*combination) for combination in itertools.product(*expansions)))

    def clone(self):
        return Product(tuple(factor.clone() for factor in self.factors))

    def split_coefficient(self):
        first, *rest = self.factors
        if isinstance(first, Numeric):
            if len(rest) == 1:
                return first.value, rest[0]
            else:
                return first.value, Product(tuple(rest))
        return Fraction(1), self

    def deparse(self):
        value, rest = self.split_coefficient()
        if rest is self:
            return " * ".join(self.deparse_child(factor) for factor in self.factors)

        text = self.deparse_child(rest)
        if value == 1:
            return text
        elif value == -1:
            return f"-{text}"
        else:
            return f"{value} * {text}"


def _unique_variables(children: Iterable[Scalar]) -> tuple[Variable, ...]:
    return tuple(dict.fromkeys(v for child in children for v in child.variables()))


def as_scalar(value) -> Scalar | None:
    if isinstance(value, Scalar):
        return value
    elif isinstance(value, (int, Fraction)):
        return Numeric(Fraction(value))
    else:
        return None


def add(*operands: Scalar) -> Scalar:
    """Sum with numeric folding and collection of like terms.

    Nested sums are flattened, the constant is moved to the front, and terms whose non-numeric parts
    agree are combined. Products are never distributed.
    """
    constant = Fraction(0)
    collected: dict[Hashable, tuple[Fraction, Scalar]] = {}
    for operand in operands:
        for term in operand.addends():
            value, rest = term.split_coefficient()
            if rest is None:
                constant += value
                continue
            key = rest.key()
            if key in collected:
                previous, first = collected[key]
                collected[key] = (previous + value, first)
            else:
                collected[key] = (value, rest)

    terms = [] if constant == 0 else [Numeric(constant)]
    for value, rest in collected.values():
        if value != 0:
            terms.append(rest if value == 1 else multiply(Numeric(value), rest))

    # A group of scaled sums that nets to one leaves a bare sum behind
    if any(isinstance(term, Sum) for term in terms):
        return add(*terms)

    if len(terms) == 0:
        return Numeric(0)
    elif len(terms) == 1:
        return terms[0]
    else:
        return Sum(tuple(terms))


def multiply(*operands: Scalar) -> Scalar:
    coefficient = Fraction(1)
    factors = []
    for operand in operands:
        for factor in operand.factors if isinstance(operand, Product) else (operand,):
            if isinstance(factor, Numeric):
                coefficient *= factor.value
            else:
                factors.append(factor)

    if coefficient == 0:
        return Numeric(0)
    elif len(factors) == 0:
        return Numeric(coefficient)
    elif coefficient == 1 and len(factors) == 1:
        return factors[0]
    elif coefficient == 1:
        return Product(tuple(factors))
    else:
        return Product((Numeric(coefficient), *factors))


def negate(operand: Scalar) -> Scalar:
    return multiply(Numeric(-1), operand)


def subtract(left: Scalar, right: Scalar) -> Scalar:
    return add(left, negate(right))


class Symbols:
    """Thread-safe table handing out one variable per name."""

    def __init__(self, variables: Iterable[Variable] = ()):
        self._lock = threading.Lock()
        self._variables = {variable.name: variable for variable in variables}

    def __getitem__(self, name: str) -> Variable:
        with self._lock:
            variable = self._variables.get(name)
            if variable is None:
                variable = Variable(name)
                self._variables[name] = variable
            return variable

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._variables

    def __len__(self) -> int:
        with self._lock:
            return len(self._variables)

    def __iter__(self) -> Iterator[Variable]:
        with self._lock:
            return iter(list(self._variables.values()))
