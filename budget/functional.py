import math
from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Callable, Optional

from budget.domain import Category
from budget.errors import ValidationError

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_some(self) -> bool:
        pass

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_some(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Some({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def get_or_else(self, default: T) -> T:
        return default

    def is_some(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    def unwrap(self) -> T:
        """Return the value, or raise the error held by a Left."""
        if self.is_left():
            raise self.get_error()
        return self.get_or_else(None)


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return Left(self._error)

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


CATEGORY_INPUT_MESSAGE = "Please enter valid inputs."
EXPENSE_INPUT_MESSAGE = "Please enter a valid expense amount."


def safe_category(cats: tuple[Category, ...], cat_id: Optional[str]) -> Maybe[Category]:
    if cat_id is None:
        return Nothing()
    for cat in cats:
        if cat.id == cat_id:
            return Some(cat)
    return Nothing()


def parse_amount(raw, message: str) -> Either[ValidationError, float]:
    """Parse user input into a finite number greater than zero."""
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return Left(ValidationError(message))
    if not math.isfinite(value) or value <= 0:
        return Left(ValidationError(message))
    return Right(value)


def validate_category_input(name, budget) -> Either[ValidationError, tuple[str, float]]:
    clean_name = (name or "").strip()
    if not clean_name:
        return Left(ValidationError(CATEGORY_INPUT_MESSAGE))
    return parse_amount(budget, CATEGORY_INPUT_MESSAGE).bind(
        lambda amount: Right((clean_name, amount))
    )


def validate_expense_input(
    cats: tuple[Category, ...], cat_id: Optional[str], amount
) -> Either[ValidationError, tuple[Category, float]]:
    category = safe_category(cats, cat_id)
    if category.is_none():
        return Left(ValidationError(EXPENSE_INPUT_MESSAGE))
    return parse_amount(amount, EXPENSE_INPUT_MESSAGE).bind(
        lambda value: Right((category.get_or_else(None), value))
    )
