"""Field base class: one typed column value bound to a model instance.

A field owns its runtime value and dirty flag; its `Column` descriptor is
structural and shared by every instance of the same model class.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence, Tuple, Type

from .criteria import Criteria
from .errors import FieldValueError
from .registry import ClassCache
from .schema_columns import Column
from .types import RowMapping

if TYPE_CHECKING:
    from .models import Model

_columns: ClassCache[Column] = ClassCache("field columns")


class Field:
    """Base class for typed column wrappers.

    Subclasses implement `_from_db` (raw driver value to Python value) and
    `_to_db` (Python value to bind value). Every assignment through `value`
    or `set_value` marks the field and its model dirty, even when the new
    value equals the old one.
    """

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping],
        column_factory: Callable[[], Column],
    ):
        self.model = model
        self.name = name
        self.is_dirty = False
        self._value: Any = None
        self._column = _columns.get_or_create(self._column_key(), column_factory)
        model._register_field(self)
        self.set_value_from_row(row or {})

    def _column_key(self) -> Tuple[Type[Any], str]:
        return (type(self.model), self.name)

    def get_model(self) -> "Model":
        return self.model

    def get_column(self) -> Column:
        return self._column

    def is_column_exists(self) -> bool:
        """Return whether the column for this model class and name is cached."""

        return self._column_key() in _columns

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        self.set_value(value)

    def get_value(self) -> Any:
        return self._value

    def set_value(self, value: Any) -> None:
        if value is not None:
            value = self._convert(self._prepare, value)
        self._value = value
        self.is_dirty = True
        self.model.is_dirty = True

    def set_value_from_row(self, row: RowMapping) -> None:
        """Load the value from a raw row without marking anything dirty.

        A missing key or a `None` value keeps the current value.

        Raises:
            FieldValueError: When the raw value cannot be converted.
        """

        raw = row.get(self.name)
        if raw is None:
            return
        self._value = self._load(raw)

    def set_from_string(self, raw: str) -> None:
        """Assign a driver-generated key given as a string.

        Only scalar fields can hold generated keys; others ignore the call.
        """

    def to_query(self) -> Dict[str, Any]:
        """Return `{column: bind value}` for INSERT/UPDATE column lists."""

        return {self.name: self.to_bind(self._value)}

    def to_bind(self, value: Any) -> Any:
        return None if value is None else self._convert(self._to_db, value)

    def eq(self, value: Any = None, *, and_: bool = True) -> Criteria:
        return self._compare("=", value, and_)

    def ne(self, value: Any = None, *, and_: bool = True) -> Criteria:
        return self._compare("<>", value, and_)

    def gt(self, value: Any = None, *, and_: bool = True) -> Criteria:
        return self._compare(">", value, and_)

    def gte(self, value: Any = None, *, and_: bool = True) -> Criteria:
        return self._compare(">=", value, and_)

    def lt(self, value: Any = None, *, and_: bool = True) -> Criteria:
        return self._compare("<", value, and_)

    def lte(self, value: Any = None, *, and_: bool = True) -> Criteria:
        return self._compare("<=", value, and_)

    def like(self, value: Optional[str] = None, *, and_: bool = True) -> Criteria:
        return self._pattern("LIKE", value, and_)

    def not_like(self, value: Optional[str] = None, *, and_: bool = True) -> Criteria:
        return self._pattern("NOT LIKE", value, and_)

    def in_(self, values: Sequence[Any], *, and_: bool = True) -> Criteria:
        """Build `column IN (...)`; an empty list means `[current value]`."""

        return self._membership("IN", values, and_)

    def nin(self, values: Sequence[Any], *, and_: bool = True) -> Criteria:
        """Build `column NOT IN (...)`; an empty list means `[current value]`."""

        return self._membership("NOT IN", values, and_)

    def is_null(self, *, and_: bool = True) -> Criteria:
        return Criteria(f"{self.name} IS NULL", {}, and_, self.name)

    def is_not_null(self, *, and_: bool = True) -> Criteria:
        return Criteria(f"{self.name} IS NOT NULL", {}, and_, self.name)

    def _compare(self, op: str, value: Any, and_: bool) -> Criteria:
        if value is None:
            value = self._value
        return Criteria(
            f"{self.name} {op} :{self.name}",
            {self.name: self.to_bind(value)},
            and_,
            self.name,
        )

    def _pattern(self, op: str, value: Optional[str], and_: bool) -> Criteria:
        pattern = value if value is not None else self.to_bind(self._value)
        return Criteria(
            f"{self.name} {op} :{self.name}", {self.name: pattern}, and_, self.name
        )

    def _membership(self, op: str, values: Sequence[Any], and_: bool) -> Criteria:
        items = list(values) if len(values) > 0 else [self._value]
        binds = [self.to_bind(item) for item in items]
        return Criteria(
            f"{self.name} {op} (:{self.name})", {self.name: binds}, and_, self.name
        )

    def _load(self, raw: Any) -> Any:
        return self._convert(self._from_db, raw)

    def _convert(self, parse: Callable[[Any], Any], raw: Any) -> Any:
        try:
            return parse(raw)
        except FieldValueError:
            raise
        except (TypeError, ValueError, ArithmeticError) as exc:
            raise FieldValueError(
                f"Cannot load {raw!r} into {type(self).__name__} {self.name!r}: {exc}"
            ) from exc

    def _prepare(self, value: Any) -> Any:
        """Validate/normalize a value assigned by application code."""

        return value

    def _from_db(self, raw: Any) -> Any:
        raise NotImplementedError

    def _to_db(self, value: Any) -> Any:
        raise NotImplementedError

    def __repr__(self) -> str:
        state = "dirty" if self.is_dirty else "clean"
        return f"{type(self).__name__}({self.name}={self._value!r}, {state})"


class ScalarField(Field):
    """Field whose value can be assigned from a generated key string."""

    def set_from_string(self, raw: str) -> None:
        self.set_value(self._load(raw))
