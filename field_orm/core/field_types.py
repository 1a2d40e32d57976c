"""Concrete field types, grouped by value family."""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, ClassVar, Iterable, List, Optional, Sequence

from .errors import FieldValueError
from .fields import Field, ScalarField
from .schema_columns import CURRENT_TIMESTAMP, Column, ColumnType
from .types import RowMapping

if TYPE_CHECKING:
    from .models import Model

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"
DATE_FORMAT = "%Y-%m-%d"

_TRUE_STRINGS = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "f", "no", "n", "off", ""})


def _text(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw).decode("utf-8")
    return str(raw)


class IntegerField(ScalarField):
    """Integer family. Subclasses only change the column type and default size."""

    column_type: ClassVar[ColumnType] = ColumnType.INT
    default_size: ClassVar[Optional[int]] = 11

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        size: Optional[int] = None,
        *,
        unsigned: bool = False,
        autoincrement: bool = False,
        zerofill: bool = False,
        nullable: bool = False,
        default: Optional[int] = None,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model,
            name,
            row,
            lambda: Column(
                name,
                self.column_type,
                size=self.default_size if size is None else size,
                nullable=nullable,
                default=default,
                autoincrement=autoincrement,
                unsigned=unsigned,
                zerofill=zerofill,
                comment=comment,
            ),
        )

    def _from_db(self, raw: Any) -> int:
        if isinstance(raw, float) and not raw.is_integer():
            raise ValueError("not an integral number")
        if isinstance(raw, (bytes, bytearray, memoryview)):
            raw = _text(raw)
        return int(raw)

    _prepare = _from_db

    def _to_db(self, value: Any) -> int:
        return int(value)


class IntField(IntegerField):
    pass


class TinyIntField(IntegerField):
    column_type = ColumnType.TINYINT
    default_size = 4


class SmallIntField(IntegerField):
    column_type = ColumnType.SMALLINT
    default_size = 6


class MediumIntField(IntegerField):
    column_type = ColumnType.MEDIUMINT
    default_size = 9


class BigIntField(IntegerField):
    column_type = ColumnType.BIGINT
    default_size = 20


class YearField(IntegerField):
    column_type = ColumnType.YEAR
    default_size = 4


class BoolField(ScalarField):
    """Boolean stored as 1/0."""

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        *,
        nullable: bool = False,
        default: Optional[bool] = None,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model,
            name,
            row,
            lambda: Column(
                name, ColumnType.BOOL, nullable=nullable, default=default, comment=comment
            ),
        )

    def _from_db(self, raw: Any) -> bool:
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, (int, float)):
            return raw != 0
        text = _text(raw).strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
        return int(text) != 0

    _prepare = _from_db

    def _to_db(self, value: Any) -> int:
        return 1 if self._from_db(value) else 0


class FloatingField(ScalarField):
    """Binary floating point family."""

    column_type: ClassVar[ColumnType] = ColumnType.FLOAT

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        size: Optional[int] = None,
        scale: Optional[int] = None,
        *,
        unsigned: bool = False,
        nullable: bool = False,
        default: Optional[float] = None,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model,
            name,
            row,
            lambda: Column(
                name,
                self.column_type,
                size=size,
                scale=scale,
                nullable=nullable,
                default=default,
                unsigned=unsigned,
                comment=comment,
            ),
        )

    def _from_db(self, raw: Any) -> float:
        if isinstance(raw, (bytes, bytearray, memoryview)):
            raw = _text(raw)
        return float(raw)

    _prepare = _from_db

    def _to_db(self, value: Any) -> float:
        return float(value)


class FloatField(FloatingField):
    pass


class DoubleField(FloatingField):
    column_type = ColumnType.DOUBLE


class DecimalField(ScalarField):
    """Exact numeric stored as `Decimal`; bound as its string form."""

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        precision: int = 10,
        scale: int = 2,
        *,
        unsigned: bool = False,
        nullable: bool = False,
        default: Optional[Any] = None,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model,
            name,
            row,
            lambda: Column(
                name,
                ColumnType.DECIMAL,
                size=precision,
                scale=scale,
                nullable=nullable,
                default=None if default is None else str(default),
                unsigned=unsigned,
                comment=comment,
            ),
        )

    def _from_db(self, raw: Any) -> Decimal:
        if isinstance(raw, Decimal):
            return raw
        if isinstance(raw, float):
            raw = repr(raw)
        try:
            return Decimal(_text(raw).strip())
        except InvalidOperation as exc:
            raise ValueError(f"invalid decimal literal {raw!r}") from exc

    _prepare = _from_db

    def _to_db(self, value: Any) -> str:
        return str(self._from_db(value))


class StringField(ScalarField):
    """Character family (CHAR, VARCHAR, TEXT)."""

    column_type: ClassVar[ColumnType] = ColumnType.VARCHAR
    default_size: ClassVar[Optional[int]] = 255

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        size: Optional[int] = None,
        *,
        nullable: bool = False,
        default: Optional[str] = None,
        charset: Optional[str] = None,
        collate: Optional[str] = None,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model,
            name,
            row,
            lambda: Column(
                name,
                self.column_type,
                size=self.default_size if size is None else size,
                nullable=nullable,
                default=default,
                charset=charset,
                collate=collate,
                comment=comment,
            ),
        )

    def _from_db(self, raw: Any) -> str:
        return _text(raw)

    _prepare = _from_db

    def _to_db(self, value: Any) -> str:
        return _text(value)


class CharField(StringField):
    column_type = ColumnType.CHAR
    default_size = 1


class VarCharField(StringField):
    pass


class TextField(StringField):
    column_type = ColumnType.TEXT
    default_size = None


class _OptionsField(Field):
    column_type: ClassVar[ColumnType]

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping],
        options: Sequence[str],
        nullable: bool,
        default: Any,
        charset: Optional[str],
        collate: Optional[str],
        comment: Optional[str],
    ):
        super().__init__(
            model,
            name,
            row,
            lambda: Column(
                name,
                self.column_type,
                nullable=nullable,
                default=default,
                options=tuple(options),
                charset=charset,
                collate=collate,
                comment=comment,
            ),
        )

    def _check_option(self, option: str) -> str:
        if option not in self.get_column().options:
            allowed = ", ".join(self.get_column().options)
            raise FieldValueError(
                f"Value {option!r} is not allowed for {self.name!r}; expected one of: {allowed}."
            )
        return option


class EnumField(_OptionsField):
    """One value out of a declared option list."""

    column_type = ColumnType.ENUM

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        options: Sequence[str] = (),
        *,
        nullable: bool = False,
        default: Optional[str] = None,
        charset: Optional[str] = None,
        collate: Optional[str] = None,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model, name, row, options, nullable, default, charset, collate, comment
        )

    def _from_db(self, raw: Any) -> str:
        return self._check_option(_text(raw))

    _prepare = _from_db

    def _to_db(self, value: Any) -> str:
        return _text(value)


class SetField(_OptionsField):
    """Any subset of a declared option list; stored comma separated."""

    column_type = ColumnType.SET

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        options: Sequence[str] = (),
        *,
        nullable: bool = False,
        default: Optional[Iterable[str]] = None,
        charset: Optional[str] = None,
        collate: Optional[str] = None,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model,
            name,
            row,
            options,
            nullable,
            None if default is None else ",".join(default),
            charset,
            collate,
            comment,
        )

    def _from_db(self, raw: Any) -> List[str]:
        if isinstance(raw, (list, tuple, set, frozenset)):
            items = [_text(item) for item in raw]
        else:
            text = _text(raw)
            items = text.split(",") if text else []
        return [self._check_option(item) for item in items]

    _prepare = _from_db

    def _to_db(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        return ",".join(_text(item) for item in value)


class DateTimeField(Field):
    """Date and time without timezone, bound as `YYYY-MM-DD HH:MM:SS`."""

    column_type: ClassVar[ColumnType] = ColumnType.DATETIME

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        *,
        nullable: bool = False,
        default: Optional[str] = None,
        default_timestamp: bool = False,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model,
            name,
            row,
            lambda: Column(
                name,
                self.column_type,
                nullable=nullable,
                default=CURRENT_TIMESTAMP if default_timestamp else default,
                comment=comment,
            ),
        )

    def _from_db(self, raw: Any) -> datetime:
        if isinstance(raw, datetime):
            return raw
        if isinstance(raw, date):
            return datetime(raw.year, raw.month, raw.day)
        return datetime.fromisoformat(_text(raw).strip())

    _prepare = _from_db

    def _to_db(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        return self._from_db(value).strftime(DATETIME_FORMAT)


class TimestampField(DateTimeField):
    column_type = ColumnType.TIMESTAMP


class DateField(Field):
    """Calendar date, bound as `YYYY-MM-DD`."""

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        *,
        nullable: bool = False,
        default: Optional[str] = None,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model,
            name,
            row,
            lambda: Column(
                name, ColumnType.DATE, nullable=nullable, default=default, comment=comment
            ),
        )

    def _from_db(self, raw: Any) -> date:
        if isinstance(raw, datetime):
            return raw.date()
        if isinstance(raw, date):
            return raw
        text = _text(raw).strip()
        return datetime.fromisoformat(text).date() if len(text) > 10 else date.fromisoformat(text)

    _prepare = _from_db

    def _to_db(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        return self._from_db(value).strftime(DATE_FORMAT)


class JsonField(Field):
    """JSON document kept as its text form."""

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        *,
        nullable: bool = False,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model,
            name,
            row,
            lambda: Column(name, ColumnType.JSON, nullable=nullable, comment=comment),
        )

    def _from_db(self, raw: Any) -> str:
        if isinstance(raw, (str, bytes, bytearray, memoryview)):
            return _text(raw)
        return json.dumps(raw)

    _prepare = _from_db

    def _to_db(self, value: Any) -> str:
        return self._from_db(value)

    def get_value_as_object(self) -> Any:
        """Decode the stored document; `None` when the field holds nothing."""

        if self._value is None:
            return None
        try:
            return json.loads(self._value)
        except ValueError as exc:
            raise FieldValueError(f"Field {self.name!r} does not hold valid JSON: {exc}") from exc

    def set_object(self, obj: Any) -> None:
        self.set_value(None if obj is None else json.dumps(obj))


class BinaryField(Field):
    """Fixed-size byte string."""

    column_type: ClassVar[ColumnType] = ColumnType.BINARY
    default_size: ClassVar[int] = 1

    def __init__(
        self,
        model: "Model",
        name: str,
        row: Optional[RowMapping] = None,
        size: Optional[int] = None,
        *,
        nullable: bool = False,
        comment: Optional[str] = None,
    ):
        super().__init__(
            model,
            name,
            row,
            lambda: Column(
                name,
                self.column_type,
                size=self.default_size if size is None else size,
                nullable=nullable,
                comment=comment,
            ),
        )

    def _from_db(self, raw: Any) -> bytes:
        if isinstance(raw, str):
            return raw.encode("utf-8")
        if isinstance(raw, int):
            raise TypeError("expected a byte string")
        return bytes(raw)

    _prepare = _from_db

    def _to_db(self, value: Any) -> bytes:
        return self._from_db(value)


class VarBinaryField(BinaryField):
    column_type = ColumnType.VARBINARY
    default_size = 255
