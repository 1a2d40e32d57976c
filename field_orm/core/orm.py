"""Active-record style model: CRUD through result sets."""

from __future__ import annotations

from typing import ClassVar, Optional

from .criteria import Criteria
from .errors import DeleteError, InsertError, OrmError, UpdateError
from .models import Model
from .result_sets import (
    DeleteResultSet,
    InsertResultSet,
    ResultSetFactory,
    SelectResultSet,
    UpdateResultSet,
)


class OrmModel(Model):
    """Model that can find, insert, update and delete itself.

    The result set factory is shared configuration:

        OrmModel.result_set_factory = ResultSetFactory(db, QueryFactory(dialect))
    """

    result_set_factory: ClassVar[Optional[ResultSetFactory]] = None

    def __init__(self) -> None:
        super().__init__()
        self.is_deleted = False

    def get_result_set_factory(self) -> ResultSetFactory:
        factory = type(self).result_set_factory
        if factory is None:
            raise OrmError(
                f"No result set factory configured for {type(self).__name__}; "
                "assign OrmModel.result_set_factory first."
            )
        return factory

    def find(self, *criteria: Criteria) -> SelectResultSet:
        return self.get_result_set_factory().new_select(self).filter(*criteria)

    def new_insert(self, with_dirty_fields: bool = True) -> InsertResultSet:
        result_set = self.get_result_set_factory().new_insert(self)
        if with_dirty_fields:
            result_set.cols(self.dirty_fields_to_query())
        return result_set

    def insert(self) -> InsertResultSet:
        """Insert the dirty fields.

        Raises:
            InsertError: For any failure, including configuration errors.
        """

        try:
            return self.new_insert().exec()
        except InsertError:
            raise
        except OrmError as exc:
            raise InsertError(str(exc)) from exc

    def new_update(self, *criteria: Criteria, with_dirty_fields: bool = True) -> UpdateResultSet:
        result_set = self.get_result_set_factory().new_update(self)
        if with_dirty_fields:
            result_set.cols(self.dirty_fields_to_query())
        return result_set.filter(*criteria)

    def update(self, *criteria: Criteria) -> UpdateResultSet:
        """Update the dirty fields on rows matching `criteria`.

        Raises:
            UpdateError: For any failure, including "Nothing to update".
        """

        try:
            return self.new_update(*criteria).exec()
        except UpdateError:
            raise
        except OrmError as exc:
            raise UpdateError(str(exc)) from exc

    def update_by_pk(self) -> UpdateResultSet:
        try:
            pk_criteria = self.get_pk().eq()
        except OrmError as exc:
            raise UpdateError(str(exc)) from exc
        return self.update(pk_criteria)

    def new_delete(self, *criteria: Criteria) -> DeleteResultSet:
        return self.get_result_set_factory().new_delete(self).filter(*criteria)

    def delete(self, *criteria: Criteria) -> DeleteResultSet:
        try:
            return self.new_delete(*criteria).exec()
        except DeleteError:
            raise
        except OrmError as exc:
            raise DeleteError(str(exc)) from exc

    def delete_by_pk(self) -> DeleteResultSet:
        try:
            pk_criteria = self.get_pk().eq()
        except OrmError as exc:
            raise DeleteError(str(exc)) from exc
        return self.delete(pk_criteria)
