"""
SQLAlchemy executor implementation.

Runs QueryCall objects against SQLAlchemy models and returns plain dict rows.
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import Engine, delete, update
from sqlalchemy.orm import Session

from softscope.adapters.base import QueryExecutor
from softscope.adapters.sqlalchemy.compiler import SQLAlchemyCompiler
from softscope.adapters.sqlalchemy.introspection import SQLAlchemyIntrospector
from softscope.adapters.sqlalchemy.session import SessionManager
from softscope.core.args import OrderDirection, QueryArgs, RelationSelection, WriteArgs
from softscope.core.context import Operation, QueryCall
from softscope.core.errors import NotFoundError, ValidationError
from softscope.core.types import FieldKind, FieldMetadata, SchemaMetadata

logger = logging.getLogger(__name__)


class SQLAlchemyExecutor(QueryExecutor):
    """
    SQLAlchemy executor.

    Uses a caller-owned session when one is given (the caller commits), or
    opens one committed session per call through a SessionManager.
    """

    def __init__(
        self,
        models: list[type],
        *,
        engine: Engine | None = None,
        session: Session | None = None,
        session_manager: SessionManager | None = None,
    ) -> None:
        """
        Initialize the executor.

        Args:
            models: List of SQLAlchemy model classes to expose
            engine: Engine to build a SessionManager from
            session: Caller-owned session used for every call
            session_manager: Optional custom session manager
        """
        if session is None and session_manager is None and engine is None:
            raise ValueError("One of engine, session or session_manager is required")

        self.models = models
        self.session = session
        self.session_manager = session_manager
        if self.session_manager is None and engine is not None:
            self.session_manager = SessionManager(engine)

        self.introspector = SQLAlchemyIntrospector(models)
        self._schema: SchemaMetadata | None = None
        self._compiler: SQLAlchemyCompiler | None = None

    @property
    def schema(self) -> SchemaMetadata:
        """Get cached schema, introspecting if needed."""
        if self._schema is None:
            self._schema = self.introspector.introspect()
        return self._schema

    @property
    def compiler(self) -> SQLAlchemyCompiler:
        """Get the argument compiler."""
        if self._compiler is None:
            self._compiler = SQLAlchemyCompiler(self.introspector.model_map, self.schema)
        return self._compiler

    def introspect(self) -> SchemaMetadata:
        """Introspect the database schema."""
        return self.schema

    def execute(self, call: QueryCall) -> Any:
        """Execute a call in the configured session."""
        logger.debug("Executing %s on %s", call.operation.value, call.model)
        if self.session is not None:
            return self._dispatch(self.session, call)
        return self.session_manager.run_in_transaction(
            lambda session: self._dispatch(session, call)
        )

    def _dispatch(self, session: Session, call: QueryCall) -> Any:
        model = call.model
        match call.operation:
            case Operation.FIND_MANY:
                return self._find_many(session, model, self._query_args(call))
            case Operation.FIND_FIRST:
                return self._find_first(session, model, self._query_args(call))
            case Operation.FIND_UNIQUE:
                return self._find_unique(session, model, self._query_args(call))
            case Operation.COUNT:
                stmt = self.compiler.compile_count(model, self._query_args(call))
                return session.execute(stmt).scalar_one()
            case Operation.CREATE:
                return self._create(session, model, self._write_args(call).data)
            case Operation.UPDATE:
                return self._update(session, model, self._write_args(call))
            case Operation.UPSERT:
                return self._upsert(session, model, self._write_args(call))
            case Operation.DELETE:
                return self._delete(session, model, self._write_args(call))
            case Operation.UPDATE_MANY:
                return self._update_many(session, model, self._write_args(call))
            case Operation.DELETE_MANY:
                return self._delete_many(session, model, self._write_args(call))

    @staticmethod
    def _query_args(call: QueryCall) -> QueryArgs:
        if not isinstance(call.args, QueryArgs):
            raise ValidationError(f"Operation '{call.operation.value}' expects query arguments")
        return call.args

    @staticmethod
    def _write_args(call: QueryCall) -> WriteArgs:
        if not isinstance(call.args, WriteArgs):
            raise ValidationError(f"Operation '{call.operation.value}' expects write arguments")
        return call.args

    # =========================================================================
    # READS
    # =========================================================================

    def _find_many(self, session: Session, model: str, args: QueryArgs) -> list[dict[str, Any]]:
        stmt = self.compiler.compile_find_many(model, args)
        rows = session.execute(stmt).scalars().all()
        return [self._row_to_dict(row, model, args) for row in rows]

    def _find_first(self, session: Session, model: str, args: QueryArgs) -> dict[str, Any] | None:
        rows = self._find_many(session, model, args.model_copy(update={"take": 1}))
        return rows[0] if rows else None

    def _find_unique(self, session: Session, model: str, args: QueryArgs) -> dict[str, Any] | None:
        self._check_unique_where(model, args.where)
        return self._find_first(session, model, args)

    def _check_unique_where(self, model: str, where: Mapping[str, Any] | None) -> None:
        """Ensure ``where`` addresses a primary key or a unique column."""
        meta = self.compiler.get_model_meta(model)
        keys = {
            name
            for name, value in (where or {}).items()
            if name in meta.fields
            and meta.fields[name].kind == FieldKind.SCALAR
            and not isinstance(value, Mapping)
        }

        if meta.primary_keys and set(meta.primary_keys) <= keys:
            return
        if any(meta.fields[name].unique for name in keys):
            return

        unique = meta.primary_keys + [f.name for f in meta.scalar_fields() if f.unique]
        raise ValidationError(
            f"Lookup on model '{model}' must address a primary key or unique field",
            retry_hints=[f"Unique fields of {model}: {', '.join(unique)}"],
        )

    # =========================================================================
    # WRITES
    # =========================================================================

    def _create(self, session: Session, model: str, data: dict[str, Any] | None) -> dict[str, Any]:
        model_class = self.compiler.get_model_class(model)
        instance = model_class(**self._check_data(model, data))
        session.add(instance)
        session.flush()
        return self._row_to_dict(instance, model)

    def _update(self, session: Session, model: str, args: WriteArgs) -> dict[str, Any]:
        row = self._get_unique_row(session, model, args.where)
        if row is None:
            raise NotFoundError(model, args.where)
        return self._apply_update(session, row, model, args.data)

    def _upsert(self, session: Session, model: str, args: WriteArgs) -> dict[str, Any]:
        row = self._get_unique_row(session, model, args.where)
        if row is None:
            return self._create(session, model, args.create)
        return self._apply_update(session, row, model, args.update)

    def _delete(self, session: Session, model: str, args: WriteArgs) -> dict[str, Any]:
        row = self._get_unique_row(session, model, args.where)
        if row is None:
            raise NotFoundError(model, args.where)
        result = self._row_to_dict(row, model)
        session.delete(row)
        session.flush()
        return result

    def _update_many(self, session: Session, model: str, args: WriteArgs) -> int:
        model_class = self.compiler.get_model_class(model)
        stmt = update(model_class).values(**self._check_data(model, args.data))
        criterion = self.compiler.build_where(model, args.where)
        if criterion is not None:
            stmt = stmt.where(criterion)
        return session.execute(stmt).rowcount

    def _delete_many(self, session: Session, model: str, args: WriteArgs) -> int:
        model_class = self.compiler.get_model_class(model)
        stmt = delete(model_class)
        criterion = self.compiler.build_where(model, args.where)
        if criterion is not None:
            stmt = stmt.where(criterion)
        return session.execute(stmt).rowcount

    def _get_unique_row(
        self,
        session: Session,
        model: str,
        where: dict[str, Any] | None,
    ) -> Any:
        self._check_unique_where(model, where)
        stmt = self.compiler.compile_find_many(model, QueryArgs(where=where, take=1))
        return session.execute(stmt).scalars().first()

    def _apply_update(
        self,
        session: Session,
        row: Any,
        model: str,
        data: dict[str, Any] | None,
    ) -> dict[str, Any]:
        for name, value in self._check_data(model, data).items():
            setattr(row, name, value)
        session.flush()
        return self._row_to_dict(row, model)

    def _check_data(self, model: str, data: dict[str, Any] | None) -> dict[str, Any]:
        """Only scalar columns can be written."""
        if not data:
            raise ValidationError(f"Write on model '{model}' has no data")
        meta = self.compiler.get_model_meta(model)
        for name in data:
            field = meta.fields.get(name)
            if field is None or field.kind != FieldKind.SCALAR:
                raise ValidationError(
                    f"Field '{name}' cannot be written on model '{model}'",
                    field=name,
                )
        return data

    # =========================================================================
    # RESULTS
    # =========================================================================

    def _row_to_dict(
        self,
        row: Any,
        model: str,
        args: QueryArgs | None = None,
    ) -> dict[str, Any]:
        """Convert an ORM row to a dict shaped by ``select`` / ``include``."""
        meta = self.compiler.get_model_meta(model)

        if args is not None and args.select is not None:
            data: dict[str, Any] = {}
            for name, selection in args.select.items():
                field = meta.fields[name]
                if selection is False:
                    continue
                if field.kind == FieldKind.SCALAR:
                    data[name] = getattr(row, name)
                else:
                    data[name] = self._relation_to_value(row, field, selection)
            return data

        data = {field.name: getattr(row, field.name) for field in meta.scalar_fields()}
        if args is not None and args.include is not None:
            for name, selection in args.include.items():
                field = meta.fields[name]
                if field.kind != FieldKind.RELATION or selection is False:
                    continue
                data[name] = self._relation_to_value(row, field, selection)
        return data

    def _relation_to_value(
        self,
        row: Any,
        field: FieldMetadata,
        selection: RelationSelection,
    ) -> Any:
        value = getattr(row, field.name)
        nested = selection if isinstance(selection, QueryArgs) else None

        if not field.is_list:
            if value is None:
                return None
            return self._row_to_dict(value, field.target_model, nested)

        items = list(value)
        if nested is not None:
            items = self._shape_collection(items, field.target_model, nested)
        return [self._row_to_dict(item, field.target_model, nested) for item in items]

    def _shape_collection(self, items: list[Any], model: str, args: QueryArgs) -> list[Any]:
        """Apply ``order_by`` / ``skip`` / ``take`` to a loaded collection."""
        # Stable sorts, least significant key first
        for column, direction in reversed(self.compiler.order_clauses(model, args)):
            items.sort(
                key=lambda item, name=column.key: _sort_key(getattr(item, name)),
                reverse=direction == OrderDirection.DESC,
            )

        skip, take = self.compiler.paging(args)
        start = skip or 0
        end = None if take is None else start + take
        return items[start:end]


def _sort_key(value: Any) -> tuple[bool, Any]:
    # NULLs sort first ascending
    return (value is not None, value)
