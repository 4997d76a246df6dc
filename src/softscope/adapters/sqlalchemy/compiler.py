"""
SQLAlchemy argument compiler.

Compiles query argument trees into SQLAlchemy select statements, filter
expressions and eager-loading options.

Filter grammar:
    {"email": "a@example.com"}                  equality
    {"deleted_at": None}                        IS NULL
    {"views": {"gte": 10, "lt": 100}}           operators (AND-ed)
    {"deleted_at": {"not": None}}               IS NOT NULL
    {"AND": [...], "OR": [...], "NOT": {...}}   combinators
    {"posts": {"some": {...}}}                  list relation: some/every/none
    {"author": {"is": {...}}}                   singular relation: is/is_not
"""

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Select, and_, false, func, not_, or_, select, true
from sqlalchemy.orm import Load, selectinload

from softscope.core.args import OrderDirection, QueryArgs
from softscope.core.errors import UnknownModelError, ValidationError
from softscope.core.types import FieldKind, FieldMetadata, ModelMetadata, SchemaMetadata

_LIST_RELATION_OPS = ("some", "every", "none")
_SINGULAR_RELATION_OPS = ("is", "is_not")


class SQLAlchemyCompiler:
    """
    Compiles query argument trees into SQLAlchemy statements.
    """

    def __init__(
        self,
        model_map: dict[str, type],
        schema: SchemaMetadata,
    ) -> None:
        """
        Initialize the compiler.

        Args:
            model_map: Mapping of model names to SQLAlchemy model classes
            schema: Schema metadata for the same models
        """
        self.model_map = model_map
        self.schema = schema

    def compile_find_many(self, model: str, args: QueryArgs) -> Select:
        """
        Compile a multi-row read into a select statement.

        Eager loads carry their own criteria, so ``populate_existing`` is set
        to make collections already present in the session reload under
        this statement's criteria.
        """
        model_class = self.get_model_class(model)
        stmt = select(model_class).execution_options(populate_existing=True)

        criterion = self.build_where(model, args.where)
        if criterion is not None:
            stmt = stmt.where(criterion)

        stmt = self._apply_ordering(stmt, model, args)

        skip, take = self.paging(args)
        if skip is not None:
            stmt = stmt.offset(skip)
        if take is not None:
            stmt = stmt.limit(take)

        options = self.loader_options(model, args)
        if options:
            stmt = stmt.options(*options)

        return stmt

    def compile_count(self, model: str, args: QueryArgs) -> Select:
        """Compile a count into a select statement."""
        model_class = self.get_model_class(model)
        stmt = select(func.count()).select_from(model_class)

        criterion = self.build_where(model, args.where)
        if criterion is not None:
            stmt = stmt.where(criterion)

        return stmt

    def build_where(self, model: str, where: Mapping[str, Any] | None) -> Any:
        """
        Build a filter expression for ``model``.

        Returns None when there is nothing to filter on.
        """
        if where is None:
            return None
        conditions = self._build_conditions(model, where)
        if not conditions:
            return None
        return self._combine(conditions)

    def loader_options(
        self,
        model: str,
        args: QueryArgs,
        parent: Load | None = None,
    ) -> list[Load]:
        """
        Build ``selectinload`` chains for the relations selected in ``args``.

        A nested ``where`` on a relation becomes loader criteria via
        ``relationship.and_()``.
        """
        if args.include is not None and args.select is not None:
            raise ValidationError(
                f"Cannot use both 'include' and 'select' on model '{model}'",
                retry_hints=["Use 'select' with nested relations, or 'include' alone"],
            )

        meta = self.get_model_meta(model)
        model_class = self.get_model_class(model)
        options: list[Load] = []

        for _, container in args.relation_containers():
            for name, selection in container.items():
                field = self._get_field(meta, name)
                if field.kind != FieldKind.RELATION or selection is False:
                    continue

                attr = getattr(model_class, name)
                nested = selection if isinstance(selection, QueryArgs) else None

                if nested is not None:
                    # Nested ordering and paging are applied to the loaded rows
                    self.order_clauses(field.target_model, nested)
                    self.paging(nested)
                    criterion = self.build_where(field.target_model, nested.where)
                    if criterion is not None:
                        attr = attr.and_(criterion)

                loader = parent.selectinload(attr) if parent is not None else selectinload(attr)

                children = []
                if nested is not None:
                    children = self.loader_options(field.target_model, nested, loader)
                options.extend(children or [loader])

        return options

    def get_model_class(self, model: str) -> type:
        """Get the model class by name."""
        model_class = self.model_map.get(model)
        if model_class is None:
            raise UnknownModelError(model, list(self.model_map))
        return model_class

    def get_model_meta(self, model: str) -> ModelMetadata:
        """Get the model metadata by name."""
        meta = self.schema.get_model(model)
        if meta is None:
            raise UnknownModelError(model, self.schema.list_models())
        return meta

    def _get_field(self, meta: ModelMetadata, name: str) -> FieldMetadata:
        field = meta.fields.get(name)
        if field is None:
            raise ValidationError(
                f"Field '{name}' does not exist on model '{meta.name}'",
                field=name,
                retry_hints=[f"Fields of {meta.name}: {', '.join(meta.fields)}"],
            )
        return field

    def _build_conditions(self, model: str, where: Any) -> list[Any]:
        """Build the AND-ed conditions of one predicate mapping."""
        if not isinstance(where, Mapping):
            raise ValidationError(
                f"Filter on model '{model}' must be a mapping, got {type(where).__name__}"
            )

        meta = self.get_model_meta(model)
        model_class = self.get_model_class(model)
        conditions = []

        for key, value in where.items():
            match key:
                case "AND":
                    conditions.append(self._combine(self._build_clauses(model, value)))
                case "OR":
                    clauses = self._build_clauses(model, value)
                    conditions.append(or_(*clauses) if clauses else false())
                case "NOT":
                    # Every negated predicate must hold
                    clauses = self._build_clauses(model, value)
                    conditions.append(self._combine([not_(c) for c in clauses]))
                case _:
                    field = self._get_field(meta, key)
                    attr = getattr(model_class, key)
                    if field.kind == FieldKind.RELATION:
                        conditions.append(self._build_relation_condition(field, attr, value))
                    else:
                        conditions.append(self._build_field_condition(attr, key, value))

        return conditions

    def _build_clauses(self, model: str, value: Any) -> list[Any]:
        """Build one expression per predicate of a combinator operand."""
        predicates = value if isinstance(value, list) else [value]
        return [self._combine(self._build_conditions(model, p)) for p in predicates]

    def _build_field_condition(self, column: Any, name: str, value: Any) -> Any:
        """Build a condition on a scalar column."""
        if value is None:
            return column.is_(None)
        if not isinstance(value, Mapping):
            return column == value

        return self._combine(
            [self._build_operator(column, name, op, operand) for op, operand in value.items()]
        )

    def _build_operator(self, column: Any, name: str, op: str, value: Any) -> Any:
        """Build a single operator condition."""
        match op:
            case "equals":
                return column.is_(None) if value is None else column == value
            case "not":
                if value is None:
                    return column.is_not(None)
                if isinstance(value, Mapping):
                    return not_(self._build_field_condition(column, name, value))
                return column != value
            case "in":
                return column.in_(self._as_list(name, op, value))
            case "not_in":
                return column.not_in(self._as_list(name, op, value))
            case "lt":
                return column < value
            case "lte":
                return column <= value
            case "gt":
                return column > value
            case "gte":
                return column >= value
            case "contains":
                return column.contains(value)
            case "starts_with":
                return column.startswith(value)
            case "ends_with":
                return column.endswith(value)
            case _:
                raise ValidationError(
                    f"Unsupported filter operator '{op}' on field '{name}'",
                    field=name,
                )

    def _build_relation_condition(self, field: FieldMetadata, attr: Any, value: Any) -> Any:
        """Build a condition on a relation field."""
        if field.is_list:
            if not isinstance(value, Mapping) or not set(value) <= set(_LIST_RELATION_OPS):
                raise ValidationError(
                    f"Filter on list relation '{field.name}' must use {', '.join(_LIST_RELATION_OPS)}",
                    field=field.name,
                )
            conditions = []
            for op, predicate in value.items():
                criterion = self._combine(self._build_conditions(field.target_model, predicate or {}))
                match op:
                    case "some":
                        conditions.append(attr.any(criterion))
                    case "none":
                        conditions.append(~attr.any(criterion))
                    case "every":
                        conditions.append(~attr.any(not_(criterion)))
            return self._combine(conditions)

        if value is None:
            return ~attr.has()
        if not isinstance(value, Mapping):
            raise ValidationError(
                f"Filter on relation '{field.name}' must be a mapping or None",
                field=field.name,
            )
        if value and set(value) <= set(_SINGULAR_RELATION_OPS):
            conditions = []
            for op, predicate in value.items():
                exists = (
                    attr.has()
                    if predicate is None
                    else attr.has(self._combine(self._build_conditions(field.target_model, predicate)))
                )
                if op == "is":
                    conditions.append(~attr.has() if predicate is None else exists)
                else:
                    conditions.append(exists if predicate is None else ~exists)
            return self._combine(conditions)

        return attr.has(self._combine(self._build_conditions(field.target_model, value)))

    def order_clauses(self, model: str, args: QueryArgs) -> list[tuple[Any, OrderDirection]]:
        """
        Resolve ``order_by`` into (column, direction) pairs.

        Accepts a mapping or a list of mappings of scalar field names to
        "asc" / "desc".
        """
        if args.order_by is None:
            return []

        entries = args.order_by if isinstance(args.order_by, list) else [args.order_by]
        meta = self.get_model_meta(model)
        model_class = self.get_model_class(model)
        clauses = []

        for entry in entries:
            if not isinstance(entry, Mapping):
                raise ValidationError(
                    f"Ordering on model '{model}' must be a mapping, got {type(entry).__name__}"
                )
            for name, direction in entry.items():
                field = self._get_field(meta, name)
                if field.kind != FieldKind.SCALAR:
                    raise ValidationError(f"Cannot order by relation '{name}'", field=name)
                try:
                    direction = OrderDirection(direction)
                except (TypeError, ValueError):
                    raise ValidationError(
                        f"Invalid sort direction {direction!r} for field '{name}'",
                        field=name,
                        retry_hints=["Use 'asc' or 'desc'"],
                    ) from None
                clauses.append((getattr(model_class, name), direction))

        return clauses

    def paging(self, args: QueryArgs) -> tuple[int | None, int | None]:
        """Return validated ``(skip, take)``."""
        return self._row_count("skip", args.skip), self._row_count("take", args.take)

    def _apply_ordering(self, stmt: Select, model: str, args: QueryArgs) -> Select:
        """Apply ORDER BY clauses to a statement."""
        for column, direction in self.order_clauses(model, args):
            if direction == OrderDirection.DESC:
                stmt = stmt.order_by(column.desc())
            else:
                stmt = stmt.order_by(column.asc())

        return stmt

    @staticmethod
    def _row_count(name: str, value: Any) -> int | None:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValidationError(
                f"'{name}' must be a non-negative integer, got {value!r}",
                field=name,
            )
        return value

    @staticmethod
    def _combine(conditions: list[Any]) -> Any:
        if not conditions:
            return true()
        if len(conditions) == 1:
            return conditions[0]
        return and_(*conditions)

    @staticmethod
    def _as_list(name: str, op: str, value: Any) -> list[Any]:
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValidationError(
                f"Operator '{op}' on field '{name}' expects a list, got {value!r}",
                field=name,
            )
        return list(value)
