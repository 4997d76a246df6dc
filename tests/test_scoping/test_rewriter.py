"""
Tests for the soft-delete argument rewriter.
"""

import pytest

from softscope.core.args import QueryArgs
from softscope.scoping.metadata import build_scope_metadata
from softscope.scoping.rewriter import SoftDeleteScoper

NOT_DELETED = {"deleted_at": None}


@pytest.fixture
def scoper(sample_schema):
    return SoftDeleteScoper(build_scope_metadata(sample_schema))


class TestRootScoping:
    def test_empty_args_get_filter(self, scoper):
        scoped = scoper.scope_find_many_args("User", None)
        assert scoped.to_dict() == {"where": NOT_DELETED}

    def test_caller_where_is_and_merged(self, scoper):
        scoped = scoper.scope_find_many_args("User", {"where": {"email": "a@example.com"}})
        assert scoped.where == {"AND": [{"email": "a@example.com"}, NOT_DELETED]}

    def test_caller_where_on_marker_is_kept(self, scoper):
        where = {"deleted_at": {"not": None}}
        scoped = scoper.scope_find_many_args("User", {"where": where})
        assert scoped.where == {"AND": [where, NOT_DELETED]}

    def test_unscoped_model_untouched(self, scoper):
        args = QueryArgs(where={"name": "python"})
        scoped = scoper.scope_find_many_args("Tag", args)
        assert scoped.where == {"name": "python"}

    def test_unknown_model_passes_through(self, scoper):
        args = QueryArgs.model_validate({"where": {"id": 1}, "include": {"lines": True}})
        scoped = scoper.scope_find_many_args("Invoice", args)
        assert scoped is args

    def test_other_keys_preserved(self, scoper):
        scoped = scoper.scope_find_many_args(
            "User",
            {"order_by": {"id": "desc"}, "take": 5, "skip": 2, "distinct": ["email"]},
        )
        assert scoped.to_dict() == {
            "where": NOT_DELETED,
            "order_by": {"id": "desc"},
            "take": 5,
            "skip": 2,
            "distinct": ["email"],
        }


class TestReadOptionsPassThrough:
    def test_negative_take(self, scoper):
        scoped = scoper.scope_find_many_args("User", {"take": -1})
        assert scoped.to_dict() == {"where": NOT_DELETED, "take": -1}

    def test_relation_ordering(self, scoper):
        order_by = {"author": {"name": "asc"}}
        scoped = scoper.scope_find_many_args("Post", {"order_by": order_by})
        assert scoped.to_dict() == {"where": NOT_DELETED, "order_by": order_by}

    def test_nested_paging_and_ordering(self, scoper):
        scoped = scoper.scope_find_many_args(
            "User", {"include": {"posts": {"take": -3, "order_by": "newest"}}}
        )
        assert scoped.to_dict()["include"] == {
            "posts": {"where": NOT_DELETED, "order_by": "newest", "take": -3}
        }

    def test_none_selection_treated_as_false(self, scoper):
        scoped = scoper.scope_find_many_args("User", {"include": {"posts": None}})
        assert scoped.to_dict() == {"where": NOT_DELETED, "include": {"posts": False}}


class TestNestedScoping:
    def test_list_include_flag_becomes_filtered_args(self, scoper):
        scoped = scoper.scope_find_many_args("User", {"include": {"posts": True}})
        assert scoped.to_dict() == {
            "where": NOT_DELETED,
            "include": {"posts": {"where": NOT_DELETED}},
        }

    def test_false_flag_untouched(self, scoper):
        scoped = scoper.scope_find_many_args("User", {"include": {"posts": False}})
        assert scoped.include == {"posts": False}

    def test_singular_relation_untouched(self, scoper):
        scoped = scoper.scope_find_many_args("Post", {"include": {"author": True}})
        assert scoped.include == {"author": True}

    def test_singular_relation_nested_args_untouched(self, scoper):
        scoped = scoper.scope_find_many_args(
            "Comment", {"include": {"post": {"select": {"title": True}}}}
        )
        assert scoped.to_dict()["include"] == {"post": {"select": {"title": True}}}

    def test_list_relation_to_unscoped_model_untouched(self, scoper):
        scoped = scoper.scope_find_many_args("Post", {"include": {"tags": True}})
        assert scoped.include == {"tags": True}

    def test_nested_where_is_merged(self, scoper):
        scoped = scoper.scope_find_many_args(
            "User", {"include": {"posts": {"where": {"published": True}}}}
        )
        assert scoped.to_dict()["include"] == {
            "posts": {"where": {"AND": [{"published": True}, NOT_DELETED]}}
        }

    def test_three_levels(self, scoper):
        scoped = scoper.scope_find_many_args(
            "User",
            {"include": {"posts": {"include": {"comments": True, "author": True}}}},
        )
        assert scoped.to_dict() == {
            "where": NOT_DELETED,
            "include": {
                "posts": {
                    "where": NOT_DELETED,
                    "include": {
                        "comments": {"where": NOT_DELETED},
                        "author": True,
                    },
                }
            },
        }

    def test_recursion_through_singular_relation(self, scoper):
        # The singular hop is not filtered, but the list beneath it is
        scoped = scoper.scope_find_many_args(
            "Comment", {"include": {"post": {"include": {"comments": True}}}}
        )
        assert scoped.to_dict()["include"] == {
            "post": {"include": {"comments": {"where": NOT_DELETED}}}
        }

    def test_recursion_through_unscoped_model(self, scoper):
        scoped = scoper.scope_find_many_args(
            "Tag", {"include": {"posts": {"include": {"comments": True}}}}
        )
        assert scoped.to_dict() == {
            "include": {
                "posts": {
                    "where": NOT_DELETED,
                    "include": {"comments": {"where": NOT_DELETED}},
                }
            }
        }

    def test_select_container(self, scoper):
        scoped = scoper.scope_find_many_args(
            "User", {"select": {"id": True, "email": True, "posts": True}}
        )
        assert scoped.to_dict()["select"] == {
            "id": True,
            "email": True,
            "posts": {"where": NOT_DELETED},
        }

    def test_nested_select_inside_include(self, scoper):
        scoped = scoper.scope_find_many_args(
            "User", {"include": {"posts": {"select": {"title": True, "comments": True}}}}
        )
        assert scoped.to_dict()["include"] == {
            "posts": {
                "where": NOT_DELETED,
                "select": {"title": True, "comments": {"where": NOT_DELETED}},
            }
        }

    def test_unknown_relation_name_passes_through(self, scoper):
        scoped = scoper.scope_find_many_args("User", {"include": {"followers": True}})
        assert scoped.include == {"followers": True}

    def test_cyclic_schema_follows_request_depth(self, scoper):
        scoped = scoper.scope_find_many_args(
            "User",
            {"include": {"posts": {"include": {"author": {"include": {"posts": True}}}}}},
        )
        author = scoped.include["posts"].include["author"]
        assert author.where is None
        assert author.include["posts"].where == NOT_DELETED


class TestPurity:
    def test_input_mapping_not_mutated(self, scoper):
        raw = {"where": {"id": 1}, "include": {"posts": {"include": {"comments": True}}}}
        snapshot = {"where": {"id": 1}, "include": {"posts": {"include": {"comments": True}}}}
        scoper.scope_find_many_args("User", raw)
        assert raw == snapshot

    def test_input_args_not_mutated(self, scoper):
        args = QueryArgs.model_validate({"include": {"posts": {"where": {"published": True}}}})
        before = args.to_dict()
        scoped = scoper.scope_find_many_args("User", args)
        assert args.to_dict() == before
        assert scoped is not args

    def test_repeat_calls_are_equal(self, scoper):
        raw = {"include": {"posts": True}}
        assert scoper.scope_find_many_args("User", raw) == scoper.scope_find_many_args("User", raw)

    def test_merge_where_never_rewrites_caller_predicate(self, scoper):
        where = {"OR": [{"id": 1}, {"id": 2}]}
        merged = scoper.merge_where(where)
        assert merged["AND"][0] is where

    def test_custom_marker_field(self):
        from softscope.core.types import FieldMetadata, ModelMetadata, SchemaMetadata

        schema = SchemaMetadata(
            models={
                "Account": ModelMetadata(
                    name="Account",
                    fields={"archived_at": FieldMetadata(name="archived_at")},
                )
            }
        )
        scoper = SoftDeleteScoper(build_scope_metadata(schema, soft_delete_field="archived_at"))
        assert scoper.scope_find_many_args("Account", None).where == {"archived_at": None}
