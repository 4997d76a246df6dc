"""
Tests for query argument trees.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from softscope.core.args import QueryArgs, WriteArgs, coerce_query_args


class TestQueryArgs:
    def test_empty_args(self):
        args = QueryArgs()
        assert args.where is None
        assert args.include is None
        assert args.select is None
        assert args.to_dict() == {}

    def test_flag_and_nested_selections(self):
        args = QueryArgs.model_validate(
            {
                "include": {
                    "posts": {"where": {"published": True}, "include": {"comments": True}},
                    "profile": True,
                }
            }
        )
        assert args.include["profile"] is True
        posts = args.include["posts"]
        assert isinstance(posts, QueryArgs)
        assert posts.where == {"published": True}
        assert posts.include == {"comments": True}

    def test_false_flag_is_kept(self):
        args = QueryArgs.model_validate({"select": {"id": True, "email": False}})
        assert args.select == {"id": True, "email": False}

    def test_extra_keys_pass_through(self):
        args = QueryArgs.model_validate({"where": {"id": 1}, "distinct": ["email"]})
        assert args.model_extra == {"distinct": ["email"]}
        assert args.to_dict() == {"where": {"id": 1}, "distinct": ["email"]}

    def test_frozen(self):
        args = QueryArgs(where={"id": 1})
        with pytest.raises(PydanticValidationError):
            args.where = {"id": 2}

    def test_paging_kept_verbatim(self):
        args = QueryArgs.model_validate({"take": -1, "skip": "2"})
        assert args.take == -1
        assert args.skip == "2"

    def test_none_selection_is_false(self):
        args = QueryArgs.model_validate({"include": {"posts": None, "profile": True}})
        assert args.include == {"posts": False, "profile": True}

    def test_invalid_selection_rejected(self):
        with pytest.raises(PydanticValidationError):
            QueryArgs.model_validate({"include": {"posts": "yes please"}})

    def test_order_by_kept_verbatim(self):
        order_by = [{"author": {"name": "asc"}}, {"id": "desc"}]
        args = QueryArgs.model_validate({"order_by": order_by})
        assert args.to_dict() == {"order_by": order_by}

    def test_to_dict_round_trip(self):
        raw = {
            "where": {"email": {"ends_with": "@example.com"}},
            "include": {"posts": {"where": {"deleted_at": None}, "take": 2}, "profile": True},
            "order_by": [{"id": "asc"}],
            "skip": 1,
        }
        assert QueryArgs.model_validate(raw).to_dict() == raw

    def test_relation_containers(self):
        args = QueryArgs.model_validate({"select": {"posts": True}})
        assert list(args.relation_containers()) == [("select", {"posts": True})]


class TestCoerceQueryArgs:
    def test_none_gives_empty_args(self):
        assert coerce_query_args(None) == QueryArgs()

    def test_args_returned_as_is(self):
        args = QueryArgs(where={"id": 1})
        assert coerce_query_args(args) is args

    def test_mapping_is_validated(self):
        args = coerce_query_args({"include": {"posts": True}})
        assert args.include == {"posts": True}

    def test_non_mapping_rejected(self):
        with pytest.raises(TypeError):
            coerce_query_args([("where", {})])


class TestWriteArgs:
    def test_defaults(self):
        args = WriteArgs(data={"email": "a@example.com"})
        assert args.where is None
        assert args.data == {"email": "a@example.com"}
        assert args.create is None
        assert args.update is None
