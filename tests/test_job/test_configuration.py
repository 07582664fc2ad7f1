"""
Tests for recsys_runner/job/configuration.py.

What we test
------------
Raw access: get/set/unset, ``in`` treats None values as absent, snapshot is a copy.
Typed getters:
  - get_str strips and returns the default for blank values.
  - get_int / get_float coerce strings from -D overrides; bad values raise.
  - get_bool accepts the usual spellings and rejects anything else.
  - get_strings splits comma strings, keeps list order, drops empties.
"""

from __future__ import annotations

import pytest

from recsys_runner.errors import ConfigurationError
from recsys_runner.job.configuration import Configuration


class TestRawAccess:
    def test_get_returns_default_for_missing_key(self):
        assert Configuration().get("rec.eval.class", "x") == "x"

    def test_set_then_get(self):
        conf = Configuration()
        conf.set("data.splitter.cv.index", 3)
        assert conf.get("data.splitter.cv.index") == 3

    def test_unset_removes_key(self):
        conf = Configuration({"rec.eval.class": "precision"})
        conf.unset("rec.eval.class")
        assert "rec.eval.class" not in conf

    def test_none_value_counts_as_absent(self):
        conf = Configuration({"rec.filter.class": None})
        assert "rec.filter.class" not in conf
        assert conf.get("rec.filter.class", "fallback") == "fallback"

    def test_snapshot_is_independent_copy(self):
        conf = Configuration({"a": 1})
        snap = conf.snapshot()
        conf.set("a", 2)
        assert snap == {"a": 1}

    def test_len_and_iter(self):
        conf = Configuration({"a": 1, "b": 2})
        assert len(conf) == 2
        assert sorted(conf) == ["a", "b"]


class TestTypedGetters:
    def test_get_str_strips_whitespace(self):
        assert Configuration({"k": "  itemknn "}).get_str("k") == "itemknn"

    def test_get_str_blank_returns_default(self):
        assert Configuration({"k": "   "}).get_str("k", "dflt") == "dflt"

    def test_get_int_from_string(self):
        assert Configuration({"k": "5"}).get_int("k") == 5

    def test_get_int_missing_returns_default(self):
        assert Configuration().get_int("k", 7) == 7

    def test_get_int_rejects_garbage(self):
        with pytest.raises(ConfigurationError):
            Configuration({"k": "five"}).get_int("k")

    def test_get_int_rejects_bool(self):
        with pytest.raises(ConfigurationError):
            Configuration({"k": True}).get_int("k")

    def test_get_float_from_string(self):
        assert Configuration({"k": "0.75"}).get_float("k") == pytest.approx(0.75)

    def test_get_float_rejects_garbage(self):
        with pytest.raises(ConfigurationError):
            Configuration({"k": "most"}).get_float("k")

    @pytest.mark.parametrize("raw", [True, "true", "TRUE", "yes", "1", "on", 1])
    def test_get_bool_true_spellings(self, raw):
        assert Configuration({"k": raw}).get_bool("k") is True

    @pytest.mark.parametrize("raw", [False, "false", "no", "0", "off", "", 0])
    def test_get_bool_false_spellings(self, raw):
        assert Configuration({"k": raw}).get_bool("k", default=True) is False

    def test_get_bool_missing_returns_default(self):
        assert Configuration().get_bool("k", default=True) is True

    def test_get_bool_rejects_garbage(self):
        with pytest.raises(ConfigurationError):
            Configuration({"k": "maybe"}).get_bool("k")

    def test_get_strings_splits_comma_string(self):
        assert Configuration({"k": "item, user"}).get_strings("k") == ["item", "user"]

    def test_get_strings_keeps_list_order(self):
        assert Configuration({"k": ["user", "item"]}).get_strings("k") == ["user", "item"]

    def test_get_strings_drops_empty_entries(self):
        assert Configuration({"k": "item,,"}).get_strings("k") == ["item"]

    def test_get_strings_missing_is_empty(self):
        assert Configuration().get_strings("k") == []
