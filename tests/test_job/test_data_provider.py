"""Tests for DataModelProvider: construct once, build every call."""

from __future__ import annotations

import logging
import random

import pytest

from recsys_runner.components.base import DataModel, SplitMode
from recsys_runner.errors import BuildFailure, ComponentNotFound, UnknownSplitMode
from recsys_runner.job.data_provider import DataModelProvider
from recsys_runner.job.registry import register_component, unregister_component


class TestEnsureBuilt:
    def test_constructs_once_builds_every_call(self, fakes, make_conf):
        conf = make_conf()
        provider = DataModelProvider()
        first = provider.ensure_built(conf)
        second = provider.ensure_built(conf)
        assert first is second
        assert len(fakes.RecordingDataModel.instances) == 1
        assert provider.build_count == 2
        assert fakes.events.count("data.build") == 2

    def test_random_source_reaches_data_model(self, fakes, make_conf):
        rng = random.Random(7)
        model = DataModelProvider(rng=rng).ensure_built(make_conf())
        assert model.rng is rng

    def test_missing_format_raises(self, fakes, make_conf):
        conf = make_conf()
        conf.unset("data.model.format")
        with pytest.raises(ComponentNotFound):
            DataModelProvider().ensure_built(conf)

    def test_build_error_becomes_build_failure(self, fakes, make_conf):
        provider = DataModelProvider()
        with pytest.raises(BuildFailure, match="corrupt input") as exc_info:
            provider.ensure_built(make_conf({"data.model.format": "brokenbuild"}))
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert provider.build_count == 0

    def test_job_errors_pass_through_unwrapped(self, fakes, make_conf):
        with pytest.raises(UnknownSplitMode):
            DataModelProvider().ensure_built(make_conf({"data.model.splitter": "bogus"}))


class _BareDataModel(DataModel):
    """Skips ``DataModel.__init__`` and never sets the rating matrices."""

    splitter_kind = SplitMode.GIVEN

    def __init__(self, conf, rng=None):
        self.conf = conf

    def build_data_model(self):
        self.built = True


class TestDebugSummary:
    def test_model_without_matrices_still_builds(self, make_conf, caplog):
        register_component("data_model", "bare")(_BareDataModel)
        try:
            provider = DataModelProvider()
            with caplog.at_level(logging.DEBUG, logger="recsys_runner.job.data_provider"):
                model = provider.ensure_built(make_conf({"data.model.format": "bare"}))
        finally:
            unregister_component("data_model", "bare")

        assert model.built is True
        assert provider.build_count == 1
        assert "train_users=0 | test_users=0" in caplog.text
