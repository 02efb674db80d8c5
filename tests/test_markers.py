"""Tests for markers — runtime decorators used inside test binaries."""

from __future__ import annotations

import runpy

import pytest

from testctl import markers


class TestMarkers:
    def test_bare_and_called_forms(self):
        @markers.ignore
        def bare():
            pass

        @markers.ignore("flaky")
        def called():
            pass

        assert markers.markers_of(bare) == [("ignore", ())]
        assert markers.markers_of(called) == [("ignore", ("flaky",))]

    def test_outermost_first(self):
        @markers.test_case(1, 2)
        @markers.category("Smoke")
        def adds(a, b):
            return a + b

        assert markers.markers_of(adds) == [("test_case", (1, 2)), ("category", ("Smoke",))]
        assert adds(1, 2) == 3

    def test_class_marker(self):
        @markers.test_fixture
        class Suite:
            pass

        assert markers.markers_of(Suite) == [("test_fixture", ())]

    @pytest.mark.parametrize("name", ["test_case", "test_case_source", "category"])
    def test_required_arguments(self, name):
        with pytest.raises(TypeError, match="at least one argument"):
            getattr(markers, name)()

    def test_untagged(self):
        assert markers.markers_of(object()) == []

    def test_sample_binary_is_importable(self, sample_binary):
        namespace = runpy.run_path(str(sample_binary / "NsA.py"))
        method = namespace["ClassB"].SlowSmoke
        assert markers.markers_of(namespace["ClassB"]) == [("test_fixture", ())]
        assert ("category", ("Slow",)) in markers.markers_of(method)
