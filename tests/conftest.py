"""Shared fixtures: sample test binaries, plugin modules and controller configs."""

from __future__ import annotations

import textwrap
import zipfile
from pathlib import Path

import pytest
import yaml

import testctl.plugins.catalog_reader as catalog_reader_module

NS_A_SOURCE = '''\
"""Sample bundle module A."""
from testctl.markers import category, explicit, ignore, test, test_case, test_fixture


@test_fixture
class ClassB:
    @test
    def MethodC(self):
        pass

    @test_case(1, 2)
    @test_case(3, 4)
    @category("Smoke")
    def Adds(self, a, b):
        pass

    @test
    @category("Slow")
    @category("Smoke")
    def SlowSmoke(self):
        pass

    @test
    @ignore("flaky")
    def Ignored(self):
        pass

    @test
    @explicit
    def ExplicitOnly(self):
        pass

    @test
    def _private(self):
        pass

    def helper(self):
        pass

    @test
    def MethodC(self):  # noqa: F811
        pass


@test_fixture
@ignore("broken")
class IgnoredFixture:
    @test
    def Hidden(self):
        pass


@test_fixture
class _PrivateFixture:
    @test
    def Hidden(self):
        pass


class NotAFixture:
    @test
    def Hidden(self):
        pass
'''

NS_B_SOURCE = '''\
"""Sample bundle module B."""
import testctl.markers as m


@m.test_fixture
class ClassD:
    cases = [1, 2]

    @m.test_case_source("cases")
    @m.category("Slow")
    def FromSource(self, case):
        pass

    @m.test
    @m.category("Fast")
    async def Quick(self):
        pass


@m.test_fixture
@m.explicit
class ExplicitFixture:
    @m.test
    def Hidden(self):
        pass


@m.test_fixture()
class ClassE:
    @m.test()
    def Only(self):
        pass
'''

SAMPLE_NAMESPACES = {"NsA", "NsB"}
SAMPLE_CLASSES = {"NsA.ClassB", "NsB.ClassD", "NsB.ClassE"}
SAMPLE_FUNCTIONS = {
    "NsA.ClassB.MethodC",
    "NsA.ClassB.Adds",
    "NsA.ClassB.SlowSmoke",
    "NsB.ClassD.FromSource",
    "NsB.ClassD.Quick",
    "NsB.ClassE.Only",
}

PLUGIN_TEMPLATE = '''\
from testctl.plugins.base import Plugin, PluginFactory
from testctl.plugins.types import PluginType


class DummyPlugin(Plugin):
    name = "Dummy"

    def __init__(self, config_path):
        self.config_path = config_path
        self.plugin_type = PluginType.{member}

    def execute(self):
        return True


class DummyFactory(PluginFactory):
    def get_plugin(self, config_path):
        return DummyPlugin(config_path)
'''


@pytest.fixture()
def sample_binary(tmp_path: Path) -> Path:
    """A directory binary with two namespaces, NsA and NsB."""
    root = tmp_path / "bundle"
    root.mkdir()
    (root / "NsA.py").write_text(NS_A_SOURCE, encoding="utf-8")
    (root / "NsB.py").write_text(NS_B_SOURCE, encoding="utf-8")
    return root


@pytest.fixture()
def sample_archive(tmp_path: Path) -> Path:
    """The sample binary packed into a zip archive."""
    archive = tmp_path / "bundle.pyz"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("NsA.py", NS_A_SOURCE)
        zf.writestr("NsB.py", NS_B_SOURCE)
    return archive


@pytest.fixture()
def write_module(tmp_path: Path):
    """Return a helper that writes a Python module under ``tmp_path/plugins``."""
    plugins_dir = tmp_path / "plugins"
    plugins_dir.mkdir(exist_ok=True)

    def _write(name: str, source: str) -> Path:
        path = plugins_dir / f"{name}.py"
        path.write_text(textwrap.dedent(source), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def dummy_plugin_path(write_module):
    """Return a helper that writes a one-factory plugin of the given capability."""
    def _write(member: str = "TEST_READER", name: str = "dummy") -> Path:
        return write_module(name, PLUGIN_TEMPLATE.format(member=member))
    return _write


@pytest.fixture()
def catalog_file(tmp_path: Path) -> Path:
    """A persisted catalog with comments, blank lines and a duplicate."""
    p = tmp_path / "catalog.txt"
    p.write_text(
        "# generated by testctl extract\n"
        "\n"
        '"path/to/a.bin" | NsA.ClassB.MethodC\n'
        '   "path/to/a.bin" | NsA.ClassB.Adds   \n'
        "# trailing comment\n"
        '"path/to/a.bin" | NsA.ClassB.MethodC\n',
        encoding="utf-8",
    )
    return p


@pytest.fixture()
def controller_yaml(tmp_path: Path, catalog_file: Path) -> Path:
    """controller.yaml pointing at the built-in catalog reader."""
    cfg = {
        "plugins": [
            {"path": catalog_reader_module.__file__, "type": "TestReader"},
        ],
        "reader": {"input_file": catalog_file.name},
    }
    p = tmp_path / "controller.yaml"
    with open(p, "w", encoding="utf-8") as fh:
        yaml.dump(cfg, fh)
    return p


@pytest.fixture()
def sample_expected() -> dict[str, set[str]]:
    """Catalog names the sample binary yields at each level."""
    return {
        "namespace": set(SAMPLE_NAMESPACES),
        "class": set(SAMPLE_CLASSES),
        "function": set(SAMPLE_FUNCTIONS),
    }
