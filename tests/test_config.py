# tests/test_config.py
"""Walk settings and generator tables."""

import pytest

from mcsl.config import WalkConfig, load_generators
from mcsl.errors import ErrorCode, GeneratorLoadError


class TestWalkConfig:

    def test_defaults_are_valid(self):
        assert WalkConfig().validate() == []

    def test_warnings(self):
        warnings = WalkConfig(count=0, max_steps=-1, validate_first=False).validate()
        assert len(warnings) == 3
        assert "count must be positive" in warnings


class TestLoadGenerators:

    @pytest.fixture
    def module_dir(self, tmp_path, monkeypatch):
        monkeypatch.syspath_prepend(str(tmp_path))
        return tmp_path

    def test_loads_table(self, module_dir):
        (module_dir / "mcsl_gens_ok.py").write_text(
            "GENERATORS = {'Spawn': lambda model: 'spawn()'}\n")
        table = load_generators("mcsl_gens_ok")
        assert table["Spawn"](None) == "spawn()"

    def test_missing_module(self):
        with pytest.raises(GeneratorLoadError) as info:
            load_generators("mcsl_no_such_module")
        assert info.value.code is ErrorCode.GENERATOR_IMPORT

    def test_missing_table(self, module_dir):
        (module_dir / "mcsl_gens_empty.py").write_text("OTHER = 1\n")
        with pytest.raises(GeneratorLoadError) as info:
            load_generators("mcsl_gens_empty")
        assert info.value.code is ErrorCode.GENERATOR_TABLE

    def test_non_callable_entries(self, module_dir):
        (module_dir / "mcsl_gens_bad.py").write_text(
            "GENERATORS = {'Spawn': 'spawn', 'Kill': 3, 'Ok': print}\n")
        with pytest.raises(GeneratorLoadError, match="Kill, Spawn"):
            load_generators("mcsl_gens_bad")
