"""Tests for generator options."""

import pytest

from seed_codegen import ConfigError, GeneratorOptions, load_options
from seed_codegen.config import options_from_mapping


class TestGeneratorOptions:
    """Tests for the options dataclass."""

    def test_defaults(self):
        """Test the default option values."""
        options = GeneratorOptions()
        assert options.id_suffix == "Id"
        assert options.detect_cycles is True

    def test_merged_ignores_none(self):
        """Test that None overrides leave values unchanged."""
        options = GeneratorOptions(id_suffix="Key")
        merged = options.merged({"id_suffix": None, "detect_cycles": False})
        assert merged == GeneratorOptions(id_suffix="Key", detect_cycles=False)
        assert options.detect_cycles is True


class TestOptionsFromMapping:
    """Tests for validating option mappings."""

    def test_empty(self):
        """Test that an empty mapping gives defaults."""
        assert options_from_mapping(None) == GeneratorOptions()
        assert options_from_mapping({}) == GeneratorOptions()

    def test_unknown_option(self):
        """Test that misspelled options are rejected."""
        with pytest.raises(ConfigError, match="Unknown option"):
            options_from_mapping({"idsuffix": "Id"})

    def test_bad_types(self):
        """Test that option values are type checked."""
        with pytest.raises(ConfigError, match="id_suffix"):
            options_from_mapping({"id_suffix": 1})
        with pytest.raises(ConfigError, match="detect_cycles"):
            options_from_mapping({"detect_cycles": "yes"})

    def test_not_a_mapping(self):
        """Test that a list is rejected."""
        with pytest.raises(ConfigError, match="Expected a mapping"):
            options_from_mapping(["id_suffix"])


class TestLoadOptions:
    """Tests for reading YAML configuration files."""

    def test_top_level(self, tmp_path):
        """Test options at the top level of the file."""
        path = tmp_path / "seed.yaml"
        path.write_text("id_suffix: Ref\ndetect_cycles: false\n")
        assert load_options(path) == GeneratorOptions(id_suffix="Ref", detect_cycles=False)

    def test_section(self, tmp_path):
        """Test options under a seed_codegen section."""
        path = tmp_path / "seed.yaml"
        path.write_text("seed_codegen:\n  id_suffix: ''\n")
        assert load_options(path) == GeneratorOptions(id_suffix="")

    def test_empty_file(self, tmp_path):
        """Test that an empty file gives defaults."""
        path = tmp_path / "seed.yaml"
        path.write_text("")
        assert load_options(path) == GeneratorOptions()

    def test_missing_file(self, tmp_path):
        """Test that a missing file is reported."""
        with pytest.raises(ConfigError, match="Config file not found"):
            load_options(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test that malformed YAML is reported."""
        path = tmp_path / "seed.yaml"
        path.write_text("id_suffix: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_options(path)

    def test_invalid_utf8(self, tmp_path):
        """Test that a config file that is not UTF-8 is reported."""
        path = tmp_path / "seed.yaml"
        path.write_bytes(b"id_suffix: \xff\n")
        with pytest.raises(ConfigError):
            load_options(path)

    def test_directory_instead_of_file(self, tmp_path):
        """Test that an unreadable config path is reported."""
        with pytest.raises(ConfigError, match="Cannot read"):
            load_options(tmp_path)
