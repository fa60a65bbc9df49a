"""
Tests for the itemshift command line.
"""

import io
import json

import pytest
import yaml

from itemshift.cli import (
    EXIT_INPUT_ERROR,
    EXIT_OK,
    EXIT_USAGE_ERROR,
    EXIT_VALIDATION_MISMATCH,
    main,
)


class TestConvert:
    """Test `itemshift convert`."""

    def test_to_stdout(self, shared_items_file, capsys):
        """Convert to JSON on stdout with the summary on stderr."""
        assert main(["convert", str(shared_items_file), "-f", "json"]) == EXIT_OK
        captured = capsys.readouterr()
        data = json.loads(captured.out)
        assert list(data["Items"]) == ["water", "sandwich", "weapon_pistol", "lockpick", "phone", "id_card"]
        assert "Converted 6 items (table dialect) to JSON Format" in captured.err
        assert "Source items: 6" in captured.err

    def test_default_format_is_compact(self, pasted_fragment_file, capsys):
        """Without -f the compact format is used."""
        assert main(["convert", str(pasted_fragment_file)]) == EXIT_OK
        out = capsys.readouterr().out
        assert out.startswith("-- Compact items loader")
        assert "bandage | " in out

    def test_to_file(self, craftables_file, tmp_path, capsys):
        """Write the output to a file instead of stdout."""
        target = tmp_path / "out.lua"
        assert main(["convert", str(craftables_file), "-f", "minimal", "-o", str(target)]) == EXIT_OK
        text = target.read_text(encoding="utf-8")
        assert "add_item('pistol', 'Pistol', 100" in text
        captured = capsys.readouterr()
        assert captured.out == ""
        assert f"Wrote: {target}" in captured.err

    def test_stdin(self, monkeypatch, capsys):
        """Read the source from stdin with '-'."""
        monkeypatch.setattr("sys.stdin", io.StringIO("['bag'] = { label = 'Bag', weight = 2000 }\n"))
        assert main(["convert", "-", "-f", "csv"]) == EXIT_OK
        lines = capsys.readouterr().out.splitlines()
        assert lines[1] == "bag,bag,Bag,2000,item,default.png,false,false,true,,"

    def test_namespace(self, pasted_fragment_file, capsys):
        """The --namespace flag replaces the table name."""
        assert main(["convert", str(pasted_fragment_file), "-f", "original", "--namespace", "Core"]) == EXIT_OK
        assert capsys.readouterr().out.startswith("Core = Core or {}\n")

    def test_forced_dialect(self, shared_items_file, capsys):
        """A forced dialect is the only one tried."""
        assert main(["convert", str(shared_items_file), "--dialect", "craft"]) == EXIT_INPUT_ERROR
        assert "no valid items found (tried dialects: craft)" in capsys.readouterr().err

    def test_unknown_format(self, shared_items_file, capsys):
        """An unknown format is a usage error."""
        assert main(["convert", str(shared_items_file), "-f", "yaml"]) == EXIT_USAGE_ERROR
        assert "Unknown format 'yaml'" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        """A missing source file is an input error."""
        assert main(["convert", str(tmp_path / "missing.lua")]) == EXIT_INPUT_ERROR
        assert "Failed to read" in capsys.readouterr().err

    def test_no_items(self, no_items_file, capsys):
        """A source without items is an input error."""
        assert main(["convert", str(no_items_file)]) == EXIT_INPUT_ERROR
        assert "no valid items found" in capsys.readouterr().err

    def test_strict_mismatch(self, tmp_path, capsys):
        """A count mismatch fails only with --strict."""
        source = tmp_path / "mixed.lua"
        source.write_text("['a'] = { label = 'A' }\nb = { label = 'B' }\n", encoding="utf-8")
        assert main(["convert", str(source), "-f", "json"]) == EXIT_OK
        assert main(["convert", str(source), "-f", "json", "--strict"]) == EXIT_VALIDATION_MISMATCH
        assert "WARNING: 1 items in source, 2 converted" in capsys.readouterr().err

    def test_config_file_default_format(self, shared_items_file, tmp_path, capsys):
        """The config file supplies the default format."""
        config = tmp_path / "c.yaml"
        config.write_text("default_format: csv\n", encoding="utf-8")
        assert main(["--config", str(config), "convert", str(shared_items_file)]) == EXIT_OK
        assert capsys.readouterr().out.startswith("key,name,label,")

    def test_bad_config_value(self, shared_items_file, monkeypatch, capsys):
        """An invalid config value is a usage error."""
        monkeypatch.setenv("ITEMSHIFT_CHUNK_SIZE", "0")
        assert main(["convert", str(shared_items_file)]) == EXIT_USAGE_ERROR
        assert "chunk_size" in capsys.readouterr().err


class TestParse:
    """Test `itemshift parse`."""

    def test_summary(self, shared_items_file, capsys):
        """Show dialect, count and the first keys."""
        assert main(["parse", str(shared_items_file)]) == EXIT_OK
        out = capsys.readouterr().out
        assert "Dialect: table" in out
        assert "Items: 6" in out
        assert "  - lockpick (+2 extra)" in out
        assert "  ... and 1 more" in out

    def test_all(self, shared_items_file, capsys):
        """List every key with --all."""
        assert main(["parse", str(shared_items_file), "--all"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "  - id_card" in out
        assert "more" not in out

    def test_dump(self, shared_items_file, capsys):
        """Print every parsed record as YAML after the summary."""
        assert main(["parse", str(shared_items_file), "--dump"]) == EXIT_OK
        out = capsys.readouterr().out
        records = yaml.safe_load(out.split("Items: 6\n", 1)[1])
        assert [r["key"] for r in records] == ["water", "sandwich", "weapon_pistol", "lockpick", "phone", "id_card"]
        lockpick = records[3]
        assert lockpick["shouldClose"] is False
        assert lockpick["durability"] == 100
        assert lockpick["rarity"] == "common"

    def test_no_items(self, no_items_file, capsys):
        """A source without items is a parse error."""
        assert main(["parse", str(no_items_file)]) == EXIT_INPUT_ERROR
        assert "Parse error" in capsys.readouterr().err


class TestFormats:
    """Test `itemshift formats`."""

    def test_list(self, capsys):
        """One line per format with id, extension and title."""
        assert main(["formats"]) == EXIT_OK
        lines = capsys.readouterr().out.splitlines()
        assert len(lines) == 5
        assert lines[0].startswith("original   .lua   Original Block Format: ")
        assert any(line.startswith("json       .json  JSON Format: ") for line in lines)


class TestBuild:
    """Test `itemshift build`."""

    def test_suggested_fields(self, capsys):
        """Missing fields are filled from the name."""
        assert main(["build", "combat_pistol", "-f", "minimal"]) == EXIT_OK
        out = capsys.readouterr().out
        assert "add_item('combat_pistol', 'Combat Pistol', 2000, 'weapon', 'combat_pistol.png', false, false, '')" in out

    def test_explicit_fields(self, capsys):
        """Explicit flags override the suggestions."""
        args = ["build", "radio", "--label", "Handheld Radio", "--weight", "300",
                "--type", "tool", "--unique", "--useable", "--description", "Talk", "-f", "json"]
        assert main(args) == EXIT_OK
        radio = json.loads(capsys.readouterr().out)["Items"]["radio"]
        assert radio["label"] == "Handheld Radio"
        assert radio["weight"] == 300
        assert radio["type"] == "tool"
        assert radio["image"] == "radio.png"
        assert radio["unique"] is True
        assert radio["useable"] is True
        assert radio["description"] == "Talk"

    def test_to_file(self, tmp_path):
        """Write the built item to a file."""
        target = tmp_path / "item.lua"
        assert main(["build", "water", "-f", "original", "-o", str(target)]) == EXIT_OK
        text = target.read_text(encoding="utf-8")
        assert "        type = 'drink',\n" in text
        assert "        weight = 100,\n" in text

    def test_unknown_format(self, capsys):
        """An unknown format is a usage error."""
        assert main(["build", "water", "-f", "yaml"]) == EXIT_USAGE_ERROR
        assert "Unknown format" in capsys.readouterr().err

    def test_blank_name(self, capsys):
        """A blank name is a usage error."""
        assert main(["build", "  ", "--label", "X", "--image", "x.png"]) == EXIT_USAGE_ERROR
        assert "Missing required fields: name" in capsys.readouterr().err


class TestConfigCommand:
    """Test `itemshift config`."""

    def test_show(self, capsys):
        """Print the effective config as YAML."""
        assert main(["config"]) == EXIT_OK
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["default_format"] == "compact"
        assert data["chunk_size"] == 1000
        assert data["config_file"] is None

    def test_init(self, tmp_path, capsys):
        """Write a default config file."""
        target = tmp_path / "config.yaml"
        assert main(["config", "--init", str(target)]) == EXIT_OK
        assert target.exists()
        assert f"Wrote: {target}" in capsys.readouterr().out


class TestMain:
    """Test the top-level parser."""

    def test_no_command(self, capsys):
        """No command prints help."""
        assert main([]) == EXIT_OK
        assert "usage:" in capsys.readouterr().out

    def test_version(self, capsys):
        """Print the version and exit."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert "itemshift 0.1.0" in capsys.readouterr().out
