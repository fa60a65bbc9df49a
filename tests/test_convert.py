"""
Tests for the conversion driver and the end-to-end pipeline.
"""

import json
import logging

import pytest

from itemshift.convert import (
    DEFAULT_CHUNK_SIZE,
    convert_file,
    convert_items,
    convert_text,
    format_size,
    iter_batches,
    iter_convert,
    merge_duplicate_keys,
    validate_conversion,
)
from itemshift.formats import FORMATS, UnknownFormatError
from itemshift.model import Item
from itemshift.parser import NoItemsFoundError, SourceReadError


def make_items(count, prefix="item"):
    """Build `count` simple items with predictable keys."""
    return [Item(key=f"{prefix}_{i}", label=f"Item {i}", weight=i) for i in range(count)]


class TestExamples:
    """End-to-end conversions of small inputs."""

    def test_table_to_json(self):
        """One-line table source to JSON."""
        source = "Items = { ['water'] = { label = 'Water', weight = 50, unique = false }, }"
        result = convert_text(source, "json")
        data = json.loads(result.text)
        assert json.dumps(data, separators=(",", ":")) == (
            '{"Items":{"water":{"name":"water","label":"Water","weight":50,"type":"item",'
            '"image":"default.png","unique":false,"useable":false,"shouldClose":true}}}'
        )
        assert result.dialect == "table"

    def test_fragment_to_compact(self):
        """Pasted fragment to compact."""
        source = "['bag'] = { label = 'Bag', weight = 2000, useable = true, combinable = nil }"
        result = convert_text(source, "compact")
        assert "bag | Bag | 2000 | item | default.png | false | true |  | \n" in result.text
        assert result.dialect == "flexible"

    def test_craft_to_minimal(self):
        """Craftable call to minimal."""
        source = '[\'pistol\'] = createCraftable("pistol","Pistol","pistol.png","weapon","black","A basic pistol")'
        result = convert_text(source, "minimal")
        assert result.text.endswith(
            "add_item('pistol', 'Pistol', 100, 'weapon', 'pistol.png', true, true, 'A basic pistol')\n"
        )
        assert result.dialect == "craft"

    def test_extra_field_in_table_and_compact(self):
        """Extra fields reach the table and compact outputs."""
        source = "Items = {\n['kit'] = {\nlabel = 'Kit',\ndurability = 100,\n},\n}"
        assert "\n        durability = 100,\n" in convert_text(source, "original").text
        compact = convert_text(source, "compact").text
        assert compact.rstrip("\n").splitlines()[-1].endswith(" | durability=100")

    def test_nothing_recognizable(self):
        """Source without items raises NoItemsFoundError."""
        with pytest.raises(NoItemsFoundError, match="no valid items found"):
            convert_text("local x = 1\nprint(x)\n", "json")


class TestChunkedDriver:
    """Test the direct and batched paths."""

    def test_single_batch_up_to_chunk_size(self):
        """Up to chunk_size items form one batch."""
        batches = list(iter_batches(make_items(DEFAULT_CHUNK_SIZE)))
        assert len(batches) == 1

    def test_batches_above_chunk_size(self):
        """Larger inputs are sliced into chunk_size batches."""
        batches = list(iter_batches(make_items(2500)))
        assert [len(b) for b in batches] == [1000, 1000, 500]

    def test_invalid_chunk_size(self):
        """A chunk size below 1 is rejected."""
        with pytest.raises(ValueError):
            list(iter_batches(make_items(3), chunk_size=0))

    @pytest.mark.parametrize("format_id", sorted(FORMATS))
    def test_batched_output_equals_single_pass(self, format_id):
        """Batching does not change the output."""
        items = make_items(2500)
        batched = convert_items(items, format_id)
        single = convert_items(items, format_id, chunk_size=len(items))
        assert batched == single

    def test_duplicate_key_across_batches(self):
        """A key repeated in a later batch is written once, as in a single pass."""
        items = [Item(key="dup", label="First")] + make_items(1000) + [Item(key="dup", label="Last")]
        batched = convert_items(items, "json")
        single = convert_items(items, "json", chunk_size=len(items))
        assert batched == single
        assert batched.count('"dup":') == 1
        data = json.loads(batched)
        assert list(data["Items"])[0] == "dup"
        assert data["Items"]["dup"]["label"] == "Last"

    def test_merge_duplicate_keys(self):
        """Last record wins at the first position; keyless items are dropped."""
        items = [Item(key="a", label="1"), Item(key=None), Item(key="b"), Item(key="a", label="2")]
        merged = merge_duplicate_keys(items)
        assert [i.key for i in merged] == ["a", "b"]
        assert merged[0].label == "2"

    def test_batched_json_is_valid(self):
        """Batched JSON parses and keeps item order."""
        items = make_items(2500)
        data = json.loads(convert_items(items, "json"))
        assert list(data["Items"]) == [item.key for item in items]

    def test_order_preserved(self):
        """Batches are written in input order."""
        items = make_items(1500)
        lines = convert_items(items, "minimal").splitlines()
        calls = [line for line in lines if line.startswith("add_item(")]
        assert calls[0].startswith("add_item('item_0'")
        assert calls[-1].startswith("add_item('item_1499'")
        assert len(calls) == 1500

    def test_progress_is_monotonic(self):
        """Progress is reported after each batch and ends at 100."""
        reported = []
        convert_items(make_items(2500), "csv", progress=reported.append)
        assert reported == [40.0, 80.0, 100.0]

    def test_progress_on_direct_path(self):
        """The direct path reports 100 once."""
        reported = []
        convert_items(make_items(10), "csv", progress=reported.append)
        assert reported == [100.0]

    def test_pause_every_five_batches(self):
        """The pause hook runs after every fifth batch."""
        pauses = []
        convert_items(make_items(11000), "minimal", pause=lambda: pauses.append(True))
        assert len(pauses) == 2

    def test_callbacks_do_not_change_output(self):
        """Progress and pause callbacks do not change the output."""
        items = make_items(6000)
        plain = convert_items(items, "compact")
        observed = convert_items(items, "compact", progress=lambda p: None, pause=lambda: None)
        assert plain == observed

    def test_iter_convert_stream(self):
        """Stream fragments join into the full document."""
        fragments = list(iter_convert(make_items(2001), "json"))
        # header, three batches with two separators, footer
        assert len(fragments) == 7
        assert fragments[2] == ","
        assert "".join(fragments) == convert_items(make_items(2001), "json")

    def test_keyless_batch_skipped(self):
        """A batch with only keyless items adds no separator."""
        items = [Item(key=None)] * 3 + [Item(key="a")]
        text = convert_items(items, "json", chunk_size=2)
        assert json.loads(text) == json.loads(convert_items([Item(key="a")], "json"))

    def test_unknown_format(self):
        """An unknown format raises UnknownFormatError."""
        with pytest.raises(UnknownFormatError):
            convert_items(make_items(1), "yaml")


class TestValidation:
    """Test the source vs. converted count report."""

    def test_matching_counts(self, shared_items_file):
        """Counts match for a well-formed table."""
        result = convert_file(shared_items_file, "json")
        report = result.validation
        assert report.matches
        assert report.source_count == 6
        assert report.first_keys == ["water", "sandwich", "weapon_pistol", "lockpick", "phone"]
        assert report.last_keys == ["lockpick", "phone", "id_card"]

    def test_mismatch_logged(self, caplog):
        """A count mismatch is logged as a warning."""
        source = "['a'] = { label = 'A' }\nb = { label = 'B' }"
        with caplog.at_level(logging.WARNING, logger="itemshift.convert"):
            report = convert_text(source, "json").validation
        assert not report.matches
        assert report.source_count == 1
        assert report.converted_count == 2
        assert "mismatch" in caplog.text

    def test_summary(self):
        """Summary lists the counts without a warning."""
        report = validate_conversion("['a'] = {", [Item(key="a")])
        summary = report.summary()
        assert "Source items: 1" in summary
        assert "Converted items: 1" in summary
        assert "WARNING" not in summary


class TestResult:
    """Test ConversionResult and the file pipeline."""

    def test_result_fields(self, craftables_file):
        """Result properties for a CSV conversion."""
        result = convert_file(craftables_file, "csv")
        assert result.item_count == 3
        assert result.format_id == "csv"
        assert result.extension == "csv"
        assert result.filename == "converted-items-csv.csv"
        assert result.byte_size == len(result.text.encode("utf-8"))

    def test_missing_file(self, tmp_path):
        """A missing file raises SourceReadError."""
        with pytest.raises(SourceReadError):
            convert_file(tmp_path / "nope.lua")

    def test_unknown_format_before_reading(self, tmp_path):
        """The format is checked before the file is read."""
        with pytest.raises(UnknownFormatError):
            convert_file(tmp_path / "nope.lua", "yaml")

    def test_namespace_option(self, pasted_fragment_file):
        """The namespace option reaches the Lua header."""
        result = convert_file(pasted_fragment_file, "minimal", namespace="Shared")
        assert "Shared.Items = Shared.Items or {}" in result.text
        assert "QBShared" not in result.text


class TestFormatSize:
    """Test human readable sizes."""

    @pytest.mark.parametrize("size,expected", [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (1048576, "1 MB"),
        (1288490189, "1.2 GB"),
    ])
    def test_sizes(self, size, expected):
        """Format byte counts for display."""
        assert format_size(size) == expected
