"""Tests for catalog ingestion."""

import io
from pathlib import Path

import pandas as pd
import pytest

from catalogstats.config import IngestionConfig, WriteMode
from catalogstats.exceptions import LoadAborted, SchemaErrorKind
from catalogstats.ingestion import DelimitedSource, ProductLoader, load_products, parse_source
from catalogstats.store import ProductStore

VALID_ROWS = [
    "1,Men,Apparel,Topwear,Tshirts,Blue,Summer,2012,Casual,Basic Tee 299",
    "2,Women,Footwear,Shoes,Heels,Black,Winter,2015,Party,Strappy Heels 2499",
    "3,Men,Apparel,Bottomwear,Jeans,,,,,Slim Jeans",
]


class TestDelimitedSource:
    """Tests for row tokenizing."""

    def test_blank_lines_are_not_rows(self) -> None:
        """Test that blank lines are neither yielded nor numbered."""
        source = DelimitedSource(text="a,b\n1,2\n\n3,4\n", name="<test>", content_hash="x")
        header, rows = source.iter_rows()
        rows = list(rows)
        assert header == ["a", "b"]
        assert [r.row_number for r in rows] == [1, 2]
        assert [r.line_number for r in rows] == [2, 4]

    def test_leading_blank_lines_before_header(self) -> None:
        """Test that blank lines ahead of the header do not replace it."""
        source = DelimitedSource(text="\n\na,b\n1,2\n", name="<test>", content_hash="x")
        header, rows = source.iter_rows()
        rows = list(rows)
        assert header == ["a", "b"]
        assert [r.fields for r in rows] == [["1", "2"]]
        assert rows[0].line_number == 4

    def test_undecodable_bytes_flagged(self, tmp_path: Path) -> None:
        """Test that invalid bytes are kept and mark only their own row."""
        path = tmp_path / "latin.csv"
        path.write_bytes(b"a,b\n1,caf\xe9\n2,ok\n")
        _, rows = DelimitedSource.open(path).iter_rows()
        rows = list(rows)
        assert [r.has_undecodable_bytes for r in rows] == [True, False]

    def test_quoted_delimiter(self) -> None:
        """Test that quoted fields may contain the delimiter."""
        source = DelimitedSource(text='a,b\n1,"x, y"\n', name="<test>", content_hash="x")
        _, rows = source.iter_rows()
        assert next(rows).fields == ["1", "x, y"]

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing path raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="not found"):
            DelimitedSource.open(tmp_path / "missing.csv")

    def test_content_hash_matches_for_file_and_stream(self, sample_csv: Path) -> None:
        """Test that the same bytes hash identically from either source."""
        from_file = DelimitedSource.open(sample_csv)
        from_stream = DelimitedSource.open(io.StringIO(sample_csv.read_text(encoding="utf-8")))
        assert from_file.content_hash == from_stream.content_hash
        assert from_stream.name == "<stream>"


class TestParseSource:
    """Tests for parsing without touching a store."""

    def test_sample_counts(self, sample_csv: Path) -> None:
        """Test accepted and rejected rows of the sample catalog."""
        outcome = parse_source(sample_csv, IngestionConfig())
        assert outcome.total_rows == 10
        assert len(outcome.records) == 9
        assert len(outcome.rejections) == 1

        rejection = outcome.rejections[0]
        assert rejection.kind == SchemaErrorKind.FIELD_COUNT
        assert rejection.row_number == 6
        assert rejection.line_number == 7
        assert "Expected 10 fields, got 11" in rejection.message

    def test_no_limit_never_aborts(self, write_csv) -> None:
        """Test that max_bad_records=None collects every rejection."""
        path = write_csv(["x,Men"] * 25)
        outcome = parse_source(path, IngestionConfig(), max_bad_records=None)
        assert len(outcome.rejections) == 25

    def test_type_mismatch_and_null_kinds(self, write_csv) -> None:
        """Test that rejections record the error kind and column."""
        path = write_csv(
            [
                "abc,Men,Apparel,Topwear,Tshirts,Blue,Summer,2012,Casual,Tee",
                "4,,Apparel,Topwear,Tshirts,Blue,Summer,2012,Casual,Tee",
                "5,Men,Apparel,Topwear,Tshirts,Blue,Summer,twenty,Casual,Tee",
            ]
        )
        outcome = parse_source(path, IngestionConfig())
        kinds = [(r.kind, r.column) for r in outcome.rejections]
        assert kinds == [
            (SchemaErrorKind.TYPE_MISMATCH, "id"),
            (SchemaErrorKind.NULL_IN_NON_NULLABLE_COLUMN, "gender"),
            (SchemaErrorKind.TYPE_MISMATCH, "year"),
        ]

    def test_missing_header_column(self, write_csv) -> None:
        """Test that rows under a header lacking a column are rejected."""
        header = "id,gender,masterCategory,subCategory,articleType,baseColour,season,year,productDisplayName"
        path = write_csv(["1,Men,Apparel,Topwear,Tshirts,Blue,Summer,2012,Tee"], header=header)
        outcome = parse_source(path, IngestionConfig())
        assert outcome.rejections[0].kind == SchemaErrorKind.MISSING_COLUMN
        assert outcome.rejections[0].column == "usage"

    def test_custom_delimiter(self, tmp_path: Path) -> None:
        """Test parsing a semicolon-delimited source."""
        path = tmp_path / "semi.csv"
        path.write_text(
            "id;gender;masterCategory;subCategory;articleType;baseColour;season;year;usage;productDisplayName\n"
            "7;Men;Apparel;Topwear;Shirts;White;Fall;2013;Formal;Oxford Shirt, White\n",
            encoding="utf-8",
        )
        outcome = parse_source(path, IngestionConfig(delimiter=";"))
        assert outcome.records[0].display_name == "Oxford Shirt, White"

    def test_empty_source(self, tmp_path: Path) -> None:
        """Test that an empty file yields no rows and no error."""
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        outcome = parse_source(path, IngestionConfig())
        assert outcome.total_rows == 0
        assert outcome.header == []


class TestProductLoader:
    """Tests for loading sources into a store."""

    def test_ten_rows_one_malformed(self, sample_csv: Path) -> None:
        """Test that 10 rows with 1 wrong field count load as (9, 1)."""
        store = ProductStore()
        result = ProductLoader(IngestionConfig(max_bad_records=10), store).load(sample_csv)

        assert result.counts == (9, 1)
        assert result.records_loaded + result.records_skipped == result.total_rows
        assert result.store_rows == 9
        assert len(store) == 9
        assert result.rejections_by_kind == {SchemaErrorKind.FIELD_COUNT: 1}

    def test_nulls_stored_as_na(self, sample_csv: Path) -> None:
        """Test that blank optional fields become nulls in the store."""
        store = ProductStore()
        ProductLoader(IngestionConfig(), store).load(sample_csv)

        row = store.frame.set_index("id").loc[30039]
        assert pd.isna(row["season"])
        assert pd.isna(row["year"])
        assert row["display_name"] == "Skagen Men Black Watch, Steel"
        assert not (store.frame.select_dtypes("string") == "").any().any()

    def test_abort_leaves_store_unchanged(self, sample_csv: Path, write_csv) -> None:
        """Test that exceeding the skip limit raises and keeps the old snapshot."""
        store = ProductStore()
        ProductLoader(IngestionConfig(), store).load(write_csv(VALID_ROWS))
        before = store.fingerprint()

        with pytest.raises(LoadAborted) as exc_info:
            ProductLoader(IngestionConfig(max_bad_records=0), store).load(sample_csv)

        assert exc_info.value.records_loaded == 5
        assert exc_info.value.records_skipped == 1
        assert exc_info.value.max_bad_records == 0
        assert store.fingerprint() == before
        assert len(store) == 3

    def test_limit_is_inclusive(self, write_csv) -> None:
        """Test that exactly max_bad_records skipped rows still load."""
        path = write_csv([*VALID_ROWS, "9,Men", "10,Men"])
        result = ProductLoader(IngestionConfig(max_bad_records=2), ProductStore()).load(path)
        assert result.counts == (3, 2)

    def test_idempotent_on_fresh_stores(self, sample_csv: Path) -> None:
        """Test that loading identical input twice gives identical results."""
        first_store, second_store = ProductStore(), ProductStore()
        first = ProductLoader(IngestionConfig(), first_store).load(sample_csv)
        second = ProductLoader(IngestionConfig(), second_store).load(sample_csv)

        assert first.counts == second.counts
        assert first.source_hash == second.source_hash
        assert first_store.fingerprint() == second_store.fingerprint()

    def test_duplicate_ids_last_write_wins(self, write_csv) -> None:
        """Test that a later row with the same id replaces the earlier one."""
        path = write_csv(
            [
                *VALID_ROWS,
                "1,Men,Apparel,Topwear,Tshirts,Red,Summer,2013,Sports,Dry Fit Tee 599",
            ]
        )
        store = ProductStore()
        result = ProductLoader(IngestionConfig(), store).load(path)

        assert result.records_loaded == 4
        assert result.duplicates_replaced == 1
        assert result.store_rows == 3
        row = store.frame.set_index("id").loc[1]
        assert row["base_colour"] == "Red"

    def test_replace_mode(self, write_csv) -> None:
        """Test that a replace load discards the previous snapshot."""
        store = ProductStore()
        loader = ProductLoader(IngestionConfig(write_mode=WriteMode.REPLACE), store)
        loader.load(write_csv(VALID_ROWS, name="first.csv"))
        loader.load(write_csv(VALID_ROWS[:1], name="second.csv"))
        assert store.frame["id"].tolist() == [1]

    def test_append_mode(self, write_csv) -> None:
        """Test that an append load unions with the previous snapshot."""
        store = ProductStore()
        ProductLoader(IngestionConfig(), store).load(write_csv(VALID_ROWS[:2], name="a.csv"))

        appended = [
            "2,Women,Footwear,Shoes,Flats,Brown,Winter,2016,Casual,Ballet Flats 899",
            "4,Unisex,Accessories,Bags,Backpacks,Grey,Fall,2014,Casual,Daypack 1499",
        ]
        result = ProductLoader(
            IngestionConfig(write_mode=WriteMode.APPEND), store
        ).load(write_csv(appended, name="b.csv"))

        assert result.duplicates_replaced == 1
        assert result.store_rows == 3
        frame = store.frame.set_index("id")
        assert sorted(frame.index) == [1, 2, 4]
        assert frame.loc[2, "article_type"] == "Flats"

    def test_stream_source(self, sample_csv: Path) -> None:
        """Test loading from an open text stream."""
        stream = io.StringIO(sample_csv.read_text(encoding="utf-8"))
        result = ProductLoader(IngestionConfig(), ProductStore()).load(stream)
        assert result.counts == (9, 1)
        assert result.source_name == "<stream>"

    def test_integers_outside_int64_are_skipped(self, write_csv) -> None:
        """Test that an oversized id or year skips the row instead of failing the load."""
        path = write_csv(
            [
                *VALID_ROWS,
                "99999999999999999999,Men,Apparel,Topwear,Tshirts,Blue,Summer,2012,Casual,Tee",
                "5,Men,Apparel,Topwear,Tshirts,Blue,Summer,99999999999999999999,Casual,Tee",
            ]
        )
        store = ProductStore()
        result = ProductLoader(IngestionConfig(), store).load(path)

        assert result.counts == (3, 2)
        assert [(r.kind, r.column) for r in result.rejections] == [
            (SchemaErrorKind.TYPE_MISMATCH, "id"),
            (SchemaErrorKind.TYPE_MISMATCH, "year"),
        ]
        assert len(store) == 3

    def test_leading_blank_line_keeps_rows(self, sample_csv: Path, tmp_path: Path) -> None:
        """Test that a blank first line neither drops rows nor empties the store."""
        store = ProductStore()
        ProductLoader(IngestionConfig(), store).load(sample_csv)
        assert len(store) == 9

        padded = tmp_path / "padded.csv"
        padded.write_text("\n" + sample_csv.read_text(encoding="utf-8"), encoding="utf-8")
        result = ProductLoader(IngestionConfig(), store).load(padded)

        assert result.counts == (9, 1)
        assert result.total_rows == 10
        assert len(store) == 9

    def test_undecodable_row_is_skipped(self, tmp_path: Path, sample_csv: Path) -> None:
        """Test that a row with invalid bytes is counted as one skipped row."""
        path = tmp_path / "mixed.csv"
        path.write_bytes(
            sample_csv.read_bytes()
            + b"77,Women,Apparel,Topwear,Tops,Red,Summer,2013,Casual,Caf\xe9 Top 699\n"
        )
        store = ProductStore()
        result = ProductLoader(IngestionConfig(), store).load(path)

        assert result.counts == (9, 2)
        assert result.rejections_by_kind == {
            SchemaErrorKind.FIELD_COUNT: 1,
            SchemaErrorKind.ENCODING: 1,
        }
        encoding_rejection = result.rejections[-1]
        assert encoding_rejection.row_number == 11
        assert 77 not in store.frame["id"].tolist()

    def test_empty_source_loads_nothing(self, tmp_path: Path) -> None:
        """Test that an empty file is an empty load, not an error."""
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")
        store = ProductStore()
        result = ProductLoader(IngestionConfig(), store).load(path)
        assert result.counts == (0, 0)
        assert store.is_empty

    def test_missing_source(self, tmp_path: Path) -> None:
        """Test that a missing source raises and leaves the store alone."""
        store = ProductStore()
        with pytest.raises(FileNotFoundError):
            ProductLoader(IngestionConfig(), store).load(tmp_path / "missing.csv")
        assert store.is_empty


class TestLoadProducts:
    """Tests for the config-driven load helper."""

    def test_persists_to_configured_store(self, pipeline_config) -> None:
        """Test that the configured source is loaded and the store written."""
        result = load_products(pipeline_config)

        assert result.counts == (9, 1)
        assert pipeline_config.store_path.exists()
        reopened = ProductStore.open(pipeline_config.store_path)
        assert len(reopened) == 9

    def test_source_override(self, pipeline_config, write_csv) -> None:
        """Test loading an explicit source instead of the configured one."""
        store = ProductStore()
        result = load_products(pipeline_config, store=store, source=write_csv(VALID_ROWS))
        assert result.counts == (3, 0)
        assert len(store) == 3
