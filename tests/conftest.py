"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from catalogstats.config import PipelineConfig, config_from_dict
from catalogstats.schemas import ProductRecord
from catalogstats.store import records_to_frame

HEADER = (
    "id,gender,masterCategory,subCategory,articleType,baseColour,"
    "season,year,usage,productDisplayName"
)

# 10 data rows; row 6 has an unquoted comma in the display name
SAMPLE_ROWS = [
    "15970,Men,Apparel,Topwear,Shirts,Navy Blue,Fall,2011,Casual,Turtle Check Men Navy Blue Shirt 450",
    "39386,Men,Apparel,Bottomwear,Jeans,Blue,Summer,2012,Casual,Peter England Men Party Blue Jeans 1299",
    "59263,Women,Accessories,Watches,Watches,Silver,Winter,2016,Casual,Titan Women Silver Watch 3495",
    "21379,Men,Apparel,Bottomwear,Track Pants,Black,Fall,2011,Casual,Manchester United Men Solid Black Track Pants",
    "53759,Men,Apparel,Topwear,Tshirts,Grey,Summer,2012,Casual,Puma Men Grey T-shirt 799",
    "1855,Men,Apparel,Topwear,Tshirts,Grey,Summer,2011,Casual,Inkfruit Mens Chain, Reaction T-shirt",
    "30805,Men,Apparel,Topwear,Shirts,Green,Summer,2012,Ethnic,Fabindia Men Striped Green Shirt",
    "26960,Women,Apparel,Topwear,Shirts,Purple,Summer,2012,Casual,Jealous 21 Women Purple Shirt 499",
    "29114,Men,Accessories,Socks,Socks,Navy Blue,Summer,2012,Casual,Puma Men Pack of 3 Socks",
    '30039,Men,Accessories,Watches,Watches,Black,,,Casual,"Skagen Men Black Watch, Steel"',
]


def make_csv(rows: list[str], header: str = HEADER) -> str:
    """Join a header and data rows into delimited text."""
    return "\n".join([header, *rows]) + "\n"


def make_record(**overrides: Any) -> ProductRecord:
    """Build a valid ProductRecord, overriding selected fields."""
    values: dict[str, Any] = {
        "id": 1,
        "gender": "Men",
        "master_category": "Apparel",
        "sub_category": "Topwear",
        "article_type": "Tshirts",
        "base_colour": "Blue",
        "season": "Summer",
        "year": 2012,
        "usage": "Casual",
        "display_name": "Plain T-shirt 499",
    }
    values.update(overrides)
    return ProductRecord(**values)


@pytest.fixture
def sample_csv(tmp_path: Path) -> Path:
    """Write the 10-row sample catalog (one malformed row) to a file."""
    path = tmp_path / "styles.csv"
    path.write_text(make_csv(SAMPLE_ROWS), encoding="utf-8")
    return path


@pytest.fixture
def product_frame() -> pd.DataFrame:
    """Create a small typed product frame for aggregation tests."""
    records = [
        make_record(id=1, gender="Men", article_type="Tshirts", base_colour="Blue", year=2011),
        make_record(id=2, gender="Men", article_type="Tshirts", base_colour="Black", year=2012),
        make_record(id=3, gender="Men", article_type="Shirts", base_colour="Blue", year=2012),
        make_record(
            id=4,
            gender="Women",
            master_category="Footwear",
            sub_category="Shoes",
            article_type="Heels",
            base_colour=None,
            season=None,
            year=2015,
            display_name="Catwalk Heels 1899",
        ),
        make_record(
            id=5,
            gender="Women",
            article_type="Tops",
            base_colour="Black",
            year=None,
            usage=None,
            display_name="Vero Moda Top",
        ),
        make_record(id=6, gender="Women", article_type="Tops", base_colour="White", year=2016),
    ]
    return records_to_frame(records)


@pytest.fixture
def base_config(tmp_path: Path, sample_csv: Path) -> dict[str, Any]:
    """Create a minimal configuration dictionary for testing."""
    return {
        "project": "test-catalog",
        "data": {
            "root": str(tmp_path),
            "source": sample_csv.name,
        },
        "partitioning": {
            "ranges": [[2010, 2012], [2012, 2015], [2015, 2020]],
        },
        "output": {"root": str(tmp_path / "output")},
    }


@pytest.fixture
def pipeline_config(base_config: dict[str, Any]) -> PipelineConfig:
    """Build a validated PipelineConfig from the base configuration."""
    return config_from_dict(base_config)


@pytest.fixture
def write_csv(tmp_path: Path):
    """Factory writing data rows (under the standard header) to a CSV file."""

    def _write(rows: list[str], name: str = "catalog.csv", header: str = HEADER) -> Path:
        path = tmp_path / name
        path.write_text(make_csv(rows, header=header), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def record():
    """Factory for valid ProductRecords with field overrides."""
    return make_record
