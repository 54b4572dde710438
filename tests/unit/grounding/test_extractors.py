import pytest

from browser_wand.grounding.extractors import extract_date, extract_price, strip_site_suffix

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    ("title", "price"),
    [
        ("Sneakers now $1,299.00 at Shop", "$1,299.00"),
        ("Kettle £ 35", "£ 35"),
        ("Rice cooker RM 149.90 - Lazada", "RM 149.90"),
        ("Laptop 4,500 THB free shipping", "4,500 THB"),
        ("No price here", ""),
    ],
)
def test_extract_price(title, price):
    assert extract_price(title) == price


@pytest.mark.parametrize(
    ("title", "date"),
    [
        ("Report published 2024-05-01 by agency", "2024-05-01"),
        ("Talks collapse on Jan 5th, 2023", "Jan 5th, 2023"),
        ("Storm hits coast 12 September 2022", "12 September 2022"),
        ("Election results, November 2020 recap", "November 2020"),
        ("Nothing dated", ""),
    ],
)
def test_extract_date(title, date):
    assert extract_date(title) == date


def test_strip_site_suffix():
    assert strip_site_suffix("Best Running Shoes - Amazon.com") == "Best Running Shoes"
    assert strip_site_suffix("Markets rally | The Verge") == "Markets rally"
    assert strip_site_suffix("Plain title") == "Plain title"
    assert strip_site_suffix(" - Amazon") == "- Amazon"
