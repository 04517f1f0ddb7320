from assessment.data_models import VehicleHint
from assessment.parts_catalog import base_price, build_search_query, mock_search


def test_base_price_first_keyword_wins():
    assert base_price("Front Bumper Cover") == 250.0
    assert base_price("Driver Side Mirror") == 120.0
    assert base_price("Flux Capacitor") == 150.0


def test_query_includes_vehicle():
    assert build_search_query("Hood", VehicleHint(year=2015, make="Ford", model="F-150")) == "Hood 2015 Ford F-150"
    assert build_search_query("Hood", None) == "Hood"


def test_results_sorted_by_price():
    result = mock_search("Headlight Assembly", VehicleHint(make="Honda"))
    prices = [item.price for item in result.results]
    assert prices == sorted(prices)
    assert len(result.results) == 5
    assert result.total_results >= 5
    assert result.search_query == "Headlight Assembly Honda"


def test_results_are_reproducible():
    hint = VehicleHint(year=2019, make="Honda", model="Civic")
    assert mock_search("Front Bumper", hint) == mock_search("Front Bumper", hint)


def test_listing_shape():
    listing = mock_search("Fender", VehicleHint(year=2012, make="Audi", model="A4")).results[0]
    dumped = listing.model_dump(by_alias=True)
    assert dumped["itemId"].startswith("ebay-")
    assert dumped["compatibility"] == "2012 Audi A4"
    assert "_nkw=Fender+2012+Audi+A4" in dumped["itemUrl"]
    assert 95 <= dumped["seller"]["feedbackPercentage"] <= 100
