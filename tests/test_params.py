import pytest

from aggregation import params
from aggregation.cursor import SortField, sort_key
from core.errors import BadRequest


def test_limit_defaults_and_clamps():
    assert params.page_limit(None, default=25, maximum=100) == 25
    assert params.page_limit(1, default=25, maximum=100) == 1
    assert params.page_limit(500, default=25, maximum=100) == 100


@pytest.mark.parametrize("raw", [0, -3])
def test_limit_below_one_is_rejected(raw):
    with pytest.raises(BadRequest, match="limit"):
        params.page_limit(raw, default=25, maximum=100)


def test_page_number():
    assert params.page_number(None) == 1
    assert params.page_number(4) == 4
    with pytest.raises(BadRequest):
        params.page_number(0)


def test_cursor_parameter():
    key = sort_key(SortField("id"))
    assert params.decode_cursor(key, None) is None
    assert params.decode_cursor(key, "") is None
    assert params.decode_cursor(key, "17") == (17,)
    with pytest.raises(BadRequest, match="Invalid cursor parameter"):
        params.decode_cursor(key, "not-a-number")


def test_required_parameters():
    assert params.require(" NYJ ", "team") == "NYJ"
    with pytest.raises(BadRequest, match="Missing required parameter: team"):
        params.require("  ", "team")
    assert params.require_int("12", "id") == 12
    with pytest.raises(BadRequest, match="must be a number"):
        params.require_int("twelve", "id")
