import pytest

from ipacheck.config.constants import coerce_bool, coerce_int


@pytest.mark.parametrize("value", ["1", "true", "YES", " on "])
def test_coerce_bool_truthy(value: str) -> None:
    assert coerce_bool(value) is True


@pytest.mark.parametrize("value", ["0", "false", "No", "off"])
def test_coerce_bool_falsy(value: str) -> None:
    assert coerce_bool(value, default=True) is False


def test_coerce_bool_falls_back_to_default() -> None:
    assert coerce_bool(None, default=True) is True
    assert coerce_bool("maybe", default=True) is True
    assert coerce_bool("", default=False) is False
    assert coerce_bool(0, default=True) is False


def test_coerce_int_accepts_integers_and_digit_strings() -> None:
    assert coerce_int(3) == 3
    assert coerce_int(" 7 ") == 7
    assert coerce_int("-2") == -2


@pytest.mark.parametrize("value", [True, 1.5, "1.5", "two", "", None])
def test_coerce_int_rejects_other_values(value: object) -> None:
    with pytest.raises(ValueError):
        coerce_int(value)
