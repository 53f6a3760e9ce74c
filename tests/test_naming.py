"""Tests for figpull.naming."""

from __future__ import annotations

import pytest

from figpull.naming import (
    to_camel_case,
    to_class_name,
    to_description,
    to_pascal_case,
    to_snake_case,
    to_variable_name,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("Primary/Blue-500", "primaryBlue500"),
        ("Background Color", "backgroundColor"),
        ("text.secondary", "textSecondary"),
        ("500 Gray", "var500Gray"),
        ("Brand (Main)", "brandMain"),
        ("", "unnamed"),
        ("###", "unnamed"),
    ],
)
def test_to_variable_name(value: str, expected: str) -> None:
    assert to_variable_name(value) == expected


def test_to_camel_case_lowers_leading_word() -> None:
    assert to_camel_case("HELLO world") == "helloWorld"
    assert to_camel_case("") == ""


def test_to_pascal_case() -> None:
    assert to_pascal_case("app colors") == "AppColors"


def test_to_snake_case_for_file_names() -> None:
    assert to_snake_case("Icon/Arrow Right") == "icon_arrow_right"
    assert to_snake_case("close-Button") == "close_button"


def test_to_class_name_prefixes_leading_digit() -> None:
    assert to_class_name("my colors") == "MyColors"
    assert to_class_name("2fast") == "Class2fast"


def test_to_description_title_cases_words() -> None:
    assert to_description("background-color-light") == "Background Color Light"
    assert to_description("Primary/Blue_500") == "Primary Blue 500"
