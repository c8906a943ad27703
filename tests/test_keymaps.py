"""
Tests for key classification, display strings and text-input lookup.
"""

from calcexpr import KeyMaps
from calcexpr import config_manager
from calcexpr.KeyMaps import Key


class TestClassification:
    def test_dig_val(self):
        assert KeyMaps.dig_val(Key.DIGIT_7) == 7
        assert KeyMaps.dig_val(Key.DEC_POINT) == KeyMaps.NOT_DIGIT
        assert KeyMaps.dig_val(Key.OP_ADD) == KeyMaps.NOT_DIGIT

    def test_kinds(self):
        assert KeyMaps.is_binary(Key.OP_POW)
        assert not KeyMaps.is_binary(Key.OP_SQRT)
        assert KeyMaps.is_suffix(Key.OP_PCT)
        assert not KeyMaps.is_suffix(Key.RPAREN)
        assert KeyMaps.is_function(Key.FUN_LOG)
        assert not KeyMaps.is_function(Key.OP_SQRT)

    def test_saved_ids_are_stable(self):
        assert int(Key.OP_ADD) == 20
        assert int(Key.FUN_SIN) == 50
        assert int(Key.CONST_E) == 71


class TestDisplay:
    def test_to_string(self):
        assert KeyMaps.to_string(Key.OP_SUB) == "−"
        assert KeyMaps.to_string(Key.FUN_ARCTAN) == "arctan("
        assert KeyMaps.to_string(Key.DIGIT_3) == "3"

    def test_to_string_without_strings_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_manager, "ui_strings", tmp_path / "none.json")
        assert KeyMaps.to_string(Key.CONST_PI) == "π"

    def test_translate_result(self, monkeypatch):
        assert KeyMaps.translate_result("1.5") == "1.5"
        monkeypatch.setattr(config_manager, "load_setting_value",
                            lambda key: "," if key == "decimal_separator" else 0)
        assert KeyMaps.translate_result("1.5") == "1,5"


class TestTextLookup:
    def test_key_for_char(self):
        assert KeyMaps.key_for_char("4") is Key.DIGIT_4
        assert KeyMaps.key_for_char("*") is Key.OP_MUL
        assert KeyMaps.key_for_char("-") is Key.OP_SUB
        assert KeyMaps.key_for_char("#") is None
        assert KeyMaps.key_for_char("٣") is None

    def test_fun_for_string(self):
        assert KeyMaps.fun_for_string("2+sin(3)", 2) == (Key.FUN_SIN, 4)
        assert KeyMaps.fun_for_string("arcsin(1)", 0) == (Key.FUN_ARCSIN, 7)
        assert KeyMaps.fun_for_string("asin(1)", 0) == (Key.FUN_ARCSIN, 5)
        assert KeyMaps.fun_for_string("pi", 0) == (Key.CONST_PI, 2)
        assert KeyMaps.fun_for_string("sin", 0) is None
        assert KeyMaps.fun_for_string("e", 0) is None
