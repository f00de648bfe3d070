"""
Tests for the in-process C++ demangler and the diagnostic fallback chain.
"""
import pytest
from unittest.mock import patch, MagicMock
from shiba_demangle.parsing import cxxabi, render_symbol


class TestCxaDemangle:

    @pytest.mark.skipif(not cxxabi.is_available(), reason="no C++ runtime library")
    def test_demangles_itanium_symbol(self):
        assert cxxabi.cxa_demangle("_Z3foov") == "foo()"

    @pytest.mark.skipif(not cxxabi.is_available(), reason="no C++ runtime library")
    def test_invalid_name_returns_none(self):
        assert cxxabi.cxa_demangle("not_mangled!") is None

    def test_missing_runtime_returns_none(self):
        with patch.object(cxxabi, "is_available", return_value=False):
            assert cxxabi.cxa_demangle("_Z3foov") is None

    def test_allocation_failure_returns_none(self):
        def failing(name, buf, length, status):
            status._obj.value = -1
            return None

        with patch.object(cxxabi, "is_available", return_value=True), \
                patch.object(cxxabi, "_cxa_demangle", side_effect=failing):
            assert cxxabi.cxa_demangle("_Z3foov") is None
            assert render_symbol("_Z3foov", generic=cxxabi.cxa_demangle) == "_Z3foov"


class TestRenderSymbol:
    """Shiba decoder -> generic demangler -> raw text."""

    def test_primary_decoder_wins(self):
        generic = MagicMock(return_value="should not be used")
        assert render_symbol("_WFM3Foo3bar_", generic=generic) == "Foo.bar()"
        generic.assert_not_called()

    def test_generic_fallback(self):
        generic = MagicMock(return_value="foo()")
        assert render_symbol("_Z3foov", generic=generic) == "foo()"
        generic.assert_called_once_with("_Z3foov")

    def test_raw_fallback(self):
        generic = MagicMock(return_value=None)
        assert render_symbol("main", generic=generic) == "main"

    def test_failed_shiba_symbol_reaches_generic(self):
        generic = MagicMock(return_value=None)
        assert render_symbol("_WC3foo_", generic=generic) == "_WC3foo_"
        generic.assert_called_once_with("_WC3foo_")

    def test_no_generic(self):
        assert render_symbol("_Z3foov", generic=None) == "_Z3foov"
