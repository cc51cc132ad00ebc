from __future__ import annotations

from types import SimpleNamespace

from tablekit.models import Column, Container, TextLeaf
from tablekit.services.diagnostics import EXTRACTION, DiagnosticsCollector
from tablekit.services.value_resolver import (
    FILTER,
    MISSING,
    SORT,
    DefaultAccessor,
    ValueResolver,
    flatten_display_text,
    key_variants,
    resolve,
)
from tests.factories import key_column, make_units, render_column


def _boom(*_args):
    raise RuntimeError("broken renderer")


def test_override_wins_per_purpose():
    col = key_column(
        "amount",
        sort_value=lambda r: r["amount"] * 100,
        filter_value=lambda r: f"OMR {r['amount']}",
    )
    rec = {"amount": 3}
    assert resolve(rec, col, SORT) == 300
    assert resolve(rec, col, FILTER) == "OMR 3"


def test_override_result_used_even_when_none():
    col = key_column("amount", sort_value=lambda r: None)
    assert resolve({"amount": 5}, col, SORT) is None
    # filter purpose has no override and falls back to the property
    assert resolve({"amount": 5}, col, FILTER) == 5


def test_direct_property_on_mapping_and_object():
    col = render_column("rent", lambda r, i: "rendered")
    assert resolve({"rent": 450}, col) == 450
    assert resolve(SimpleNamespace(rent=380), col) == 380


def test_direct_property_beats_rendered_content():
    col = render_column("tenant", lambda r, i: "Display Name")
    assert resolve({"tenant": "raw"}, col) == "raw"


def test_null_property_falls_through_to_render():
    col = render_column("tenant", lambda r, i: "Fallback")
    assert resolve({"tenant": None}, col) == "Fallback"


def test_dotted_path_with_bracket_index():
    units = make_units()
    name_col = render_column("building.name", lambda r, i: None)
    floor_col = render_column("building.floors[0].label", lambda r, i: None)
    assert resolve(units[0], name_col) == "Palm Towers"
    assert resolve(units[0], floor_col) == "Ground"
    # empty floors list short-circuits to missing
    assert resolve(units[1], floor_col) is None


def test_rendered_primitive_and_tree():
    assert resolve({}, render_column("n", lambda r, i: 42)) == 42
    tree = Container(TextLeaf("Villa"), Container([TextLeaf(" 3 "), None]))
    assert resolve({}, render_column("unit", lambda r, i: tree)) == "Villa 3"


def test_blank_render_falls_through_to_key_variants():
    col = render_column("unitNumber", lambda r, i: "   ")
    assert resolve({"unit_number": "A-101"}, col) == "A-101"


def test_key_variant_suffix_lookup():
    col = render_column("tenant", lambda r, i: None)
    assert resolve({"tenantName": "Zed"}, col) == "Zed"


def test_all_strategies_missing_returns_none():
    col = render_column("nothing", lambda r, i: None)
    assert resolve({"other": 1}, col) is None


def test_failing_strategy_reported_and_skipped():
    diag = DiagnosticsCollector()
    col = Column(key="unit_number", header="Unit", render_cell=_boom)
    resolver = ValueResolver(diagnostics=diag)
    # direct lookup misses, render raises, underscore-stripped variant hits
    assert resolver.resolve({"unitnumber": "C-12"}, col) == "C-12"
    assert diag.count(EXTRACTION) == 1
    event = diag.recent()[0]
    assert event.column_key == "unit_number"
    assert event.strategy == "rendered"
    assert event.exc_type == "RuntimeError"


def test_resolve_never_raises():
    diag = DiagnosticsCollector()
    col = Column(key="x", header="X", render_cell=_boom, sort_value=_boom)
    assert ValueResolver(diagnostics=diag).resolve({}, col, SORT) is None
    assert diag.count(EXTRACTION) == 2


def test_key_variants_order():
    assert key_variants("unitNumber") == (
        "unit_number",
        "unitNumberName",
        "unitNumberValue",
        "unitNumberText",
    )
    assert key_variants("unit_number")[0] == "unitnumber"


def test_flatten_display_text_handles_lists_and_numbers():
    assert flatten_display_text(["Unit", [TextLeaf("B-7"), 3]]) == "Unit B-7 3"
    assert flatten_display_text(Container()) == ""
    assert flatten_display_text(object()) == ""


def test_default_accessor_ignores_methods():
    class Record:
        def name(self):
            return "method"

    acc = DefaultAccessor()
    assert acc.try_get(Record(), "name") is MISSING
    assert acc.try_get(["a", "b"], "1") == "b"
    assert acc.try_get(None, "anything") is MISSING


def test_strategy_names_follow_chain_order():
    assert ValueResolver().strategy_names == [
        "override",
        "direct",
        "dotted_path",
        "rendered",
        "key_variants",
    ]
