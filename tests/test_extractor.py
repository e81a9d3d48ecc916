"""Tests for recovering the status payload from HTML."""

from __future__ import annotations

import json

import pytest

from statusproxy.app.extractor import (SOURCE_JSON_SCRIPT, SOURCE_NEXT_DATA, extract_payload,
                                       extract_with_source, find_payload, has_known_marker,
                                       loads_strict)

from tests.helpers import make_document, make_resource, next_data_html


class TestFindPayload:

    def test_top_level_match(self) -> None:
        doc = make_document()
        found = find_payload(doc)
        assert found is not None
        assert found.data == doc["data"]
        assert found.included == doc["included"]

    def test_nested_in_objects_and_arrays(self) -> None:
        doc = make_document()
        tree = {"props": {"pageProps": {"blocks": [1, "x", None, {"inner": doc}]}}}
        assert find_payload(tree).to_dict() == doc

    def test_shallower_candidate_wins(self) -> None:
        deep = make_document(make_resource("deep"))
        shallow = make_document(make_resource("shallow"))
        tree = {"a": {"b": {"c": deep}}, "d": shallow}
        # document order: "a" is visited first, so the deep one is found first
        assert find_payload(tree).included[0]["attributes"]["public_name"] == "deep"
        tree = {"d": shallow, "a": {"b": {"c": deep}}}
        assert find_payload(tree).included[0]["attributes"]["public_name"] == "shallow"

    def test_outer_match_stops_descent(self) -> None:
        inner = make_document(make_resource("inner"))
        outer = {"data": {"wrapped": inner}, "included": []}
        assert find_payload(outer).included == []

    def test_shape_requirements(self) -> None:
        assert find_payload({"data": None, "included": []}) is None
        assert find_payload({"data": [], "included": []}) is None
        assert find_payload({"data": {}, "included": {}}) is None
        assert find_payload({"data": {}}) is None
        assert find_payload([1, 2, "three"]) is None
        assert find_payload("data") is None
        assert find_payload({"data": {}, "included": []}) is not None

    def test_depth_cap(self) -> None:
        tree: object = make_document()
        for _ in range(60):
            tree = {"next": tree}
        assert find_payload(tree) is None
        assert find_payload(tree, max_depth=100) is not None


class TestExtract:

    def test_next_data_nested_page_props(self) -> None:
        doc = make_document()
        html = next_data_html({"props": {"pageProps": doc}, "page": "/"})
        hit = extract_with_source(html)
        assert hit is not None
        payload, source = hit
        assert source == SOURCE_NEXT_DATA
        assert payload.to_dict() == doc

    def test_next_data_with_escaped_quotes(self) -> None:
        doc = make_document(make_resource("Gateway & Co"))
        html = next_data_html({"props": {"pageProps": doc}}, escape_quotes=True)
        assert extract_payload(html).to_dict() == doc

    def test_attribute_order_and_case(self) -> None:
        doc = make_document()
        html = f"<SCRIPT type='application/json' id='__NEXT_DATA__'>{json.dumps(doc)}</SCRIPT>"
        assert extract_with_source(html)[1] == SOURCE_NEXT_DATA

    def test_generic_json_scripts_in_order(self) -> None:
        first = make_document(make_resource("first"))
        second = make_document(make_resource("second"))
        html = (
            '<script type="application/json">{not json</script>'
            '<script type="text/javascript">var x = {"data": {}, "included": []};</script>'
            '<script type="application/json">{"unrelated": true}</script>'
            f'<script type="application/ld+json">{json.dumps({"x": first})}</script>'
            f'<script type="application/json">{json.dumps(second)}</script>'
        )
        payload, source = extract_with_source(html)
        assert source == SOURCE_JSON_SCRIPT
        assert payload.included[0]["attributes"]["public_name"] == "first"

    def test_falls_through_when_next_data_has_no_payload(self) -> None:
        doc = make_document()
        html = (
            next_data_html({"props": {"pageProps": {}}})
            + f'<script type="application/json">{json.dumps(doc)}</script>'
        )
        assert extract_with_source(html) == (extract_payload(html), SOURCE_JSON_SCRIPT)

    def test_falls_through_when_next_data_is_broken(self) -> None:
        doc = make_document()
        html = (
            '<script id="__NEXT_DATA__" type="application/json">{"props": </script>'
            f'<script type="application/json">{json.dumps(doc)}</script>'
        )
        assert extract_with_source(html)[1] == SOURCE_JSON_SCRIPT

    def test_no_qualifying_scripts(self) -> None:
        assert extract_payload("<html><body><h1>Maintenance</h1></body></html>") is None
        assert extract_payload('<script type="application/json">{"a": 1}</script>') is None
        assert extract_payload("") is None

    def test_known_marker(self) -> None:
        assert has_known_marker(next_data_html({}))
        assert not has_known_marker("<html></html>")

    def test_non_standard_constants_skip_the_script(self) -> None:
        doc = make_document()
        html = (
            '<script id="__NEXT_DATA__" type="application/json">'
            '{"data": {}, "included": [{"availability": NaN}]}</script>'
            f'<script type="application/json">{json.dumps(doc)}</script>'
        )
        payload, source = extract_with_source(html)
        assert source == SOURCE_JSON_SCRIPT
        assert payload.to_dict() == doc

    def test_loads_strict(self) -> None:
        assert loads_strict('{"a": [1.5, null]}') == {"a": [1.5, None]}
        for constant in ("NaN", "Infinity", "-Infinity"):
            with pytest.raises(ValueError):
                loads_strict(f"[{constant}]")
