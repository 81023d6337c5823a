"""Tests for starling.realtime.encoding — the Datastar line format."""

import pytest

from starling.errors import ValidationError
from starling.realtime.encoding import render_comment, render_event
from starling.realtime.events import (
    ExecuteScript,
    MergeFragments,
    MergeSignals,
    RemoveFragments,
    RemoveSignals,
)
from starling.realtime.kinds import EventKind, MergeMode


class TestBlockShape:
    @pytest.mark.parametrize(
        "event",
        [
            MergeFragments(fragment="<div>Test</div>"),
            MergeSignals(signals={"foo": "bar"}),
            RemoveFragments(selector="#target"),
            RemoveSignals(paths=["foo"]),
            ExecuteScript(scripts=["a()"], attributes=[]),
        ],
    )
    def test_starts_with_event_and_ends_with_blank_line(self, event) -> None:
        text = event.render()
        assert text.startswith(f"event: {event.kind.value}\n")
        assert text.endswith("\n\n")
        assert not text.endswith("\n\n\n")
        assert "retry:" not in text

    def test_retry_follows_event_line(self) -> None:
        text = RemoveFragments(selector="#target", retry=5000).render()
        assert text == "event: datastar-remove-fragments\nretry: 5000\ndata: selector #target\n\n"

    def test_retry_zero_is_present(self) -> None:
        text = RemoveSignals(paths=["a"], retry=0).render()
        assert text.count("retry: 0\n") == 1

    def test_kind_by_short_name(self) -> None:
        text = render_event("remove-fragments", {"selector": "#a"})
        assert text == "event: datastar-remove-fragments\ndata: selector #a\n\n"

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValidationError, match="Unknown event kind"):
            render_event("datastar-patch-everything", {})


class TestMergeFragments:
    def test_with_selector(self) -> None:
        text = MergeFragments(fragment="<div>Test</div>", selector="#target").render()
        assert text == (
            "event: datastar-merge-fragments\n"
            "data: fragments <div>Test</div>\n"
            "data: selector #target\n\n"
        )

    def test_all_options_in_order(self) -> None:
        text = MergeFragments(
            fragment="<div>Test</div>",
            selector="#target",
            merge_mode=MergeMode.UPSERT_ATTRIBUTES,
            use_view_transition=True,
        ).render()
        assert text.split("\n")[1:5] == [
            "data: fragments <div>Test</div>",
            "data: selector #target",
            "data: mergeMode upsertAttributes",
            "data: useViewTransition true",
        ]

    def test_merge_mode_as_string(self) -> None:
        text = MergeFragments(fragment="<p></p>", merge_mode="morph").render()
        assert "data: mergeMode morph\n" in text

    def test_false_is_emitted(self) -> None:
        text = MergeFragments(fragment="<p></p>", use_view_transition=False).render()
        assert "data: useViewTransition false\n" in text

    def test_multiline_markup_is_minified(self) -> None:
        markup = '<ul id="listing">\n    <li>John</li>\n    <li>Jane</li>\n</ul>\n'
        text = MergeFragments(fragment=markup).render()
        assert 'data: fragments <ul id="listing"><li>John</li><li>Jane</li></ul>\n' in text

    def test_generator_called_at_render_time(self) -> None:
        calls: list[int] = []

        def fragment() -> str:
            calls.append(1)
            return f"<div>{len(calls)}</div>"

        event = MergeFragments(fragment=fragment)
        assert calls == []
        assert "data: fragments <div>1</div>" in event.render()
        assert "data: fragments <div>2</div>" in event.render()

    def test_custom_minifier(self) -> None:
        text = render_event(
            EventKind.MERGE_FRAGMENTS,
            {"fragment": "<p>x</p>"},
            minify=str.upper,
        )
        assert "data: fragments <P>X</P>\n" in text

    def test_generator_errors_propagate(self) -> None:
        def broken() -> str:
            raise KeyError("missing")

        with pytest.raises(KeyError):
            MergeFragments(fragment=broken).render()


class TestMergeSignals:
    def test_compact_json(self) -> None:
        text = MergeSignals(signals={"foo": "bar"}).render()
        assert text == 'event: datastar-merge-signals\ndata: signals {"foo":"bar"}\n\n'

    def test_nested_keeps_insertion_order(self) -> None:
        text = MergeSignals(signals={"foo": "bar", "nested": {"baz": 42}, "a": [1, 2]}).render()
        assert 'data: signals {"foo":"bar","nested":{"baz":42},"a":[1,2]}\n' in text

    def test_non_ascii_is_kept(self) -> None:
        text = MergeSignals(signals={"name": "Zoë"}).render()
        assert 'data: signals {"name":"Zoë"}' in text

    def test_only_if_missing(self) -> None:
        text = MergeSignals(signals={"foo": "bar"}, only_if_missing=True).render()
        assert text.endswith('data: signals {"foo":"bar"}\ndata: onlyIfMissing true\n\n')

    def test_generator_values(self) -> None:
        state = {"count": 0}
        event = MergeSignals(signals={"count": lambda: state["count"], "static": "x"})

        first = event.render()
        state["count"] = 5
        second = event.render()

        assert 'data: signals {"count":0,"static":"x"}' in first
        assert 'data: signals {"count":5,"static":"x"}' in second

    def test_mapping_generator(self) -> None:
        text = MergeSignals(signals=lambda: {"ts": "12:00"}).render()
        assert 'data: signals {"ts":"12:00"}' in text

    def test_nested_callables_pass_through(self) -> None:
        text = MergeSignals(signals={"nested": {"n": 1}}).render()
        assert 'data: signals {"nested":{"n":1}}' in text


class TestRemoveEvents:
    def test_remove_fragments(self) -> None:
        text = RemoveFragments(selector="#target, .item").render()
        assert text == "event: datastar-remove-fragments\ndata: selector #target, .item\n\n"

    def test_remove_signals_one_line_per_path(self) -> None:
        paths = ["foo", "nested.baz", "deeply.nested.path"]
        text = RemoveSignals(paths=paths).render()
        lines = [line for line in text.split("\n") if line.startswith("data: paths ")]
        assert lines == [f"data: paths {p}" for p in paths]

    def test_remove_signals_empty_paths(self) -> None:
        assert RemoveSignals(paths=[]).render() == "event: datastar-remove-signals\n\n"


class TestExecuteScript:
    def test_full_example(self) -> None:
        text = ExecuteScript(
            scripts=["console.log(1)"],
            attributes=[{"name": "type", "value": "module"}],
            retry=5000,
        ).render()
        assert text == (
            "event: datastar-execute-script\n"
            "retry: 5000\n"
            "data: attributes type module\n"
            "data: script console.log(1)\n\n"
        )

    def test_multiple_scripts_and_attributes(self) -> None:
        text = ExecuteScript(
            scripts=['console.log("first")', 'console.log("second")'],
            attributes=[{"name": "type", "value": "module"}, {"name": "defer", "value": True}],
            auto_remove=False,
        ).render()
        assert text.split("\n")[1:6] == [
            "data: autoRemove false",
            "data: attributes type module",
            "data: attributes defer true",
            'data: script console.log("first")',
            'data: script console.log("second")',
        ]

    def test_multiline_script_is_split(self) -> None:
        text = ExecuteScript(scripts=["a()\nb()"], attributes=[]).render()
        assert "data: script a()\ndata: script b()\n" in text

    def test_attribute_pairs(self) -> None:
        text = ExecuteScript(scripts=["a()"], attributes=[("nonce", "abc")]).render()
        assert "data: attributes nonce abc\n" in text


class TestComment:
    def test_single_line(self) -> None:
        assert render_comment("heartbeat") == ": heartbeat\n\n"

    def test_multiline(self) -> None:
        assert render_comment("a\nb") == ": a\n: b\n\n"


class TestLineBreaks:
    def test_selector_cannot_inject_a_block(self) -> None:
        event = RemoveFragments(selector="#a\n\nevent: datastar-execute-script\ndata: script alert(1)")
        with pytest.raises(ValidationError) as exc_info:
            event.render()
        assert exc_info.value.field == "selector"

    @pytest.mark.parametrize("path", ["a\nb", "a\rb", "a\r\nb"])
    def test_paths_reject_line_breaks(self, path: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            RemoveSignals(paths=["ok", path]).render()
        assert exc_info.value.field == "paths"

    def test_attribute_value_rejects_line_break(self) -> None:
        event = ExecuteScript(scripts=["a()"], attributes=[{"name": "nonce", "value": "x\n\ny"}])
        with pytest.raises(ValidationError, match="attributes"):
            event.render()

    def test_merge_mode_rejects_line_break(self) -> None:
        event = MergeFragments(fragment="<p></p>", merge_mode="inner\n\nevent: x")
        with pytest.raises(ValidationError):
            event.render()

    def test_carriage_return_splits_script(self) -> None:
        text = ExecuteScript(scripts=["a()\rb()\r\nc()"], attributes=[]).render()
        assert "data: script a()\ndata: script b()\ndata: script c()\n" in text
        assert "\r" not in text

    def test_unminified_fragment_is_split_per_line(self) -> None:
        text = render_event(
            EventKind.MERGE_FRAGMENTS,
            {"fragment": "<p>\n\n</p>"},
            minify=lambda markup: markup,
        )
        assert text == (
            "event: datastar-merge-fragments\n"
            "data: fragments <p>\n"
            "data: fragments \n"
            "data: fragments </p>\n\n"
        )

    def test_comment_splits_carriage_returns(self) -> None:
        assert render_comment("a\rb") == ": a\n: b\n\n"
