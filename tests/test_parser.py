"""
Tests for the flare.file parser.
"""

import io

import pytest

from flare.errors import ScriptParseError
from flare.modules.script import DictValue, Directive, ListValue, Reference, parse


class TestParse:

    def test_directives_in_declaration_order(self):
        script = parse(
            'kube_config(path="/tmp/a.yaml")\n'
            "\n"
            "# collect\n"
            'capture_local(cmd="uname -a")\n'
            'kube_capture(what="objects")\n'
        )

        assert script.names() == ["kube_config", "capture_local", "kube_capture"]
        assert [d.position for d in script] == [1, 4, 5]

    def test_keyword_and_positional_values(self):
        script = parse('capture_local("df -h", file_name="df.txt", desc=None)')
        directive = script.directives[0]

        assert directive.args == ("df -h",)
        assert directive.kwargs == (("file_name", "df.txt"), ("desc", None))

    def test_literals(self):
        script = parse('f(a=1, b=-2.5, c=True, d=["x", "y"], e={"k": 1})')
        values = dict(script.directives[0].kwargs)

        assert values["a"] == 1
        assert values["b"] == -2.5
        assert values["c"] is True
        assert values["d"] == ListValue(("x", "y"))
        assert values["e"] == DictValue((("k", 1),))

    def test_assignment_and_reference(self):
        script = parse(
            'wc = capv_provider(kubeconfig="/tmp/wc.yaml")\n'
            "kube_config(capi_provider=wc)\n"
        )
        first, second = script.directives

        assert first.target == "wc"
        assert second.kwargs == (("capi_provider", Reference("wc", 2)),)

    def test_nested_call(self):
        script = parse('kube_config(capi_provider=capv_provider(kubeconfig="/tmp/wc.yaml"))')
        nested = dict(script.directives[0].kwargs)["capi_provider"]

        assert isinstance(nested, Directive)
        assert nested.name == "capv_provider"
        assert nested.kwargs == (("kubeconfig", "/tmp/wc.yaml"),)

    def test_reads_streams_and_bytes(self):
        assert len(parse(io.StringIO('kube_config(path="/a")'))) == 1
        assert len(parse(b'kube_config(path="/a")')) == 1

    def test_source_is_kept(self):
        source = 'kube_config(path="/a")\n'
        assert parse(source).source == source

    def test_string_statements_ignored(self):
        script = parse('"""flare.file for staging"""\nkube_config(path="/a")\n')
        assert script.names() == ["kube_config"]

    def test_describe(self):
        script = parse('x = kube_capture(what="logs", namespaces=["kube-system"])')
        assert script.directives[0].describe() == "x = kube_capture(what='logs', namespaces=['kube-system'])"

    def test_empty_script(self):
        assert len(parse("")) == 0


class TestParseErrors:

    @pytest.mark.parametrize(
        "source",
        [
            "import os",
            "x = 1",
            "os.getenv('HOME')",
            "a, b = f()",
            "f(*args)",
            "f(**kwargs)",
            "f(a=1, a=2)",
            "f(undefined_name)",
            "f(a=1 + 2)",
            "if True:\n    f()",
            "f(lambda: 1)",
        ],
    )
    def test_unsupported_constructs(self, source):
        with pytest.raises(ScriptParseError):
            parse(source)

    def test_syntax_error_has_line(self):
        with pytest.raises(ScriptParseError) as exc:
            parse('kube_config(path="/a")\nkube_config(path=\n')
        assert exc.value.line is not None

    def test_name_must_be_bound_before_use(self):
        with pytest.raises(ScriptParseError) as exc:
            parse("kube_config(capi_provider=wc)\nwc = capv_provider(kubeconfig='/x')\n")
        assert exc.value.line == 1
