import io
import json

import pytest

from bzltidy.config import (
    Config,
    Flag,
    FlagKind,
    example,
    find_config_path,
)
from bzltidy.validation import ConfigError

ALL = """
attr-applicable_licenses attr-cfg attr-license attr-licenses attr-non-empty
attr-output-default attr-single-file build-args-kwargs bzl-visibility
confusing-name constant-glob ctx-actions ctx-args deprecated-function
depset-items depset-iteration depset-union dict-concatenation
dict-method-named-arg duplicated-name filetype function-docstring
function-docstring-args function-docstring-header function-docstring-return
git-repository http-archive integer-division keyword-positional-params
list-append load load-on-top module-docstring name-conventions native-android
native-build native-cc native-java native-package native-proto native-py
no-effect out-of-order-load output-group overly-nested-depset package-name
package-on-top positional-args print provider-params redefined-variable
repository-name return-value rule-impl-return same-origin-load skylark-comment
skylark-docstring string-iteration uninitialized unnamed-macro unreachable
unsorted-dict-items unused-variable
""".split()

_DEFAULT_EXCLUDED = {
    "native-android",
    "native-cc",
    "native-java",
    "native-proto",
    "native-py",
    "unsorted-dict-items",
}
DEFAULT = [w for w in ALL if w not in _DEFAULT_EXCLUDED]

_PLUS_MINUS_EXCLUDED = _DEFAULT_EXCLUDED | {"deprecated-function", "print"}
PLUS_MINUS = [w for w in ALL if w not in _PLUS_MINUS_EXCLUDED] + ["native-cc"]


def test_new_to_json():
    assert Config().to_json() == '{\n  "type": "auto"\n}'


def test_example_to_json():
    text = example().to_json()
    assert text.startswith('{\n  "type": "auto",\n  "mode": "fix",\n  "lint": "fix",\n')
    assert text.endswith('    "unused-variable"\n  ]\n}')
    assert json.loads(text) == {
        "type": "auto",
        "mode": "fix",
        "lint": "fix",
        "warningsList": ALL,
    }


def test_example_uses_all_warnings():
    config = example()
    assert list(config.warnings_list) == ALL
    assert config.mode == "fix"
    assert config.lint == "fix"


def test_flags_listing():
    flags = Config().flags()
    assert [(f.name, f.default) for f in flags] == [
        ("add_tables", ""),
        ("allowsort", ""),
        ("buildifier_disable", ""),
        ("config", ""),
        ("d", "false"),
        ("diff_command", ""),
        ("format", ""),
        ("help", "false"),
        ("lint", ""),
        ("mode", ""),
        ("multi_diff", "false"),
        ("path", ""),
        ("r", "false"),
        ("tables", ""),
        ("type", "auto"),
        ("v", "false"),
        ("version", "false"),
        ("warnings", ""),
    ]
    by_name = {f.name: f.usage for f in flags}
    assert by_name["config"] == "path to .buildifier.json config file"
    assert by_name["d"] == "alias for -mode=diff"
    assert by_name["help"] == "print usage information"
    assert by_name["lint"] == "lint mode: off, warn, or fix (default off)"


def test_flag_defaults_follow_config():
    config = Config(verbose=True, mode="check", allow_sort=["a", "b"])
    by_name = {f.name: f for f in config.flags()}
    assert by_name["v"] == Flag(
        "v", "print verbose information to standard error", "true", "verbose", FlagKind.BOOL
    )
    assert by_name["mode"].default == "check"
    assert by_name["allowsort"].default == "a,b"


def test_parse_flags():
    config = Config()
    rest = config.parse_flags(
        [
            "--add_tables=/path/to/add_tables.json",
            "--allowsort=proto_library.deps",
            "--allowsort=proto_library.srcs",
            "--buildifier_disable=unsafesort",
            "--config=/path/to/.buildifier.json",
            "-d",
            "--diff_command=diff",
            "--format=json",
            "--help",
            "--lint=fix",
            "--mode=fix",
            "--multi_diff=true",
            "--path=pkg/foo",
            "-r",
            "--tables=/path/to/tables.json",
            "--type=default",
            "-v",
            "--version",
            "--warnings=+print,-no-effect",
        ]
    )
    assert rest == []
    assert config.help is True
    assert config.version is True
    assert config.config_path == "/path/to/.buildifier.json"
    expected = {
        "type": "default",
        "format": "json",
        "mode": "fix",
        "diffMode": True,
        "lint": "fix",
        "warnings": "+print,-no-effect",
        "recursive": True,
        "verbose": True,
        "diffCommand": "diff",
        "multiDiff": True,
        "tables": "/path/to/tables.json",
        "addTables": "/path/to/add_tables.json",
        "path": "pkg/foo",
        "buildifier_disable": ["unsafesort"],
        "allowsort": ["proto_library.deps", "proto_library.srcs"],
    }
    text = config.to_json()
    assert json.loads(text) == expected
    assert list(json.loads(text)) == list(expected)
    assert text.startswith('{\n  "type": "default",\n')
    assert '  "buildifier_disable": [\n    "unsafesort"\n  ],\n' in text


def test_parse_flags_separate_value_and_rest():
    config = Config()
    rest = config.parse_flags(["-mode", "check", "BUILD", "-v"])
    assert config.mode == "check"
    assert config.verbose is False
    assert rest == ["BUILD", "-v"]


def test_parse_flags_double_dash_terminates():
    config = Config()
    assert config.parse_flags(["-r", "--", "-v"]) == ["-v"]
    assert config.recursive is True


def test_parse_flags_bool_false():
    config = Config(verbose=True)
    config.parse_flags(["-v=false"])
    assert config.verbose is False


@pytest.mark.parametrize(
    "argv, message",
    [
        (["--nope"], "flag provided but not defined: -nope"),
        (["--mode"], "flag needs an argument: -mode"),
        (["-v=maybe"], 'invalid boolean value "maybe" for -v: parse error'),
        (["---v"], "bad flag syntax: ---v"),
    ],
)
def test_parse_flags_errors(argv, message):
    with pytest.raises(ConfigError) as info:
        Config().parse_flags(argv)
    assert str(info.value) == message


def test_parse_flags_resets_config_path():
    config = Config(config_path="old.json", help=True)
    config.parse_flags([])
    assert config.config_path == ""
    assert config.help is False


_MODE_ERR = "unrecognized mode foo; valid modes are check, diff, fix, print_if_changed"
_TYPE_ERR = (
    "unrecognized input type foo; valid types are "
    "build, bzl, workspace, default, module, auto"
)
_MIX_ERR = (
    'warning categories with modifiers ("+" or "-") '
    "can't be mixed with raw warning categories"
)

VALIDATE_CASES = {
    "mode not set": dict(want_mode="fix"),
    "mode check": dict(options="--mode=check", want_mode="check"),
    "mode diff": dict(options="--mode=diff", want_mode="diff"),
    "mode d": dict(options="-d", want_mode="diff"),
    "mode d error": dict(options="--mode=diff -d", want_err="cannot specify both -d and -mode flags"),
    "mode fix": dict(options="--mode=fix", want_mode="fix"),
    "mode print_if_changed": dict(options="--mode=print_if_changed", want_mode="print_if_changed"),
    "mode error": dict(options="--mode=foo", want_err=_MODE_ERR),
    "lint not set": dict(want_lint="off"),
    "lint off": dict(options="--lint=off", want_lint="off"),
    "lint warn": dict(options="--lint=warn", want_lint="warn"),
    "lint fix": dict(options="--lint=fix", want_lint="fix"),
    "lint fix error": dict(options="--lint=fix --mode=check", want_err="--lint=fix is only compatible with --mode=fix"),
    "format mode error": dict(options="--mode=fix --format=text", want_err="cannot specify --format without --mode=check"),
    "format text": dict(options="--mode=check --format=text"),
    "format json": dict(options="--mode=check --format=json"),
    "format error": dict(options="--mode=check --format=foo", want_err="unrecognized format foo; valid types are text, json"),
    "type build": dict(options="--type=build"),
    "type bzl": dict(options="--type=bzl"),
    "type workspace": dict(options="--type=workspace"),
    "type default": dict(options="--type=default"),
    "type module": dict(options="--type=module"),
    "type auto": dict(options="--type=auto"),
    "type error": dict(options="--type=foo", want_err=_TYPE_ERR),
    "warnings all": dict(options="--warnings=all", want_warnings=ALL),
    "warnings default": dict(options="--warnings=default", want_warnings=DEFAULT),
    "warnings plus/minus": dict(options="--warnings=+native-cc,-print,-deprecated-function", want_warnings=PLUS_MINUS),
    "warnings error": dict(options="--warnings=native-cc,-print,-deprecated-function", want_err=_MIX_ERR),
}


@pytest.mark.parametrize("case", list(VALIDATE_CASES.values()), ids=list(VALIDATE_CASES))
def test_validate(case):
    config = Config()
    config.parse_flags(case.get("options", "").split())
    want_err = case.get("want_err")
    if want_err is not None:
        with pytest.raises(ConfigError) as info:
            config.validate([])
        assert str(info.value) == want_err
        return
    config.validate([])
    assert config.mode == case.get("want_mode", config.mode) != ""
    assert config.lint == case.get("want_lint", config.lint) != ""
    want_warnings = case.get("want_warnings")
    if want_warnings:
        assert config.lint_warnings == want_warnings
    else:
        assert config.lint_warnings == DEFAULT


def test_validate_path_with_many_files():
    config = Config(workspace_relative_path="pkg/BUILD")
    with pytest.raises(ConfigError) as info:
        config.validate(["a", "b"])
    assert str(info.value) == (
        "can only format one file when using -path flag or -mode=print_if_changed"
    )


def test_validate_print_if_changed_one_file():
    config = Config(mode="print_if_changed")
    config.validate(["a"])
    assert config.mode == "print_if_changed"


def test_validate_combines_warnings_list_and_string():
    config = Config(warnings_list=["print"], warnings="no-effect")
    config.validate([])
    assert config.lint_warnings == ["print", "no-effect"]


def test_validate_reads_tables(tmp_path):
    tables = tmp_path / "tables.json"
    tables.write_text('{"IsLabelArg": {"srcs": true}}')
    config = Config(tables_path=str(tables), add_tables_path=str(tables))
    config.validate([])
    assert config.table_definitions == {"IsLabelArg": {"srcs": True}}
    assert config.added_table_definitions == {"IsLabelArg": {"srcs": True}}


def test_validate_bad_tables(tmp_path):
    tables = tmp_path / "tables.json"
    tables.write_text("{not json")
    config = Config(add_tables_path=str(tables))
    with pytest.raises(ConfigError) as info:
        config.validate([])
    assert str(info.value).startswith(f"failed to parse {tables} for -add_tables: ")


def test_load_reader():
    config = Config()
    config.load_reader(
        io.StringIO(
            '{"mode": "check", "Lint": "warn", "verbose": true, '
            '"allowsort": ["x"], "unknown": 1}'
        )
    )
    assert config.mode == "check"
    assert config.lint == "warn"
    assert config.verbose is True
    assert config.allow_sort == ["x"]
    assert config.input_type == "auto"


def test_load_reader_wrong_type():
    with pytest.raises(ConfigError):
        Config().load_reader(io.StringIO('{"verbose": "yes"}'))


def test_load_reader_bad_json():
    with pytest.raises(ConfigError):
        Config().load_reader(io.BytesIO(b"{"))


def test_load_file(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text('{"type": "bzl", "warningsList": ["print"]}')
    config = Config(config_path=str(path))
    config.load_file()
    assert config.input_type == "bzl"
    assert config.warnings_list == ["print"]


def test_load_file_missing(tmp_path):
    config = Config(config_path=str(tmp_path / "missing.json"))
    with pytest.raises(FileNotFoundError):
        config.load_file()


def test_to_json_escapes_html():
    assert Config(input_type="", diff_command="a<b&c").to_json() == (
        '{\n  "diffCommand": "a\\u003cb\\u0026c"\n}'
    )


def test_find_config_path_none(tmp_path, monkeypatch):
    monkeypatch.delenv("BUILDIFIER_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    assert find_config_path(str(tmp_path)) == ""


def test_find_config_path_default(tmp_path, monkeypatch):
    monkeypatch.delenv("BUILDIFIER_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".buildifier.json").write_text("{}")
    assert find_config_path(str(tmp_path)) == str(tmp_path / ".buildifier.json")


def test_find_config_path_searches_up(tmp_path, monkeypatch):
    monkeypatch.delenv("BUILDIFIER_CONFIG", raising=False)
    (tmp_path / ".buildifier.json").write_text("{}")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)
    assert find_config_path("") == str(tmp_path / ".buildifier.json")


def test_find_config_path_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("BUILDIFIER_CONFIG", ".buildifier2.json")
    monkeypatch.chdir(tmp_path)
    assert find_config_path(str(tmp_path)) == ".buildifier2.json"


def test_find_config_path_ignores_directory(tmp_path, monkeypatch):
    monkeypatch.delenv("BUILDIFIER_CONFIG", raising=False)
    (tmp_path / ".buildifier.json").mkdir()
    assert find_config_path(str(tmp_path)) == ""