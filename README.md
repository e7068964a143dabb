# bzltidy

Building blocks for a formatter and linter of Starlark build files
(`BUILD`, `WORKSPACE`, `MODULE.bazel`, `*.bzl`, `*.star`, `*.sky`).
It covers configuration, option validation, diagnostics reporting, finding
files and running an external diff program.

The package needs only the standard library.

## What is inside

| Module                 | Purpose                                                                                   |
|------------------------|-------------------------------------------------------------------------------------------|
| `bzltidy.config`       | `Config`: command-line flags, a `.buildifier.json` file, validation, JSON output           |
| `bzltidy.validation`   | Checks for input type, format, mode, lint mode and warning lists; raises `ConfigError`    |
| `bzltidy.diagnostics`  | Per-file and overall diagnostics, rendered as text or JSON                                |
| `bzltidy.differ`       | `Differ`: finds and runs an external diff program for the old and new file contents       |
| `bzltidy.tempfiles`    | `TempFiles`: temporary files that are removed again, usable as a context manager          |
| `bzltidy.files`        | Recognises Starlark file names and expands directories into the files they hold           |
| `bzltidy.defaults`     | Default names for the build tool and its output locations                                 |

## Configuration

A `Config` starts from its defaults (input type `auto`). Settings can then be
loaded from a JSON file and overridden by command-line flags:

```python
from bzltidy.config import Config, find_config_path

config = Config()
config.config_path = find_config_path("")   # BUILDIFIER_CONFIG, or the nearest .buildifier.json
if config.config_path:
    config.load_file()
rest = config.parse_flags(["--mode=check", "--lint=warn", "--warnings=+native-cc,-print", "BUILD"])
config.validate(rest)
print(config.lint_warnings)
print(config.to_json())
```

- `find_config_path(root_dir)` returns `BUILDIFIER_CONFIG` when that
  variable is set; otherwise it looks for a regular file `.buildifier.json`
  in `root_dir` (or the working directory) and each parent, and returns `""`
  if there is none.
- `Config.load_file()` / `Config.load_reader(stream)` read JSON settings.
  Keys such as `type`, `mode`, `lint`, `warningsList`, `diffCommand`,
  `allowsort` are recognised; unknown keys are ignored and values of the
  wrong type raise `ConfigError`.
- `Config.flags()` lists every flag as a `Flag` (name, usage, default,
  attribute, `FlagKind`), sorted by name. `Config.parse_flags(argv)` applies
  flags of the form `-name`, `--name`, `-name=value` or `-name value`, and
  returns the arguments after the first non-flag or `--`. `-allowsort` and
  `-buildifier_disable` may be repeated.
- `Config.validate(args)` checks every setting, fills in the default mode
  (`fix`) and lint mode (`off`), and stores the resolved warnings in
  `lint_warnings`. If `tables_path` or `add_tables_path` is set, that JSON
  file is read into `table_definitions` or `added_table_definitions`.
- `Config.to_json()` (also `str(config)`) renders the non-empty file-backed
  settings as indented JSON.
- `example()` returns a sample configuration with every warning category
  enabled, handy as a starting point for a `.buildifier.json` file.

`ALL_WARNINGS` and `DEFAULT_WARNINGS` in `bzltidy.config` hold the known
warning categories.

Invalid settings raise `bzltidy.validation.ConfigError`, a `ValueError`:

```python
from bzltidy.validation import ConfigError, validate_input_type

try:
    validate_input_type("foo")
except ConfigError as err:
    print(err)
```

Warning lists may be given plainly (`load,print`), as `all`, as `default`, or
as modifiers of the default set (`+native-cc,-print`). Plain names and
modifiers cannot be mixed.

## Finding files

```python
from bzltidy.files import expand_directories, is_starlark_file

is_starlark_file("BUILD.bazel")   # True
is_starlark_file("build.gradle")  # False

files = expand_directories(["path/to/workspace"])
```

`expand_directories` keeps plain files as given and walks directories in
name order, skipping `.git`. A path that does not exist raises `OSError`.

## Diagnostics

```python
from bzltidy.diagnostics import Finding, Position, new_diagnostics, new_file_diagnostics

finding = Finding(Position(3, 1), Position(3, 10), "print", "print() is a debug function")
report = new_diagnostics(new_file_diagnostics("pkg/BUILD", [finding]))
print(report.format("text", False))
```

`invalid_file_diagnostics` marks a file that could not be parsed (an empty
name becomes `<stdin>`). `new_diagnostics` is successful only when every file
is formatted and has no warnings. `Diagnostics.format("text", ...)` gives one
line per warning plus a `# reformat` line for unformatted files;
`Diagnostics.format("json", verbose)` gives a JSON document, indented when
`verbose` is true. Any other format gives an empty string.

## Showing diffs

```python
from bzltidy.differ import find
from bzltidy.tempfiles import TempFiles

differ, deprecated_env = find()
with TempFiles() as temps:
    new_path = temps.write_temp(b"formatted contents\n")
    differ.show("BUILD", new_path)
    differ.run()
```

`find()` honours the `BUILDIFIER_DIFF`, `BUILDIFIER_MULTIDIFF` and `DISPLAY`
environment variables and reports whether any of those deprecated settings
were used. Without them it uses `diff --unified` (or `FC` on Windows), or
`tkdiff` when standard output is a terminal and `DISPLAY` is set. A
multi-pair differ queues pairs in `show` and runs them all in `run`. A diff
command of `:` runs nothing. If the program cannot be started or exits with a
non-zero status, `DiffError` is raised.

## What this package does not do

There is no Starlark parser, formatter or linter here, and no command-line
program. The package supplies the configuration, validation, diagnostics,
file discovery and diff machinery around them; producing the formatted text
and the lint findings is left to the caller.