"""Environment defaults for locating build outputs and dependencies."""

DEFAULT_BUILD_TOOL = "bazel"
"""Build executable used to build and extract dependencies."""

BUILD_TOOL_HELP = "the build executable (like bazel)"

EXTRA_ACTION_FILE_NAME_HELP = "When specified, just prints suspected unused deps."

DEFAULT_BIN_DIR = "bazel-bin"
"""Info key for the build tool's binary output directory."""

DEFAULT_OUTPUT_BASE = "output_base"
"""Info key for the build tool's output base directory."""

DEFAULT_OUTPUT_PATH = "output_path"
"""Info key for the build tool's output path directory."""

DEFAULT_EXTRA_BUILD_FLAGS: tuple[str, ...] = ()
"""Extra flags passed to every build invocation."""