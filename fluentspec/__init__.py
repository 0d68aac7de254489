"""fluentspec: compile Given/When/Then behavior specifications into isolated test cases."""

from fluentspec.compiler import *  # noqa: F401,F403
from fluentspec.compiler import __all__ as _compiler_all
from fluentspec.config import Settings, get_settings

__version__ = "0.1.0"

__all__ = [*_compiler_all, "Settings", "get_settings"]
