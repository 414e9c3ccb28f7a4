# This file makes the 'scripting' directory a Python package.

"""Script component sub-package public interface."""

from .compiler import (  # noqa: F401 – re-export
    ScriptCompiler,
    PythonScriptCompiler,
    get_compiler,
    set_compiler,
)
from .manager import Manager  # noqa: F401
