from __future__ import annotations

"""Source compiler service for script components.

The default :class:`PythonScriptCompiler` runs the source text in a fresh
module and returns the public node class it defines under the well-known
name ``Script``. Any other compiler can be plugged in with
:func:`set_compiler` as long as it honours :class:`ScriptCompiler`.
"""

import importlib.util
import itertools
import sys
import traceback
from typing import Protocol, Type, runtime_checkable

from arbor.core.errors import CompileError
from arbor.core.node import Node
from arbor.utils.constants import SCRIPT_CLASS_NAME, SCRIPT_MODULE_PREFIX
from arbor.utils.logging import log

__all__ = [
    "ScriptCompiler",
    "PythonScriptCompiler",
    "get_compiler",
    "set_compiler",
    "release",
]


@runtime_checkable
class ScriptCompiler(Protocol):  # noqa: D101
    def compile(self, source_text: str) -> Type[Node]:
        """Return the script's node class or raise :class:`CompileError`."""
        ...


class PythonScriptCompiler:
    """Compile Python source into a node class named ``Script``."""

    _counter = itertools.count(1)

    def __init__(self, class_name: str = SCRIPT_CLASS_NAME):
        self.class_name = class_name

    def compile(self, source_text: str) -> Type[Node]:
        module_name = f"{SCRIPT_MODULE_PREFIX}.script_{next(self._counter)}"
        spec = importlib.util.spec_from_loader(module_name, loader=None)
        module = importlib.util.module_from_spec(spec)  # type: ignore[arg-type]
        filename = f"<{module_name}>"

        # Registered before execution so pydantic and link annotations can
        # resolve names against the script's globals.
        sys.modules[module_name] = module
        try:
            code = compile(source_text, filename, "exec")
            exec(code, module.__dict__)  # noqa: S102
        except Exception as e:  # noqa: BLE001 – any failure in user code is a compile error
            sys.modules.pop(module_name, None)
            diagnostics = "".join(traceback.format_exception_only(type(e), e)).strip()
            raise CompileError(diagnostics) from e

        script_type = getattr(module, self.class_name, None)
        if not (isinstance(script_type, type) and issubclass(script_type, Node)):
            sys.modules.pop(module_name, None)
            raise CompileError(f"Cannot find a public class called {self.class_name}")

        log.debug("compiled script %s (%d chars)", module_name, len(source_text))
        return script_type


_COMPILER: ScriptCompiler = PythonScriptCompiler()


def get_compiler() -> ScriptCompiler:
    return _COMPILER


def set_compiler(compiler: ScriptCompiler) -> ScriptCompiler:  # noqa: D401
    """Install *compiler* process-wide and return the previous one."""
    global _COMPILER
    previous = _COMPILER
    _COMPILER = compiler
    return previous


def release(script_type: type) -> None:
    """Drop the module a compiled *script_type* lives in from ``sys.modules``."""
    module_name = script_type.__module__
    if module_name.startswith(SCRIPT_MODULE_PREFIX + "."):
        sys.modules.pop(module_name, None)
        log.debug("released script module %s", module_name)
