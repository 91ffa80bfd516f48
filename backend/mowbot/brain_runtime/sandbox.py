"""
RestrictedPython sandbox for brain scripts.

This module compiles user-submitted brain scripts into a CompiledBrain:
- Restricts imports to the math module only
- Blocks file system and network access
- Blocks dangerous built-ins (eval, exec, compile, open, ...)
- Exposes no host objects; the capability object is only ever passed
  into init()/step() as an argument

Scripts define a step(api, dt) function and optionally init(api), either at
top level or on a `brain` mapping/object:

    def init(api):
        api.console.log("ready")

    def step(api, dt):
        api.robot.set_speed(2.0)

Isolation is by scope exclusion. Nothing here preempts a running script;
the per-step budget is measured after the call returns by the supervisor.
"""

import functools
import logging
import math
import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from RestrictedPython import compile_restricted, safe_globals
from RestrictedPython.Eval import default_guarded_getitem, default_guarded_getiter
from RestrictedPython.Guards import (
    full_write_guard,
    guarded_iter_unpack_sequence,
    guarded_unpack_sequence,
    safe_builtins,
    safer_getattr,
)

from mowbot.config import get_settings

logger = logging.getLogger(__name__)


class BrainCompileError(ValueError):
    """Raised when a script cannot be turned into a CompiledBrain."""
    pass


class SandboxSecurityError(Exception):
    """Raised when brain code attempts a forbidden operation."""
    pass


STEP_MISSING_MESSAGE = "Brain must provide a callable 'step' function"

_INPLACE_OPERATORS = {
    "+=": operator.iadd,
    "-=": operator.isub,
    "*=": operator.imul,
    "/=": operator.itruediv,
    "//=": operator.ifloordiv,
    "%=": operator.imod,
    "**=": operator.ipow,
    "|=": operator.ior,
    "&=": operator.iand,
    "^=": operator.ixor,
    "<<=": operator.ilshift,
    ">>=": operator.irshift,
}


def _noop_init(api: Any) -> None:
    """Default init used when a script does not define one."""
    return None


def _inplacevar(op: str, target: Any, value: Any) -> Any:
    """Augmented assignment (x += 1) for restricted code."""
    try:
        return _INPLACE_OPERATORS[op](target, value)
    except KeyError:
        raise SandboxSecurityError(f"Augmented assignment '{op}' is not allowed")


class ConsoleRouter:
    """Forwards lines printed by a brain to whichever console is current."""

    def __init__(self):
        self.target: Optional[Callable[[str], None]] = None

    def emit(self, line: str) -> None:
        if self.target is not None:
            self.target(line)


class _ConsolePrint:
    """
    Stand-in for RestrictedPython's PrintCollector.

    Restricted code turns print(...) into _print_(_getattr_)._call_print(...);
    instead of collecting text this forwards each call to the router.
    """

    def __init__(self, router: ConsoleRouter, _getattr_=None):
        self._router = router

    def _call_print(self, *objects, **kwargs):
        sep = kwargs.get('sep')
        sep = ' ' if sep is None else str(sep)
        self._router.emit(sep.join(str(obj) for obj in objects))

    def __call__(self):
        # Value of the `printed` name; nothing is collected
        return ''


def _make_safe_import(allowed: tuple) -> Callable:
    """Build an __import__ replacement that only hands out allowed modules."""
    modules = {'math': math}

    def _safe_import(name, *args, **kwargs):
        if name not in allowed or name not in modules:
            raise SandboxSecurityError(
                f"Import of module '{name}' is not allowed. Only {', '.join(allowed)} may be imported."
            )
        return modules[name]

    return _safe_import


def _create_safe_globals(router: ConsoleRouter) -> Dict[str, Any]:
    """
    Create a fresh globals dictionary for one brain.

    Args:
        router: Destination for the brain's print() output

    Returns:
        Dictionary with only safe built-ins, guards and allowed imports
    """
    settings = get_settings()

    restricted_builtins = safe_builtins.copy()
    restricted_builtins.update({
        'dict': dict,
        'list': list,
        'set': set,
        'enumerate': enumerate,
        'any': any,
        'all': all,
        'min': min,
        'max': max,
        'sum': sum,
        'hasattr': hasattr,
    })
    restricted_builtins['__import__'] = _make_safe_import(settings.brain.ALLOWED_IMPORTS)

    # Scripts must not be able to raise past the supervisor
    for name in ('BaseException', 'SystemExit', 'KeyboardInterrupt', 'GeneratorExit'):
        restricted_builtins.pop(name, None)

    restricted_builtins.update({
        'eval': None,
        'exec': None,
        'compile': None,
        'open': None,
        'globals': None,
        'locals': None,
    })

    safe_dict = safe_globals.copy()
    safe_dict['__builtins__'] = restricted_builtins
    safe_dict.update({
        '_getattr_': safer_getattr,
        '_getitem_': default_guarded_getitem,
        '_getiter_': default_guarded_getiter,
        '_iter_unpack_sequence_': guarded_iter_unpack_sequence,
        '_unpack_sequence_': guarded_unpack_sequence,
        '_write_': full_write_guard,
        '_inplacevar_': _inplacevar,
        '_print_': functools.partial(_ConsolePrint, router),
        '__metaclass__': type,
        '__name__': 'brain_script',
    })

    return safe_dict


def _lookup(container: Any, name: str) -> Any:
    """Read an entry point from a dict-like or attribute-bearing object."""
    if isinstance(container, dict):
        return container.get(name)
    return getattr(container, name, None)


@dataclass(frozen=True)
class CompiledBrain:
    """
    Entry points produced by compiling a brain script.

    Immutable; a redeploy produces a new CompiledBrain.
    """
    init: Callable[[Any], None]
    step: Callable[[Any, float], None]
    source: str
    console: ConsoleRouter = field(default_factory=ConsoleRouter, compare=False)

    def call_init(self, api: Any) -> None:
        """Run the brain's one-time setup."""
        self._route_console(api)
        self.init(api)

    def call_step(self, api: Any, dt: float) -> None:
        """Run one control step."""
        self._route_console(api)
        self.step(api, dt)

    def _route_console(self, api: Any) -> None:
        console = getattr(api, 'console', None)
        self.console.target = getattr(console, 'log', None)


class BrainSandbox:
    """
    Compiles brain scripts with RestrictedPython.

    Example:
        sandbox = BrainSandbox()
        brain = sandbox.compile(source)
        brain.call_init(api)
        brain.call_step(api, dt)
    """

    def __init__(self, max_code_size_kb: Optional[int] = None):
        """
        Initialize the sandbox.

        Args:
            max_code_size_kb: Maximum accepted source size (default from config)
        """
        self.settings = get_settings()
        self.max_code_size_kb = max_code_size_kb or self.settings.brain.MAX_CODE_SIZE_KB

    def compile(self, source: str) -> CompiledBrain:
        """
        Compile and evaluate a brain script in the restricted environment.

        Args:
            source: Python source code as string

        Returns:
            CompiledBrain with init and step entry points

        Raises:
            BrainCompileError: If the code does not parse, violates the
                restricted policy, raises while evaluating, or does not
                provide a callable step
        """
        if not source or not source.strip():
            raise BrainCompileError("Brain code is empty")

        max_size_bytes = self.max_code_size_kb * 1024
        if len(source.encode('utf-8')) > max_size_bytes:
            raise BrainCompileError(f"Brain code exceeds maximum size of {self.max_code_size_kb}KB")

        try:
            byte_code = compile_restricted(source, filename='<brain>', mode='exec')
        except SyntaxError as e:
            # RestrictedPython reports policy violations as SyntaxError too
            raise BrainCompileError(f"SyntaxError: {e}") from e

        router = ConsoleRouter()
        namespace = _create_safe_globals(router)

        try:
            exec(byte_code, namespace)
        except SandboxSecurityError as e:
            raise BrainCompileError(f"Security restrictions violated: {e}") from e
        except BaseException as e:
            raise BrainCompileError(f"Script raised during evaluation: {type(e).__name__}: {e}") from e

        result = namespace.get('brain', namespace)

        step = _lookup(result, 'step')
        if not callable(step):
            raise BrainCompileError(STEP_MISSING_MESSAGE)

        init = _lookup(result, 'init')
        if init is None:
            init = _noop_init
        elif not callable(init):
            raise BrainCompileError("'init' must be callable when provided")

        logger.debug(f"Compiled brain ({len(source)} bytes)")
        return CompiledBrain(init=init, step=step, source=source, console=router)
