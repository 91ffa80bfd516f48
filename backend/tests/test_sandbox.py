"""
Tests for the RestrictedPython brain sandbox.

These tests verify that brain scripts:
- Compile into init/step entry points
- Fail with distinct messages for each kind of broken script
- Cannot import anything but math or reach dangerous built-ins
- Have print() routed to the console
"""

import pytest

from mowbot.brain_runtime.sandbox import (
    STEP_MISSING_MESSAGE,
    BrainCompileError,
    BrainSandbox,
    CompiledBrain,
)


class Recorder:
    """Minimal stand-in for the capability object."""

    def __init__(self):
        self.lines = []
        self.console = self
        self.calls = []

    def log(self, msg):
        self.lines.append(msg)


@pytest.fixture
def sandbox():
    return BrainSandbox()


class TestCompileContract:
    """What a script must provide."""

    def test_top_level_functions(self, sandbox):
        """Top-level init and step become the entry points."""
        brain = sandbox.compile("""
def init(api):
    api.calls.append("init")

def step(api, dt):
    api.calls.append(dt)
""")
        assert isinstance(brain, CompiledBrain)
        api = Recorder()
        brain.call_init(api)
        brain.call_step(api, 0.5)
        assert api.calls == ["init", 0.5]

    def test_init_is_optional(self, sandbox):
        """Scripts without init get a no-op."""
        brain = sandbox.compile("def step(api, dt):\n    pass\n")
        assert brain.call_init(Recorder()) is None

    def test_brain_mapping_takes_precedence(self, sandbox):
        """A `brain` mapping supplies the entry points."""
        brain = sandbox.compile("""
def step(api, dt):
    api.calls.append("top-level")

def other_step(api, dt):
    api.calls.append("mapped")

brain = {"step": other_step}
""")
        api = Recorder()
        brain.call_step(api, 0.1)
        assert api.calls == ["mapped"]

    def test_closures_keep_state(self, sandbox):
        """Closure state survives between steps."""
        brain = sandbox.compile("""
def make():
    memory = {"ticks": 0}

    def step(api, dt):
        memory["ticks"] = memory["ticks"] + 1
        api.calls.append(memory["ticks"])

    return {"step": step}

brain = make()
""")
        api = Recorder()
        for _ in range(3):
            brain.call_step(api, 0.1)
        assert api.calls == [1, 2, 3]

    def test_source_is_kept(self, sandbox):
        source = "def step(api, dt):\n    pass\n"
        assert sandbox.compile(source).source == source


class TestCompileErrors:
    """Every failure raises BrainCompileError with a distinct message."""

    def test_syntax_error(self, sandbox):
        with pytest.raises(BrainCompileError, match="SyntaxError"):
            sandbox.compile("def step(api, dt)\n    pass\n")

    def test_missing_step(self, sandbox):
        with pytest.raises(BrainCompileError) as exc_info:
            sandbox.compile("speed = 2\n")
        assert str(exc_info.value) == STEP_MISSING_MESSAGE

    def test_step_not_callable(self, sandbox):
        with pytest.raises(BrainCompileError) as exc_info:
            sandbox.compile("step = 5\n")
        assert str(exc_info.value) == STEP_MISSING_MESSAGE

    def test_brain_without_step(self, sandbox):
        with pytest.raises(BrainCompileError) as exc_info:
            sandbox.compile("brain = {'init': None}\n")
        assert str(exc_info.value) == STEP_MISSING_MESSAGE

    def test_init_not_callable(self, sandbox):
        with pytest.raises(BrainCompileError, match="'init' must be callable"):
            sandbox.compile("init = 3\n\ndef step(api, dt):\n    pass\n")

    def test_raises_during_evaluation(self, sandbox):
        with pytest.raises(BrainCompileError, match="Script raised during evaluation: ZeroDivisionError"):
            sandbox.compile("x = 1 / 0\n\ndef step(api, dt):\n    pass\n")

    def test_parse_and_missing_step_messages_differ(self, sandbox):
        """The two failure kinds are distinguishable by message."""
        with pytest.raises(BrainCompileError) as parse_error:
            sandbox.compile("def step(:\n")
        with pytest.raises(BrainCompileError) as missing_error:
            sandbox.compile("x = 1\n")
        assert str(parse_error.value) != str(missing_error.value)

    @pytest.mark.parametrize("name", ["SystemExit", "KeyboardInterrupt", "GeneratorExit", "BaseException"])
    def test_interpreter_exits_are_compile_errors(self, sandbox, name):
        """Raising an exit exception at top level cannot escape compile."""
        with pytest.raises(BrainCompileError, match="Script raised during evaluation"):
            sandbox.compile(f"raise {name}(1)\n\ndef step(api, dt):\n    pass\n")

    def test_empty_source(self, sandbox):
        with pytest.raises(BrainCompileError, match="empty"):
            sandbox.compile("   \n")

    def test_oversized_source(self):
        sandbox = BrainSandbox(max_code_size_kb=1)
        source = "def step(api, dt):\n    pass\n" + "# padding\n" * 200
        with pytest.raises(BrainCompileError, match="exceeds maximum size of 1KB"):
            sandbox.compile(source)


class TestSandboxSecurity:
    """Scripts cannot reach host modules or dangerous built-ins."""

    def test_math_import_allowed(self, sandbox):
        brain = sandbox.compile("""
import math

def step(api, dt):
    api.calls.append(math.floor(2.7))
""")
        api = Recorder()
        brain.call_step(api, 0.1)
        assert api.calls == [2]

    def test_blocks_os_import(self, sandbox):
        with pytest.raises(BrainCompileError, match="Security restrictions violated"):
            sandbox.compile("import os\n\ndef step(api, dt):\n    pass\n")

    def test_blocks_sys_import_inside_step(self, sandbox):
        """Imports inside step fail when step runs."""
        brain = sandbox.compile("""
def step(api, dt):
    import sys
""")
        with pytest.raises(Exception, match="not allowed"):
            brain.call_step(Recorder(), 0.1)

    def test_blocks_open(self, sandbox):
        brain = sandbox.compile("""
def step(api, dt):
    open('/etc/passwd')
""")
        with pytest.raises(TypeError):
            brain.call_step(Recorder(), 0.1)

    def test_blocks_eval(self, sandbox):
        with pytest.raises(BrainCompileError):
            sandbox.compile("eval('1 + 1')\n\ndef step(api, dt):\n    pass\n")

    def test_blocks_underscore_attributes(self, sandbox):
        """Private attributes are rejected at compile time."""
        with pytest.raises(BrainCompileError, match="SyntaxError"):
            sandbox.compile("def step(api, dt):\n    api.__class__\n")

    def test_no_host_globals(self, sandbox):
        """Host module names are not visible to scripts."""
        brain = sandbox.compile("""
def step(api, dt):
    api.calls.append(logger)
""")
        with pytest.raises(NameError):
            brain.call_step(Recorder(), 0.1)

    @pytest.mark.parametrize("name", ["SystemExit", "KeyboardInterrupt", "GeneratorExit", "BaseException"])
    def test_exit_exceptions_are_not_builtins(self, sandbox, name):
        brain = sandbox.compile(f"def step(api, dt):\n    raise {name}('bye')\n")
        with pytest.raises(NameError):
            brain.call_step(Recorder(), 0.1)

    def test_bitwise_augmented_assignment(self, sandbox):
        brain = sandbox.compile("""
def step(api, dt):
    flags = 0
    flags |= 6
    flags &= 3
    flags ^= 1
    flags <<= 2
    flags >>= 1
    api.calls.append(flags)
""")
        api = Recorder()
        brain.call_step(api, 0.1)
        assert api.calls == [6]


class TestConsoleRouting:
    """print() inside a brain goes to the console of the current api."""

    def test_print_goes_to_console(self, sandbox):
        brain = sandbox.compile("""
def step(api, dt):
    print("speed", 2)
""")
        api = Recorder()
        brain.call_step(api, 0.1)
        assert api.lines == ["speed 2"]

    def test_print_follows_latest_api(self, sandbox):
        brain = sandbox.compile("""
def step(api, dt):
    print("tick")
""")
        first, second = Recorder(), Recorder()
        brain.call_step(first, 0.1)
        brain.call_step(second, 0.1)
        assert first.lines == ["tick"]
        assert second.lines == ["tick"]
