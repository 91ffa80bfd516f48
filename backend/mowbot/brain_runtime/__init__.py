"""
Brain runtime for MowBot.

This package provides:
- Type definitions for the brain API (types.py)
- RestrictedPython sandbox that compiles brain scripts (sandbox.py)
- Per-tick capability object handed to brains (capabilities.py)
- Starter brain scripts (templates/)
"""

from mowbot.brain_runtime.types import (
    ActuatorIntent,
    Bounds,
    Point,
    Pose,
    Velocity,
)
from mowbot.brain_runtime.sandbox import (
    BrainCompileError,
    BrainSandbox,
    CompiledBrain,
    SandboxSecurityError,
)
from mowbot.brain_runtime.capabilities import (
    BrainAPI,
    Frame,
    build_capabilities,
)

__all__ = [
    # Type definitions
    "ActuatorIntent",
    "Bounds",
    "Point",
    "Pose",
    "Velocity",
    # Sandbox
    "BrainCompileError",
    "BrainSandbox",
    "CompiledBrain",
    "SandboxSecurityError",
    # Capabilities
    "BrainAPI",
    "Frame",
    "build_capabilities",
]
