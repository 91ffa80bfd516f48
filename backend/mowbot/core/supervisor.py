"""
Execution supervisor for MowBot brains.

Drives init-once / step-every-tick, times each step against the budget,
classifies the outcome and owns the IDLE/RUNNING/SAFE/ERROR state machine.
Any fault forces the neutral intent for that tick; the engine applies
whatever intent the supervisor hands back, so the physics never skips.

The step budget is measured after the call returns. A script that never
returns stalls the loop; nothing here can interrupt it.
"""

import logging
import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from mowbot.brain_runtime.capabilities import Frame, build_capabilities
from mowbot.brain_runtime.sandbox import BrainCompileError, BrainSandbox, CompiledBrain
from mowbot.brain_runtime.types import ActuatorIntent
from mowbot.config import get_settings
from mowbot.core.revisions import Revision, RevisionLedger, RevisionTag
from mowbot.core.telemetry import DiagnosticKind, TaskMetrics, TelemetryHub

logger = logging.getLogger(__name__)


class ExecutionState(Enum):
    """Lifecycle of the deployed brain."""
    IDLE = "IDLE"
    RUNNING = "RUNNING"
    SAFE = "SAFE"
    ERROR = "ERROR"


class BrainFault(Exception):
    """A brain raised during init or step."""

    def __init__(self, message: str, phase: str):
        super().__init__(message)
        self.phase = phase


class BudgetExceededFault(BrainFault):
    """A step returned normally but took longer than the budget."""

    def __init__(self, elapsed_ms: float, budget_ms: float):
        super().__init__(f"Timeout: step took {elapsed_ms:.1f}ms (>{budget_ms:.1f}ms budget)", phase="step")
        self.elapsed_ms = elapsed_ms
        self.budget_ms = budget_ms


class SupervisorError(RuntimeError):
    """Invalid lifecycle request (e.g. resume with nothing deployed)."""
    pass


@dataclass
class TickResult:
    """What happened during one supervised tick."""
    intent: ActuatorIntent  # Intent the engine must apply
    state: ExecutionState
    ran: bool  # True if the brain was invoked
    fault: Optional[BrainFault] = None
    elapsed_ms: Optional[float] = None


class ExecutionSupervisor:
    """
    Runs the deployed brain inside the simulation tick.

    Example:
        supervisor = ExecutionSupervisor(RevisionLedger(), TelemetryHub())
        supervisor.deploy(source)
        result = supervisor.tick(frame)
        kinematics.step(robot, result.intent, world, frame.dt)
    """

    def __init__(
        self,
        ledger: RevisionLedger,
        telemetry: TelemetryHub,
        sandbox: Optional[BrainSandbox] = None,
        clock: Callable[[], float] = time.perf_counter,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the supervisor.

        Args:
            ledger: Revision history to append to and tag
            telemetry: Sink for brain telemetry and diagnostic events
            sandbox: Script compiler (default BrainSandbox())
            clock: Monotonic clock in seconds used to time step()
            rng: Noise source handed to the sensors
        """
        self.settings = get_settings()
        self.ledger = ledger
        self.telemetry = telemetry
        self.sandbox = sandbox or BrainSandbox()
        self.clock = clock
        self.rng = rng or random.Random()

        self.state = ExecutionState.IDLE
        self.brain: Optional[CompiledBrain] = None
        self.active_revision_id: Optional[str] = None
        self.error_log: Optional[str] = None
        self.compile_error: Optional[str] = None
        self.metrics = TaskMetrics()

        self._intent = ActuatorIntent.neutral()
        self._init_pending = False
        self._fault_free_time = 0.0
        self._since_periodic = 0.0

    @property
    def has_brain(self) -> bool:
        return self.brain is not None

    @property
    def is_active(self) -> bool:
        """True while the brain is being stepped."""
        return self.brain is not None and self.state in (ExecutionState.RUNNING, ExecutionState.SAFE)

    def deploy(self, source: str, note: Optional[str] = None) -> Revision:
        """
        Compile a script, swap it in and start running it.

        Args:
            source: Brain script source
            note: Optional note stored on the revision

        Returns:
            The new revision (tagged UNKNOWN)

        Raises:
            BrainCompileError: If compilation fails. The current brain and
                state are left untouched and no revision is created.
        """
        try:
            brain = self.sandbox.compile(source)
        except BrainCompileError as e:
            self.compile_error = str(e)
            logger.error(f"Compile error: {e}")
            raise

        revision = self.ledger.append(source, note)

        self.brain = brain
        self.active_revision_id = revision.id
        self.compile_error = None
        self.error_log = None
        self.metrics = TaskMetrics()
        self.telemetry.reset()
        self._intent = ActuatorIntent.neutral()
        self._init_pending = True
        self._fault_free_time = 0.0
        self._since_periodic = 0.0
        self.state = ExecutionState.RUNNING

        logger.info(f"Deployed revision {revision.id}")
        return revision

    def stop(self) -> None:
        """Disengage autonomy. The brain stays loaded."""
        self.state = ExecutionState.IDLE
        self._intent = ActuatorIntent.neutral()
        self.telemetry.emit(DiagnosticKind.STOP, self.metrics, "Autonomy stopped by user")
        logger.info("Autonomy stopped")

    def resume(self) -> None:
        """
        Re-engage the loaded brain without re-running init.

        init still runs first if it never completed for this brain.

        Raises:
            SupervisorError: If no brain is loaded
        """
        if self.brain is None:
            raise SupervisorError("No brain deployed")

        self.error_log = None
        self._fault_free_time = 0.0
        self.state = ExecutionState.RUNNING
        logger.info(f"Resumed revision {self.active_revision_id}")

    def revert_to_safe(self) -> Revision:
        """
        Redeploy the most recent revision tagged SAFE.

        Raises:
            SupervisorError: If no SAFE revision is in the ledger
        """
        safe = self.ledger.last_safe()
        if safe is None:
            raise SupervisorError("No SAFE revision to revert to")
        return self.deploy(safe.source, note=f"revert of {safe.id}")

    def tick(self, frame: Frame) -> TickResult:
        """
        Run the brain for one simulation tick.

        Args:
            frame: Snapshot of the current tick

        Returns:
            TickResult carrying the intent to apply
        """
        if not self.is_active:
            self._intent = ActuatorIntent.neutral()
            return TickResult(intent=self._intent.copy(), state=self.state, ran=False)

        # Each tick starts from the last applied intent
        intent = self._intent.copy()
        api = build_capabilities(frame, intent, self.telemetry, self.rng)

        if self._init_pending:
            try:
                self.brain.call_init(api)
            except BaseException as e:
                fault = BrainFault(f"{type(e).__name__}: {e}", phase="init")
                fault.__cause__ = e
                return self._fault(fault)
            self._init_pending = False

        start = self.clock()
        try:
            self.brain.call_step(api, frame.dt)
        except BaseException as e:
            elapsed_ms = (self.clock() - start) * 1000.0
            fault = BrainFault(f"{type(e).__name__}: {e}", phase="step")
            fault.__cause__ = e
            return self._fault(fault, elapsed_ms)
        elapsed_ms = (self.clock() - start) * 1000.0

        self.metrics.record_step(elapsed_ms)

        budget_ms = self.settings.brain.STEP_BUDGET_MS
        if elapsed_ms > budget_ms:
            return self._fault(BudgetExceededFault(elapsed_ms, budget_ms), elapsed_ms)

        self._intent = intent
        self.metrics.running_time += frame.dt
        self._fault_free_time += frame.dt

        if self.state == ExecutionState.RUNNING and self._fault_free_time >= self.settings.brain.SAFE_AFTER_SECONDS:
            self._mark_safe()

        self._since_periodic += frame.dt
        period = self.settings.brain.DIAGNOSTIC_PERIOD_SECONDS
        if self._since_periodic >= period:
            self._since_periodic -= period
            self.telemetry.emit(DiagnosticKind.PERIODIC, self.metrics)

        return TickResult(intent=intent.copy(), state=self.state, ran=True, elapsed_ms=elapsed_ms)

    def status(self) -> dict:
        """Serializable view for the HTTP API."""
        return {
            "state": self.state.value,
            "has_brain": self.has_brain,
            "active_revision_id": self.active_revision_id,
            "error_log": self.error_log,
            "compile_error": self.compile_error,
            "init_pending": self._init_pending,
            "fault_free_time": self._fault_free_time,
            "intent": self._intent.to_dict(),
            "metrics": self.metrics.to_dict(),
        }

    def _mark_safe(self) -> None:
        self.state = ExecutionState.SAFE
        revision = self.ledger.get(self.active_revision_id) if self.active_revision_id else None
        if revision is not None and revision.tag == RevisionTag.UNKNOWN:
            self.ledger.tag(revision.id, RevisionTag.SAFE)
        logger.info(f"Revision {self.active_revision_id} is SAFE after {self._fault_free_time:.1f}s")

    def _fault(self, fault: BrainFault, elapsed_ms: Optional[float] = None) -> TickResult:
        """Fail safe: neutral intent, ERROR state, tagged revision, ALERT event."""
        self.state = ExecutionState.ERROR
        self.error_log = str(fault)
        self.metrics.fault_count += 1
        self._intent = ActuatorIntent.neutral()

        if self.active_revision_id:
            self.ledger.tag(self.active_revision_id, RevisionTag.ERROR)

        logger.error(f"Brain fault during {fault.phase}: {fault}")
        self.telemetry.emit(DiagnosticKind.ALERT, self.metrics, str(fault))

        return TickResult(
            intent=self._intent.copy(),
            state=self.state,
            ran=True,
            fault=fault,
            elapsed_ms=elapsed_ms,
        )
