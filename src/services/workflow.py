"""
Step runner for multi-entity workflows.

There is no transaction across entities, so each step is declared either
fatal (its failure aborts the workflow and reports what was already done)
or best-effort (its failure becomes a transcript warning and the workflow
continues). Nothing is rolled back.
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Sequence

from src.utils.errors import AgencyAgentError, SupabaseError, WriteError
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

StepAction = Callable[[dict], Awaitable[Any]]
StepCondition = Callable[[dict], bool]


@dataclass
class Transcript:
    """Audit of a workflow run."""

    actions: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)
    created: dict[str, list[str]] = field(default_factory=dict)
    updated: dict[str, list[str]] = field(default_factory=dict)

    def record_created(self, kind: str, record_id: str, action: str) -> None:
        self.created.setdefault(kind, []).append(record_id)
        self.actions.append(action)

    def record_updated(self, kind: str, record_id: str, action: str) -> None:
        self.updated.setdefault(kind, []).append(record_id)
        self.actions.append(action)

    def to_dict(self) -> dict:
        return {
            "actions": list(self.actions),
            "warnings": list(self.warnings),
            "next_steps": list(self.next_steps),
            "created": {k: list(v) for k, v in self.created.items()},
            "updated": {k: list(v) for k, v in self.updated.items()},
        }


@dataclass
class WorkflowStep:
    """
    One step of a workflow.

    `action` receives the shared state dict; its return value is stored in
    the state under the step name. `when` skips the step if it returns False.
    """

    name: str
    action: StepAction
    fatal: bool = True
    when: Optional[StepCondition] = None


class StepRunner:
    """Run workflow steps in order against a shared state and transcript."""

    def __init__(self, operation: str, transcript: Optional[Transcript] = None):
        self.operation = operation
        self.transcript = transcript or Transcript()

    async def run(self, steps: Sequence[WorkflowStep], state: Optional[dict] = None) -> dict:
        state = state if state is not None else {}
        state["transcript"] = self.transcript

        with log_timing(self.operation, logger=logger, agency_id=state.get("agency_id")):
            for step in steps:
                if step.when is not None and not step.when(state):
                    logger.debug("Skipping workflow step", operation=self.operation, step=step.name)
                    continue
                try:
                    state[step.name] = await step.action(state)
                except Exception as e:
                    if not step.fatal:
                        self._warn(step, e)
                        continue
                    error = self._abort(step, e)
                    if error is e:
                        raise
                    raise error from e

        return state

    def _abort(self, step: WorkflowStep, error: Exception) -> AgencyAgentError:
        logger.error(
            "Workflow aborted",
            operation=self.operation,
            step=step.name,
            error=str(error),
            error_type=type(error).__name__,
            actions_taken=len(self.transcript.actions),
        )
        if isinstance(error, SupabaseError):
            # a primary write or read at the store failed
            error = WriteError(
                f"{step.name} failed: {error.message}",
                context=dict(error.context),
            )
        elif not isinstance(error, AgencyAgentError):
            error = AgencyAgentError(f"{step.name} failed: {error}")
        error.context["actions_taken"] = list(self.transcript.actions)
        return error

    def _warn(self, step: WorkflowStep, error: Exception) -> None:
        message = error.message if isinstance(error, AgencyAgentError) else str(error)
        self.transcript.warnings.append(f"{step.name}: {message}")
        logger.warning(
            "Best-effort workflow step failed",
            operation=self.operation,
            step=step.name,
            error=message,
            error_type=type(error).__name__,
        )


async def run_steps(operation: str, steps: Sequence[WorkflowStep], state: Optional[dict] = None) -> dict:
    """Run `steps` with a fresh transcript; returns the final state."""
    return await StepRunner(operation).run(steps, state)
