"""
Step Status and Navigation Result.

Defines the per-step status record produced by the status calculator and the
result structure returned by navigator processing.
"""

from dataclasses import dataclass, field

from .step_types import StepType


@dataclass(frozen=True)
class StepStatus:
    """Status of one checkout step."""
    type: StepType
    is_required: bool
    is_complete: bool
    is_active: bool = False
    is_editable: bool = True


@dataclass
class NavigationResult:
    """Result from navigator processing."""
    active_step: StepType | None
    previous_step: StepType | None
    statuses: list[StepStatus] = field(default_factory=list)
    redirect_url: str | None = None

    @property
    def changed(self) -> bool:
        return self.active_step != self.previous_step
