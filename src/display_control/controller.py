"""
Display settings controller.

Owns the resolution and scale registries, reflects the active state of
one output as selected indices, and applies the user's selection.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from .applier import ApplyResult, apply_mode, apply_scale
from .core import get_output
from .matcher import index_of
from .options import (
    DisplayMode,
    ScaleOption,
    SupportedOptionSet,
    populate_resolutions,
    populate_scales,
)
from .probe import ProbeError, ProbedState, probe_state

logger = logging.getLogger(__name__)


class ControllerState(Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    APPLYING = "applying"


class ApplyOutcome(Enum):
    """Classification of an apply action."""
    ERROR = "error"
    DEFAULT_RESTORED = "default_restored"
    CHANGED = "changed"


class ControllerBusy(Exception):
    """Raised when an apply is requested while another is running."""
    pass


def classify_outcome(
    mode_index: int,
    scale_index: int,
    mode_ok: bool,
    scale_ok: bool
) -> ApplyOutcome:
    """
    Classify an apply action.

    Any failed step is an error. Applying index 0 for both settings is a
    return to defaults and needs no confirmation; anything else that
    succeeded is a change the user must confirm.
    """
    if not mode_ok or not scale_ok:
        return ApplyOutcome.ERROR
    if mode_index == 0 and scale_index == 0:
        return ApplyOutcome.DEFAULT_RESTORED
    return ApplyOutcome.CHANGED


class DisplaySettingsController:
    """
    Controller behind the display settings page.

    Listeners are plain callables registered with ``connect_changed``,
    ``connect_restored`` and ``connect_error``. Error listeners receive
    the failure reason.

    Operations block until the external command exits and must not be
    run concurrently.

    ``init()`` only reflects the active state in the selected indices.
    It is optional before ``apply()`` or ``reset_to_default()``, which
    leave an uninitialized controller READY with the applied indices
    selected.
    """

    def __init__(
        self,
        resolutions: Optional[SupportedOptionSet[DisplayMode]] = None,
        scales: Optional[SupportedOptionSet[ScaleOption]] = None,
        output: Optional[str] = None,
        tool: Optional[str] = None,
        search_path: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize the controller.

        Args:
            resolutions: Resolution registry (defaults to populate_resolutions())
            scales: Scale registry (defaults to populate_scales())
            output: Output device to target
            tool: randr executable to run
            search_path: PATH for external commands
            timeout: Command timeout in seconds
        """
        self.resolutions = resolutions if resolutions is not None else populate_resolutions()
        self.scales = scales if scales is not None else populate_scales()
        self.output = get_output(output)
        self.tool = tool
        self.search_path = search_path
        self.timeout = timeout

        self.state = ControllerState.UNINITIALIZED
        self.last_error: Optional[str] = None
        self._mode_index: Optional[int] = None
        self._scale_index: Optional[int] = None

        self._on_changed: list[Callable[[], None]] = []
        self._on_restored: list[Callable[[], None]] = []
        self._on_error: list[Callable[[str], None]] = []

    # ----- notifications -----

    def connect_changed(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` when a non-default change needs confirmation."""
        self._on_changed.append(callback)

    def connect_restored(self, callback: Callable[[], None]) -> None:
        """Call ``callback`` when defaults were restored."""
        self._on_restored.append(callback)

    def connect_error(self, callback: Callable[[str], None]) -> None:
        """Call ``callback(reason)`` when an apply step failed."""
        self._on_error.append(callback)

    # ----- state -----

    def init(self) -> ProbedState:
        """
        Probe the active mode and scale and select the matching indices.

        Probe failures are logged and leave the selections unset; the
        controller is ready either way.

        Returns:
            The probed state (empty if probing failed)
        """
        self._mode_index = None
        self._scale_index = None

        try:
            probed = self._probe()
        except ProbeError as e:
            logger.warning("Could not read current display settings: %s", e)
            probed = ProbedState()

        if probed.mode is not None:
            self._mode_index = index_of(self.resolutions, probed.mode)
            if self._mode_index is None:
                logger.warning("Resolution %s not found in supported resolutions", probed.mode)
            else:
                logger.debug("Found %s at index: %d", probed.mode, self._mode_index)

        if probed.scale is not None:
            self._scale_index = index_of(self.scales, probed.scale)
            if self._scale_index is None:
                logger.warning("Scale %s not found in supported scales", probed.scale)
            else:
                logger.debug("Found %s at index: %d", probed.scale, self._scale_index)

        self.state = ControllerState.READY
        return probed

    def get_selected_mode_index(self) -> Optional[int]:
        return self._mode_index

    def get_selected_scale_index(self) -> Optional[int]:
        return self._scale_index

    def select_mode(self, index: int) -> None:
        if not self.resolutions.has_index(index):
            raise IndexError(f"Resolution index {index} out of range")
        self._mode_index = index

    def select_scale(self, index: int) -> None:
        if not self.scales.has_index(index):
            raise IndexError(f"Scale index {index} out of range")
        self._scale_index = index

    # ----- actions -----

    def apply(
        self,
        mode_index: Optional[int],
        scale_index: Optional[int]
    ) -> ApplyOutcome:
        """
        Apply the selected resolution and scale.

        An unset index means the default (0). Both commands are run even
        if the first one fails; a half-applied change is not rolled back.

        Args:
            mode_index: Index into the resolution registry
            scale_index: Index into the scale registry

        Returns:
            ApplyOutcome. ERROR notifies error listeners, CHANGED notifies
            changed listeners, DEFAULT_RESTORED notifies nobody.
        """
        mode_index = mode_index or 0
        scale_index = scale_index or 0

        if not self.resolutions.has_index(mode_index):
            return self._fail(f"Resolution index {mode_index} out of range")
        if not self.scales.has_index(scale_index):
            return self._fail(f"Scale index {scale_index} out of range")

        mode_result, scale_result = self._apply(mode_index, scale_index)
        self._mode_index = mode_index
        self._scale_index = scale_index

        outcome = classify_outcome(mode_index, scale_index, mode_result.ok, scale_result.ok)
        if outcome is ApplyOutcome.ERROR:
            return self._fail(_failure_reason(mode_result, scale_result))

        self.last_error = None
        if outcome is ApplyOutcome.CHANGED:
            for callback in self._on_changed:
                callback()
        return outcome

    def reset_to_default(self) -> bool:
        """
        Select and apply index 0 for both resolution and scale.

        Restored listeners are always notified, whether or not the
        commands succeeded.

        Returns:
            True if both commands succeeded
        """
        self._mode_index = 0
        self._scale_index = 0

        mode_result, scale_result = self._apply(0, 0)

        ok = mode_result.ok and scale_result.ok
        if ok:
            self.last_error = None
        else:
            self.last_error = _failure_reason(mode_result, scale_result)
            logger.warning("Restoring defaults failed: %s", self.last_error)

        for callback in self._on_restored:
            callback()
        return ok

    # ----- helpers -----

    def _probe(self) -> ProbedState:
        return probe_state(
            self.output,
            tool=self.tool,
            search_path=self.search_path,
            timeout=self.timeout
        )

    def _apply(self, mode_index: int, scale_index: int) -> tuple[ApplyResult, ApplyResult]:
        if self.state is ControllerState.APPLYING:
            raise ControllerBusy("Display settings are already being applied")

        self.state = ControllerState.APPLYING
        try:
            if self.resolutions.has_index(mode_index):
                mode_result = apply_mode(
                    self.resolutions[mode_index],
                    is_custom=mode_index > 0,
                    output=self.output,
                    tool=self.tool,
                    search_path=self.search_path,
                    timeout=self.timeout
                )
            else:
                mode_result = ApplyResult(ok=False, returncode=-1, stderr="No supported resolutions")
            scale_result = apply_scale(
                scale_index,
                output=self.output,
                tool=self.tool,
                search_path=self.search_path,
                timeout=self.timeout
            )
        finally:
            self.state = ControllerState.READY
        return mode_result, scale_result

    def _fail(self, reason: str) -> ApplyOutcome:
        self.last_error = reason
        logger.error("Applying display settings failed: %s", reason)
        for callback in self._on_error:
            callback(reason)
        return ApplyOutcome.ERROR


def _failure_reason(mode_result: ApplyResult, scale_result: ApplyResult) -> str:
    reasons = []
    if not mode_result.ok:
        reasons.append(f"resolution: {mode_result.stderr or 'failed'}")
    if not scale_result.ok:
        reasons.append(f"scale: {scale_result.stderr or 'failed'}")
    return "; ".join(reasons)
