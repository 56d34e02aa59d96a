"""
Session State Machine
=====================

Application state (loaded files, active file, reading / analysis status) as an
immutable SessionState plus a closed set of actions. reduce(state, action) is
a pure transition function; SessionStore wraps it with dispatch and change
notification for the GUI.

The decoder and hex view never see this state: they receive buffer, offset and
endianness explicitly.
"""

import logging
from dataclasses import dataclass, replace

from .file_loader import AnalysisState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionState:
    files: tuple = ()
    active_file_id: str = None
    is_reading: bool = False
    file_error: str = None
    cross_result: object = None
    is_cross_analyzing: bool = False
    cross_error: str = None
    ai_provider: str = "gemini"

    @property
    def active_file(self):
        for f in self.files:
            if f.id == self.active_file_id:
                return f
        return None

    def find(self, file_id):
        for f in self.files:
            if f.id == file_id:
                return f
        return None


# --- Actions ---

@dataclass(frozen=True)
class StartReading:
    pass


@dataclass(frozen=True)
class SetFiles:
    files: tuple
    error: str = None


@dataclass(frozen=True)
class AppendFiles:
    files: tuple
    error: str = None


@dataclass(frozen=True)
class SetActiveFile:
    file_id: str


@dataclass(frozen=True)
class RemoveFile:
    file_id: str


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class SetAiProvider:
    provider: str


@dataclass(frozen=True)
class AnalysisStartSingle:
    file_id: str


@dataclass(frozen=True)
class AnalysisUpdateSingle:
    file_id: str
    result: object = None
    error: str = None


@dataclass(frozen=True)
class AnalysisStartCross:
    pass


@dataclass(frozen=True)
class AnalysisSetCrossResult:
    result: object = None
    error: str = None


@dataclass(frozen=True)
class ResetCrossAnalysis:
    pass


def _with_analysis(files, file_id, analysis):
    return tuple(replace(f, analysis=analysis) if f.id == file_id else f for f in files)


def _remove_file(state, file_id):
    remaining = tuple(f for f in state.files if f.id != file_id)
    active = state.active_file_id

    if active == file_id:
        removed_index = next((i for i, f in enumerate(state.files) if f.id == file_id), -1)
        if not remaining:
            active = None
        elif removed_index > 0:
            active = remaining[removed_index - 1].id
        else:
            active = remaining[0].id

    changes = dict(files=remaining, active_file_id=active)
    if len(remaining) <= 1:
        changes.update(cross_result=None, is_cross_analyzing=False, cross_error=None)
    return replace(state, **changes)


def reduce(state, action):
    """Return the state that follows state after action. Unknown actions are ignored."""
    if isinstance(action, StartReading):
        return replace(state, is_reading=True, file_error=None)

    if isinstance(action, SetFiles):
        files = tuple(action.files)
        return replace(
            state,
            is_reading=False,
            files=files,
            active_file_id=files[0].id if files else None,
            file_error=action.error,
            cross_result=None,
            is_cross_analyzing=False,
            cross_error=None,
        )

    if isinstance(action, AppendFiles):
        files = state.files + tuple(action.files)
        active = state.active_file_id
        if active is None and files:
            active = files[0].id
        # The previous relationship verdict does not cover the new file set
        return replace(state, is_reading=False, files=files, active_file_id=active,
                       file_error=action.error, cross_result=None, is_cross_analyzing=False,
                       cross_error=None)

    if isinstance(action, SetActiveFile):
        return replace(state, active_file_id=action.file_id)

    if isinstance(action, RemoveFile):
        return _remove_file(state, action.file_id)

    if isinstance(action, Reset):
        # The provider choice survives a reset of the loaded files
        return SessionState(ai_provider=state.ai_provider)

    if isinstance(action, SetAiProvider):
        return replace(state, ai_provider=action.provider)

    if isinstance(action, AnalysisStartSingle):
        return replace(state, files=_with_analysis(state.files, action.file_id,
                                                   AnalysisState(is_loading=True)))

    if isinstance(action, AnalysisUpdateSingle):
        analysis = AnalysisState(result=action.result, is_loading=False, error=action.error)
        return replace(state, files=_with_analysis(state.files, action.file_id, analysis))

    if isinstance(action, AnalysisStartCross):
        return replace(state, is_cross_analyzing=True, cross_error=None, cross_result=None)

    if isinstance(action, AnalysisSetCrossResult):
        return replace(state, is_cross_analyzing=False, cross_error=action.error,
                       cross_result=action.result)

    if isinstance(action, ResetCrossAnalysis):
        return replace(state, cross_result=None, is_cross_analyzing=False, cross_error=None)

    logger.warning("Ignoring unknown action %r", action)
    return state


class SessionStore:
    """Holds the current SessionState and notifies subscribers after each dispatch."""

    def __init__(self, state=None):
        self.state = state or SessionState()
        self._subscribers = []

    def subscribe(self, callback):
        self._subscribers.append(callback)
        return lambda: self._subscribers.remove(callback)

    def dispatch(self, action):
        new_state = reduce(self.state, action)
        if new_state is self.state:
            return self.state
        self.state = new_state
        for callback in list(self._subscribers):
            callback(new_state)
        return new_state
