# tests/test_session.py
from hexinspect.file_loader import AnalysisState, LoadedFile
from hexinspect.session import (AnalysisSetCrossResult, AnalysisStartCross, AnalysisStartSingle,
                                AnalysisUpdateSingle, AppendFiles, RemoveFile, Reset,
                                ResetCrossAnalysis, SessionState, SessionStore, SetActiveFile,
                                SetAiProvider, SetFiles, StartReading, reduce)


def make_file(file_id, data=b"\x00"):
    return LoadedFile(id=file_id, name=f"{file_id}.bin", size=len(data), data=data)


def loaded_state(*ids):
    return reduce(SessionState(), SetFiles(tuple(make_file(i) for i in ids)))


def test_start_reading_clears_error():
    state = reduce(SessionState(file_error="boom"), StartReading())
    assert state.is_reading
    assert state.file_error is None


def test_set_files_activates_first():
    state = loaded_state("a", "b")
    assert not state.is_reading
    assert state.active_file_id == "a"
    assert state.active_file.name == "a.bin"


def test_set_files_keeps_error_message():
    state = reduce(SessionState(), SetFiles((), "Skipped files larger than 5MB."))
    assert state.files == ()
    assert state.active_file_id is None
    assert state.file_error == "Skipped files larger than 5MB."


def test_append_keeps_active_file():
    state = loaded_state("a")
    state = reduce(state, SetActiveFile("a"))
    state = reduce(state, AppendFiles((make_file("b"),)))
    assert [f.id for f in state.files] == ["a", "b"]
    assert state.active_file_id == "a"


def test_append_to_empty_session_activates_first():
    state = reduce(SessionState(), AppendFiles((make_file("x"),)))
    assert state.active_file_id == "x"


def test_remove_active_selects_previous():
    state = reduce(loaded_state("a", "b", "c"), SetActiveFile("c"))
    state = reduce(state, RemoveFile("c"))
    assert state.active_file_id == "b"


def test_remove_first_active_selects_new_first():
    state = reduce(loaded_state("a", "b"), RemoveFile("a"))
    assert state.active_file_id == "b"


def test_remove_inactive_keeps_active():
    state = reduce(loaded_state("a", "b", "c"), RemoveFile("b"))
    assert state.active_file_id == "a"


def test_remove_last_file():
    state = reduce(loaded_state("a"), RemoveFile("a"))
    assert state.files == ()
    assert state.active_file is None


def test_remove_down_to_one_file_clears_cross_analysis():
    state = reduce(loaded_state("a", "b"), AnalysisSetCrossResult(error="failed"))
    state = reduce(state, RemoveFile("b"))
    assert state.cross_error is None
    assert state.cross_result is None


def test_append_clears_cross_analysis():
    state = reduce(loaded_state("a", "b"), AnalysisSetCrossResult(result="related"))
    state = reduce(state, StartReading())
    state = reduce(state, AppendFiles((make_file("c"),)))
    assert [f.id for f in state.files] == ["a", "b", "c"]
    assert state.cross_result is None
    assert state.cross_error is None
    assert not state.is_cross_analyzing


def test_set_files_clears_cross_analysis():
    state = reduce(loaded_state("a", "b"), AnalysisStartCross())
    state = reduce(state, AnalysisSetCrossResult(error="failed"))
    state = reduce(state, SetFiles((make_file("x"), make_file("y"))))
    assert state.cross_error is None
    assert state.cross_result is None
    state = reduce(state, AnalysisStartCross())
    state = reduce(state, SetFiles((make_file("z"),)))
    assert not state.is_cross_analyzing


def test_single_analysis_lifecycle():
    state = reduce(loaded_state("a", "b"), AnalysisStartSingle("a"))
    assert state.find("a").analysis == AnalysisState(is_loading=True)
    assert state.find("b").analysis is None
    state = reduce(state, AnalysisUpdateSingle("a", error="nope"))
    assert state.find("a").analysis == AnalysisState(result=None, is_loading=False, error="nope")


def test_cross_analysis_lifecycle():
    state = reduce(loaded_state("a", "b"), AnalysisStartCross())
    assert state.is_cross_analyzing
    state = reduce(state, AnalysisSetCrossResult(result="related"))
    assert not state.is_cross_analyzing
    assert state.cross_result == "related"
    state = reduce(state, ResetCrossAnalysis())
    assert state.cross_result is None


def test_reset_keeps_provider():
    state = reduce(loaded_state("a"), SetAiProvider("openai"))
    state = reduce(state, Reset())
    assert state.files == ()
    assert state.ai_provider == "openai"


def test_unknown_action_is_ignored():
    state = loaded_state("a")
    assert reduce(state, object()) is state


def test_store_notifies_subscribers():
    store = SessionStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)
    store.dispatch(StartReading())
    unsubscribe()
    store.dispatch(SetFiles((make_file("a"),)))
    assert len(seen) == 1
    assert seen[0].is_reading
    assert store.state.active_file_id == "a"
