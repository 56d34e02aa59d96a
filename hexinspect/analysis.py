"""
AI Analysis Module
==================

Optional AI-assisted summaries of loaded files.

Providers are interchangeable Analyzer implementations selected from the
settings (get_analyzer); call sites never branch on the provider name.

Features:
- Per-file summary: probable file type, short summary, up to 5 findings
- Cross-file relationship analysis when more than one file is loaded
- Requests run on QThread workers; at most one request is in flight per key
  (file id) and a superseded request never updates the session state

Only the first 512 bytes of a file are sent, formatted as a hex dump.
"""

import json
import logging
import threading
from dataclasses import dataclass, field

import requests
from PyQt5.QtCore import QObject, QThread, pyqtSignal

from .errors import AnalysisCancelled, AnalysisError
from .hex_view import BYTES_PER_ROW, format_offset
from .session import (AnalysisSetCrossResult, AnalysisStartCross, AnalysisStartSingle,
                      AnalysisUpdateSingle, ResetCrossAnalysis)
from .settings import DEFAULT_SETTINGS, api_key

logger = logging.getLogger(__name__)

AI_SAMPLE_SIZE = 512
MAX_FINDINGS = 5
RELATIONSHIP_KEY = "__relationships__"

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
OPENAI_URL = "https://api.openai.com/v1/chat/completions"

SUMMARY_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "fileType": {"type": "STRING", "description": "Detected file type, e.g. 'PNG image', 'UTF-8 plain text'."},
        "summary": {"type": "STRING", "description": "Short summary of the purpose or contents of the file."},
        "findings": {
            "type": "ARRAY",
            "items": {"type": "STRING"},
            "description": "Notable findings extracted from the data (at most 5).",
        },
    },
    "required": ["fileType", "summary", "findings"],
}

RELATIONSHIP_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "related": {"type": "BOOLEAN", "description": "Are these files likely related?"},
        "relationship": {"type": "STRING", "description": "Short description of the relationship, or 'Unrelated'."},
        "reasoning": {"type": "STRING", "description": "Why the relationship does or does not exist."},
    },
    "required": ["related", "relationship", "reasoning"],
}

SUMMARY_PROMPT = (
    "You are a forensic file analyst. Analyze the following hexadecimal dump of a file. "
    "Your answer MUST be a valid JSON object with the keys \"fileType\" (string), "
    "\"summary\" (string) and \"findings\" (array of strings). Identify the likely file type, "
    "summarize its purpose and extract up to 5 notable findings such as readable strings "
    "or interesting data patterns.\n\nData:\n```\n{data}\n```"
)

RELATIONSHIP_PROMPT = (
    "You are a forensic file analyst. Based on the summaries of several files, decide whether "
    "the files are likely related. Your answer MUST be a valid JSON object with the keys "
    "\"related\" (boolean), \"relationship\" (string) and \"reasoning\" (string).\n\n"
    "Files:\n{files}"
)


@dataclass(frozen=True)
class AnalysisResult:
    file_type: str
    summary: str
    findings: tuple = field(default_factory=tuple)

    @classmethod
    def from_json(cls, payload):
        if not isinstance(payload, dict):
            raise AnalysisError("Unexpected analysis response: expected a JSON object.")
        findings = payload.get("findings") or []
        if not isinstance(findings, list):
            findings = [findings]
        return cls(
            file_type=str(payload.get("fileType") or "Unknown"),
            summary=str(payload.get("summary") or ""),
            findings=tuple(str(item) for item in findings[:MAX_FINDINGS]),
        )


@dataclass(frozen=True)
class CrossFileResult:
    related: bool
    relationship: str
    reasoning: str

    @classmethod
    def from_json(cls, payload):
        if not isinstance(payload, dict):
            raise AnalysisError("Unexpected analysis response: expected a JSON object.")
        return cls(
            related=bool(payload.get("related")),
            relationship=str(payload.get("relationship") or ""),
            reasoning=str(payload.get("reasoning") or ""),
        )


def format_bytes_for_prompt(data, sample_size=AI_SAMPLE_SIZE):
    """Hex dump of the first sample_size bytes, one 16-byte line per row."""
    sample = bytes(data[:sample_size])
    lines = []
    for i in range(0, len(sample), BYTES_PER_ROW):
        chunk = sample[i:i + BYTES_PER_ROW]
        lines.append(f"{format_offset(i)}: " + ' '.join(f"{b:02X}" for b in chunk))
    return '\n'.join(lines)


def format_summaries_for_prompt(summaries):
    return '\n\n'.join(
        f"- File: {s['file_name']}\n  Type: {s['file_type']}\n  Summary: {s['summary']}"
        for s in summaries
    )


def _parse_json(text):
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise AnalysisError(f"The AI provider returned invalid JSON: {e}") from e


class Analyzer:
    """
    Capability interface of an AI provider.

    Subclasses implement analyze(data) -> AnalysisResult and
    relate(summaries) -> CrossFileResult.
    """
    name = "analyzer"

    def analyze(self, data):
        raise NotImplementedError

    def relate(self, summaries):
        raise NotImplementedError


class UnconfiguredAnalyzer(Analyzer):
    name = "unconfigured"

    def __init__(self, reason="No AI provider is configured."):
        self.reason = reason

    def analyze(self, data):
        raise AnalysisError(self.reason)

    def relate(self, summaries):
        raise AnalysisError(self.reason)


class _HttpAnalyzer(Analyzer):
    display_name = "AI provider"
    env_hint = ""

    def __init__(self, api_key, model, timeout=DEFAULT_SETTINGS["request_timeout"], session=None):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.session = session or requests

    def _require_key(self):
        if not self.api_key:
            raise AnalysisError(f"{self.display_name} API key is not configured. "
                                f"Please set the {self.env_hint} environment variable.")

    def _post(self, url, payload, headers):
        try:
            response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise AnalysisError(f"{self.display_name} request failed: {e}") from e

        if not response.ok:
            try:
                details = response.json().get("error", {}).get("message")
            except ValueError:
                details = None
            raise AnalysisError(f"{self.display_name} API Error: {response.status_code} {response.reason} - "
                                f"{details or 'Failed to get error details.'}")
        try:
            return response.json()
        except ValueError as e:
            raise AnalysisError(f"{self.display_name} returned a non-JSON response.") from e


class GeminiAnalyzer(_HttpAnalyzer):
    name = "gemini"
    display_name = "Gemini"
    env_hint = "GEMINI_API_KEY"

    def _generate(self, prompt, schema):
        self._require_key()
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        }
        body = self._post(GEMINI_URL.format(model=self.model), payload,
                          {"x-goog-api-key": self.api_key})
        try:
            text = body["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise AnalysisError("Gemini returned no content.") from e
        return _parse_json(text)

    def analyze(self, data):
        prompt = SUMMARY_PROMPT.format(data=format_bytes_for_prompt(data))
        return AnalysisResult.from_json(self._generate(prompt, SUMMARY_SCHEMA))

    def relate(self, summaries):
        prompt = RELATIONSHIP_PROMPT.format(files=format_summaries_for_prompt(summaries))
        return CrossFileResult.from_json(self._generate(prompt, RELATIONSHIP_SCHEMA))


class OpenAIAnalyzer(_HttpAnalyzer):
    name = "openai"
    display_name = "OpenAI"
    env_hint = "OPENAI_API_KEY"

    def _complete(self, prompt):
        self._require_key()
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {"type": "json_object"},
        }
        body = self._post(OPENAI_URL, payload, {"Authorization": f"Bearer {self.api_key}"})
        try:
            text = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise AnalysisError("OpenAI returned no content.") from e
        return _parse_json(text)

    def analyze(self, data):
        prompt = SUMMARY_PROMPT.format(data=format_bytes_for_prompt(data))
        return AnalysisResult.from_json(self._complete(prompt))

    def relate(self, summaries):
        prompt = RELATIONSHIP_PROMPT.format(files=format_summaries_for_prompt(summaries))
        return CrossFileResult.from_json(self._complete(prompt))


def get_analyzer(provider, settings=None, environ=None):
    """Build the Analyzer for provider using settings and environment API keys."""
    settings = settings or DEFAULT_SETTINGS
    timeout = settings.get("request_timeout", DEFAULT_SETTINGS["request_timeout"])
    if provider == "gemini":
        return GeminiAnalyzer(api_key("gemini", environ),
                              settings.get("gemini_model", DEFAULT_SETTINGS["gemini_model"]), timeout)
    if provider == "openai":
        return OpenAIAnalyzer(api_key("openai", environ),
                              settings.get("openai_model", DEFAULT_SETTINGS["openai_model"]), timeout)
    return UnconfiguredAnalyzer("Invalid AI provider specified.")


# --- Request tracking ---

class Ticket:
    """One in-flight request for a key."""

    def __init__(self, key, generation):
        self.key = key
        self.generation = generation
        self.cancelled = threading.Event()

    def check(self):
        if self.cancelled.is_set():
            raise AnalysisCancelled(f"Analysis for {self.key} was superseded")


class RequestTracker:
    """Keeps at most one current Ticket per key."""

    def __init__(self):
        self._current = {}
        self._generation = 0
        self._lock = threading.Lock()

    def begin(self, key):
        """Start a request for key, cancelling the previous one."""
        with self._lock:
            previous = self._current.get(key)
            if previous is not None:
                previous.cancelled.set()
                logger.info("Cancelling previous analysis for %s", key)
            self._generation += 1
            ticket = Ticket(key, self._generation)
            self._current[key] = ticket
            return ticket

    def is_current(self, ticket):
        with self._lock:
            return self._current.get(ticket.key) is ticket and not ticket.cancelled.is_set()

    def finish(self, ticket):
        """Retire ticket. Returns True if it was still the current request for its key."""
        with self._lock:
            if self._current.get(ticket.key) is not ticket or ticket.cancelled.is_set():
                return False
            del self._current[ticket.key]
            return True

    def in_flight(self):
        with self._lock:
            return set(self._current)

    def cancel(self, key):
        with self._lock:
            ticket = self._current.pop(key, None)
            if ticket is not None:
                ticket.cancelled.set()

    def cancel_all(self):
        with self._lock:
            for ticket in self._current.values():
                ticket.cancelled.set()
            self._current.clear()


class AnalysisWorker(QThread):
    """
    Background thread running one analysis job.

    Signals:
        succeeded (object, object): (ticket, result)
        failed (object, object): (ticket, exception)
    """
    succeeded = pyqtSignal(object, object)
    failed = pyqtSignal(object, object)

    def __init__(self, ticket, job, parent=None):
        super().__init__(parent)
        self.ticket = ticket
        self.job = job

    def run(self):
        try:
            result = self.job(self.ticket)
        except Exception as e:
            self.failed.emit(self.ticket, e)
        else:
            self.succeeded.emit(self.ticket, result)


def summaries_for(files):
    """Summaries of analyzed files for the relationship prompt, or None if one is missing."""
    summaries = []
    for f in files:
        result = f.analysis.result if f.analysis else None
        if result is None or f.analysis.error:
            return None
        summaries.append({"file_name": f.name, "file_type": result.file_type or "Unknown",
                          "summary": result.summary or ""})
    return summaries


class AnalysisManager(QObject):
    """
    Runs analyses for the files in a SessionStore.

    Args:
        store: SessionStore receiving the analysis actions
        analyzer_factory: Callable provider -> Analyzer
        runner: Callable (ticket, job) starting job in the background and
            reporting back through on_succeeded / on_failed; defaults to a
            QThread per request
    """

    def __init__(self, store, analyzer_factory=get_analyzer, runner=None, parent=None):
        super().__init__(parent)
        self.store = store
        self.analyzer_factory = analyzer_factory
        self.runner = runner or self._start_worker
        self.tracker = RequestTracker()
        self._handlers = {}
        self._workers = {}
        self._batch_pending = None

    # --- plumbing ---

    def _start_worker(self, ticket, job):
        worker = AnalysisWorker(ticket, job)
        worker.succeeded.connect(self.on_succeeded)
        worker.failed.connect(self.on_failed)
        worker.finished.connect(lambda: self._workers.pop(ticket.generation, None))
        self._workers[ticket.generation] = worker
        worker.start()

    def _submit(self, key, job, on_success, on_error):
        ticket = self.tracker.begin(key)
        self._handlers[ticket.generation] = (on_success, on_error)
        self.runner(ticket, job)
        return ticket

    def on_succeeded(self, ticket, result):
        on_success, _ = self._handlers.pop(ticket.generation, (None, None))
        if not self.tracker.finish(ticket) or on_success is None:
            logger.info("Discarding superseded analysis result for %s", ticket.key)
            return
        on_success(result)

    def on_failed(self, ticket, error):
        _, on_error = self._handlers.pop(ticket.generation, (None, None))
        if not self.tracker.finish(ticket) or on_error is None:
            logger.info("Discarding superseded analysis for %s: %s", ticket.key, error)
            return
        logger.error("Analysis for %s failed: %s", ticket.key, error)
        on_error(error)

    def cancel_all(self):
        self.tracker.cancel_all()
        self._batch_pending = None

    def cancel_relationships(self):
        """Drop the pending or running cross-file analysis (the file set changed)."""
        self.tracker.cancel(RELATIONSHIP_KEY)
        self._batch_pending = None

    def is_running(self):
        return bool(self.tracker.in_flight())

    # --- operations ---

    def analyze_file(self, file_id, provider=None):
        """Analyze one file, superseding any in-flight analysis of the same file."""
        loaded = self.store.state.find(file_id)
        if loaded is None:
            return None
        analyzer = self.analyzer_factory(provider or self.store.state.ai_provider)
        data = loaded.data

        def job(ticket):
            ticket.check()
            result = analyzer.analyze(data)
            ticket.check()
            return result

        self.store.dispatch(AnalysisStartSingle(file_id))
        return self._submit(
            file_id, job,
            lambda result: self._single_done(file_id, result=result),
            lambda error: self._single_done(file_id, error=str(error) or "An unknown error occurred."),
        )

    def _single_done(self, file_id, result=None, error=None):
        self.store.dispatch(AnalysisUpdateSingle(file_id, result=result, error=error))
        if self._batch_pending is not None:
            self._batch_pending.discard(file_id)
            if not self._batch_pending:
                self._batch_pending = None
                self._relate_all()

    def run_analysis(self):
        """Analyze every file lacking a result, then relate them when more than one is loaded."""
        self.store.dispatch(ResetCrossAnalysis())
        state = self.store.state
        needing = [f.id for f in state.files
                   if f.analysis is None or f.analysis.result is None or f.analysis.error]

        self.store.dispatch(AnalysisStartCross())
        if not needing:
            self._relate_all()
            return

        self._batch_pending = set(needing)
        for file_id in needing:
            self.analyze_file(file_id, state.ai_provider)

    def _relate_all(self):
        state = self.store.state
        if len(state.files) <= 1:
            self.store.dispatch(AnalysisSetCrossResult())
            return

        summaries = summaries_for(state.files)
        if summaries is None:
            self.store.dispatch(AnalysisSetCrossResult(
                error="Could not analyze relationships because one or more files failed analysis."))
            return

        analyzer = self.analyzer_factory(state.ai_provider)

        def job(ticket):
            ticket.check()
            return analyzer.relate(summaries)

        self._submit(
            RELATIONSHIP_KEY, job,
            lambda result: self.store.dispatch(AnalysisSetCrossResult(result=result)),
            lambda error: self.store.dispatch(AnalysisSetCrossResult(error=f"Analysis Failed: {error}")),
        )
