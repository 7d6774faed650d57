"""Test doubles for ClipBatch tests."""

import asyncio
import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from clipbatch.services import backend as commands
from clipbatch.services.backend import AnalysisBackend

DEFAULT_RESPONSES: Dict[str, Any] = {
    commands.QUICK_ANALYSIS: {"duration": 12.5, "codec": "h264"},
    commands.ANALYZE_AUDIO: {"loudness": -14.0},
    commands.ANALYZE_QUALITY: {"bitrate": 8000, "resolution": "1920x1080"},
    commands.DETECT_SCENES: {"scenes": [0.0, 4.2, 9.1]},
    commands.ANALYZE_MOTION: {"motion": 0.42},
    commands.EXTRACT_AUDIO: "/tmp/audio.wav",
    commands.TRANSCRIBE: {"text": "hello world", "language": "en"},
}


class FakeBackend(AnalysisBackend):
    """In-memory analysis backend.

    Args:
        responses: Payload per command; a callable receives the params, an
            exception instance is raised
        delay: Seconds each call takes
        fail_for: Clip ids whose calls raise RuntimeError
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        delay: float = 0.0,
        fail_for: Iterable[str] = (),
    ):
        self.responses = {**DEFAULT_RESPONSES, **(responses or {})}
        self.delay = delay
        self.fail_for = set(fail_for)
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.started_at: List[float] = []

    async def invoke(self, command: str, params: Dict[str, Any]) -> Any:
        self.calls.append((command, params))
        self.started_at.append(time.monotonic())
        if self.delay:
            await asyncio.sleep(self.delay)

        path = params.get("filePath") or params.get("videoFilePath") or ""
        for clip_id in self.fail_for:
            if f"/{clip_id}." in path:
                raise RuntimeError(f"Processing failed for {clip_id}")

        response = self.responses.get(command)
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params)
        return response

    def commands_called(self) -> List[str]:
        return [command for command, _ in self.calls]


def first_call(backend: FakeBackend, command: str) -> Dict[str, Any]:
    """Params of the first call to ``command``."""
    for called, params in backend.calls:
        if called == command:
            return params
    raise AssertionError(f"{command} was never invoked")


def make_callback() -> Tuple[List[Tuple[int, int]], Callable]:
    """Progress callback that records (completed, failed) per call."""
    seen: List[Tuple[int, int]] = []

    def callback(progress):
        seen.append((progress.completed, progress.failed))

    return seen, callback
