"""Operation dispatcher.

Maps an operation kind to analysis backend call(s) for a single clip,
including the composite operations built from several calls.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List

from ..errors import UnknownOperationError
from ..models import BatchOperationType
from . import backend as commands
from .backend import AnalysisBackend
from .paths import ClipPathResolver

logger = logging.getLogger("clipbatch.dispatcher")

DEFAULT_WHISPER_MODEL = "whisper-1"
DEFAULT_MAX_CHARS_PER_LINE = 42
LANGUAGE_CONFIDENCE = 0.9


def generate_subtitles(text: str, options: Dict[str, Any]) -> Dict[str, Any]:
    """Pack transcription words into subtitle lines.

    Words are appended greedily; a line is flushed when the next word would
    push it past ``maxCharactersPerLine``. A word longer than the limit gets
    a line of its own.
    """
    max_chars = _option(options, "maxCharactersPerLine", DEFAULT_MAX_CHARS_PER_LINE)
    subtitles: List[str] = []
    current = ""

    for word in text.split():
        if current and len(current) + len(word) + 1 > max_chars:
            subtitles.append(current)
            current = word
        else:
            current = f"{current} {word}" if current else word

    if current:
        subtitles.append(current)

    return {
        "subtitles": subtitles,
        "format": _option(options, "format", "srt"),
        "lineCount": len(subtitles),
        "totalCharacters": len(text),
    }


class OperationDispatcher:
    """Runs one operation for one clip against the analysis backend."""

    def __init__(self, backend: AnalysisBackend, resolver: ClipPathResolver):
        self.backend = backend
        self.resolver = resolver

    async def dispatch(self, clip_id: str, operation: str, options: Dict[str, Any]) -> Any:
        """Run ``operation`` for ``clip_id``.

        Raises:
            UnknownOperationError: if the operation kind is not recognised
            Exception: whatever the resolver or backend raises
        """
        try:
            kind = BatchOperationType(operation)
        except ValueError:
            raise UnknownOperationError(operation) from None

        logger.debug(f"Dispatching {operation} for clip {clip_id}")

        if kind == BatchOperationType.VIDEO_ANALYSIS:
            return await self.backend.invoke(commands.QUICK_ANALYSIS, {
                "filePath": self.resolver.resolve(clip_id),
            })

        if kind == BatchOperationType.WHISPER_TRANSCRIPTION:
            return await self._transcribe(clip_id, options)

        if kind == BatchOperationType.SUBTITLE_GENERATION:
            transcription = await self._transcribe(clip_id, options)
            return generate_subtitles(_text_of(transcription), options)

        if kind == BatchOperationType.QUALITY_ANALYSIS:
            return await self.backend.invoke(commands.ANALYZE_QUALITY, {
                "filePath": self.resolver.resolve(clip_id),
                "enableBitrateAnalysis": True,
                "enableResolutionAnalysis": True,
            })

        if kind == BatchOperationType.SCENE_DETECTION:
            return await self.backend.invoke(commands.DETECT_SCENES, {
                "filePath": self.resolver.resolve(clip_id),
                "threshold": _option(options, "threshold", 0.3),
                "minSceneLength": _option(options, "minSceneLength", 1.0),
            })

        if kind == BatchOperationType.MOTION_ANALYSIS:
            return await self.backend.invoke(commands.ANALYZE_MOTION, {
                "filePath": self.resolver.resolve(clip_id),
                "algorithm": _option(options, "algorithm", "optical_flow"),
                "sensitivity": _option(options, "sensitivity", 0.1),
            })

        if kind == BatchOperationType.AUDIO_ANALYSIS:
            return await self.backend.invoke(commands.ANALYZE_AUDIO, {
                "filePath": self.resolver.resolve(clip_id),
                "enableSpectralAnalysis": True,
                "enableDynamicsAnalysis": True,
            })

        if kind == BatchOperationType.LANGUAGE_DETECTION:
            # Detection always uses the default model with no language hint
            result = await self._transcribe(clip_id, {})
            language = result.get("language") if isinstance(result, dict) else None
            return {"language": language or "unknown", "confidence": LANGUAGE_CONFIDENCE}

        if kind == BatchOperationType.COMPREHENSIVE_ANALYSIS:
            # Always fully parallel, independent of the batch chunk size
            video, audio, quality = await asyncio.gather(
                self.dispatch(clip_id, BatchOperationType.VIDEO_ANALYSIS.value, options),
                self.dispatch(clip_id, BatchOperationType.AUDIO_ANALYSIS.value, options),
                self.dispatch(clip_id, BatchOperationType.QUALITY_ANALYSIS.value, options),
            )
            return {
                "video": video,
                "audio": audio,
                "quality": quality,
                "clipId": clip_id,
                "timestamp": datetime.utcnow().isoformat(),
            }

        raise UnknownOperationError(operation)

    async def _extract_audio(self, clip_id: str) -> str:
        return await self.backend.invoke(commands.EXTRACT_AUDIO, {
            "videoFilePath": self.resolver.resolve(clip_id),
            "outputFormat": "wav",
        })

    async def _transcribe(self, clip_id: str, options: Dict[str, Any]) -> Any:
        audio_path = await self._extract_audio(clip_id)
        return await self.backend.invoke(commands.TRANSCRIBE, {
            "audioFilePath": audio_path,
            "apiKey": "",
            "model": _option(options, "model", DEFAULT_WHISPER_MODEL),
            "language": options.get("language"),
            "responseFormat": "verbose_json",
            "temperature": 0,
            "timestampGranularities": ["segment"],
        })


def _text_of(transcription: Any) -> str:
    if isinstance(transcription, dict):
        return transcription.get("text") or ""
    return str(transcription or "")


def _option(options: Dict[str, Any], key: str, default: Any) -> Any:
    value = options.get(key)
    return default if value is None else value
