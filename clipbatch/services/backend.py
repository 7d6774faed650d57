"""Analysis backend client.

The backend performs the actual per-clip work (ffmpeg inspection, Whisper
transcription). The engine only knows it by command name.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..errors import BackendError

logger = logging.getLogger("clipbatch.backend")

# Command names understood by the analysis backend
QUICK_ANALYSIS = "ffmpeg_quick_analysis"
ANALYZE_AUDIO = "ffmpeg_analyze_audio"
ANALYZE_QUALITY = "ffmpeg_analyze_quality"
DETECT_SCENES = "ffmpeg_detect_scenes"
ANALYZE_MOTION = "ffmpeg_analyze_motion"
TRANSCRIBE = "whisper_transcribe_openai"
EXTRACT_AUDIO = "extract_audio_for_whisper"


class AnalysisBackend(ABC):
    """Abstract interface to the analysis backend."""

    @abstractmethod
    async def invoke(self, command: str, params: Dict[str, Any]) -> Any:
        """Run one command and return its payload. Raises on failure."""
        ...


class HttpAnalysisBackend(AnalysisBackend):
    """Backend reached over HTTP.

    Each command is a ``POST {base_url}/commands/{command}`` with the params
    as the JSON body; the JSON response body is the payload.
    """

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self.transport,
                trust_env=False,
            )
        return self._client

    async def invoke(self, command: str, params: Dict[str, Any]) -> Any:
        client = self._get_client()
        logger.debug(f"Invoking {command} with {params}")
        try:
            response = await client.post(f"/commands/{command}", json=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Backend command {command} returned {e.response.status_code}: {e.response.text}")
            raise BackendError(command, f"HTTP {e.response.status_code}: {e.response.text}") from e
        except httpx.RequestError as e:
            logger.error(f"Backend command {command} could not be sent: {e}")
            raise BackendError(command, str(e)) from e
        return response.json()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
