"""
GRC AI Assist - Prompt Dispatcher
Builds task prompts and sends them to the local Ollama generate endpoint.
"""

import errno
import socket
import time
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

import httpx
import ollama

from src.core.config import OllamaSettings, get_ollama_settings
from util.logging import logger
from .prompts import JSON_ONLY_INSTRUCTION, PromptTemplate
from .types import FailureReason, InferenceRequest


class InferenceError(Exception):
    """Raised when the inference endpoint cannot produce a response."""

    reason = FailureReason.TRANSPORT_ERROR

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.detail = detail or message


class EndpointUnavailable(InferenceError):
    """The endpoint refused the connection (service not running)."""

    reason = FailureReason.ENDPOINT_UNAVAILABLE


class TransportError(InferenceError):
    """Any other network or HTTP failure, including timeouts and non-2xx replies."""

    def __init__(self, message: str, detail: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, detail)
        self.status_code = status_code


UNAVAILABLE_MESSAGE = "Ollama is not running. Please start Ollama service first."
TRANSPORT_MESSAGE = "Failed to connect to local AI model. Please check Ollama configuration."


def _wrapped_os_errors(exc: BaseException) -> List[OSError]:
    """OS-level errors chained beneath ``exc``, including exception group members."""
    found: List[OSError] = []
    seen = set()
    pending = [exc.__cause__, exc.__context__]

    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, OSError):
            found.append(current)
        pending.extend([current.__cause__, current.__context__])
        members = getattr(current, "exceptions", None)
        if isinstance(members, (list, tuple)):
            pending.extend(m for m in members if isinstance(m, BaseException))

    return found


def is_connection_refused(exc: BaseException) -> bool:
    """
    Whether a connect failure means nothing is listening at the endpoint.

    The ollama client re-raises httpx connect errors as a bare ConnectionError,
    so the chained cause decides. DNS failures and unreachable hosts are not
    refusals; a failure with no OS-level cause is treated as one.
    """
    if isinstance(exc, ConnectionRefusedError):
        return True

    causes = [e for e in _wrapped_os_errors(exc) if e.errno is not None or isinstance(e, socket.gaierror)]
    if not causes:
        return True
    return any(
        isinstance(e, ConnectionRefusedError) or e.errno == errno.ECONNREFUSED
        for e in causes
    )


@dataclass
class EndpointHealth:
    """Result of probing the inference endpoint."""
    reachable: bool
    model: str
    model_available: bool = False
    available_models: List[str] = field(default_factory=list)
    error: Optional[str] = None


class PromptDispatcher:
    """
    Sends one prompt per call to ``{base_url}/api/generate``.

    No retries are attempted; the client timeout is the only latency bound.
    """

    def __init__(self, settings: Optional[OllamaSettings] = None, client: Any = None):
        self.settings = settings or get_ollama_settings()
        self._client = client

    @property
    def model_id(self) -> str:
        return self.settings.model

    @property
    def client(self):
        if self._client is None:
            self._client = ollama.AsyncClient(
                host=self.settings.base_url,
                timeout=self.settings.timeout_sec,
            )
        return self._client

    def build_request(self, template: PromptTemplate, context: Mapping[str, Any]) -> InferenceRequest:
        """Interpolate ``context`` into ``template`` and bind it to the configured model."""
        prompt = template.interpolate(context)
        if template.expect_structured:
            prompt = f"{prompt}\n\n{JSON_ONLY_INSTRUCTION}"

        return InferenceRequest(
            task=template.task,
            prompt_text=prompt,
            expect_structured=template.expect_structured,
            model_id=self.model_id,
        )

    async def send(self, request: InferenceRequest) -> str:
        """
        Issue a single non-streaming generation request.

        Returns:
            The raw ``response`` text (empty string when absent)

        Raises:
            EndpointUnavailable: connection refused
            TransportError: any other transport or HTTP failure
        """
        logger.log_inference_request(
            request.task.value, request.model_id, request.prompt_text, request.expect_structured
        )
        start_time = time.monotonic()

        try:
            response = await self.client.generate(
                model=request.model_id,
                prompt=request.prompt_text,
                stream=False,
                options={
                    "temperature": self.settings.temperature,
                    "top_p": self.settings.top_p,
                },
            )
        except ollama.ResponseError as e:
            # Non-2xx reply from the endpoint
            logger.log_inference_failure("http_status", f"{e.status_code}: {e.error}", request.model_id)
            raise TransportError(
                TRANSPORT_MESSAGE, detail=f"HTTP {e.status_code}: {e.error}", status_code=e.status_code
            ) from e
        except (ConnectionError, httpx.ConnectError) as e:
            if not is_connection_refused(e):
                logger.log_inference_failure("connect", str(e), request.model_id)
                raise TransportError(TRANSPORT_MESSAGE, detail=str(e)) from e
            logger.log_inference_failure("connection_refused", str(e), request.model_id)
            raise EndpointUnavailable(UNAVAILABLE_MESSAGE, detail=str(e)) from e
        except httpx.TimeoutException as e:
            logger.log_inference_failure("timeout", str(e), request.model_id)
            raise TransportError(
                TRANSPORT_MESSAGE, detail=f"Timed out after {self.settings.timeout_sec}s"
            ) from e
        except Exception as e:
            logger.log_inference_failure("transport", str(e), request.model_id)
            raise TransportError(TRANSPORT_MESSAGE, detail=str(e)) from e

        text = response.get("response") or ""
        duration_ms = int((time.monotonic() - start_time) * 1000)
        logger.log_inference_response(request.model_id, text, duration_ms)
        return text

    async def check_health(self) -> EndpointHealth:
        """Probe the endpoint's model list and check the configured model is pulled."""
        try:
            listing = await self.client.list()
        except (ConnectionError, httpx.ConnectError) as e:
            message = UNAVAILABLE_MESSAGE if is_connection_refused(e) else TRANSPORT_MESSAGE
            return EndpointHealth(reachable=False, model=self.model_id, error=f"{message} ({e})")
        except Exception as e:
            return EndpointHealth(reachable=False, model=self.model_id, error=str(e))

        names = []
        for entry in listing.get("models", None) or []:
            name = entry.get("model") or entry.get("name")
            if name:
                names.append(name)

        return EndpointHealth(
            reachable=True,
            model=self.model_id,
            model_available=any(self.model_id in name for name in names),
            available_models=names,
        )
