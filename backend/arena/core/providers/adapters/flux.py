"""
Flux-1 供应商（Black Forest Labs Kontext Pro）
提交-轮询形态：提交任务获得 polling_url，按固定间隔轮询直到 Ready / Error / Failed
"""

from typing import Any, Dict, Optional

import httpx

from arena.core.config import settings
from arena.core.exceptions import UpstreamError
from arena.core.log_utils import get_logger
from arena.core.providers.base import BaseGenerationProvider
from arena.core.providers.models import InputImage, ProviderId, ProviderOutcome
from arena.core.providers.polling import PollPolicy, SleepFunc, poll_until

logger = get_logger(__name__)


class FluxStatus:
    """BFL 任务状态"""
    READY = "Ready"
    ERROR = "Error"
    FAILED = "Failed"

    TERMINAL = frozenset({READY, ERROR, FAILED})


def is_terminal_state(payload: Dict[str, Any]) -> bool:
    return payload.get("status") in FluxStatus.TERMINAL


class FluxProvider(BaseGenerationProvider):
    """Flux-1 图片生成供应商"""

    PROVIDER_ID = ProviderId.FLUX
    API_KEY_SETTING = "BFL_API_KEY"

    MODEL_NAME = "flux-kontext-pro"

    def __init__(
        self,
        *args,
        poll_policy: Optional[PollPolicy] = None,
        sleep: Optional[SleepFunc] = None,
        **kwargs
    ):
        super().__init__(*args, **kwargs)
        self.poll_policy = poll_policy or PollPolicy(
            interval=settings.poll_interval_seconds,
            max_attempts=settings.poll_max_attempts,
            is_terminal=is_terminal_state
        )
        self._sleep = sleep

    @property
    def model_name(self) -> str:
        return self.MODEL_NAME

    def _headers(self) -> Dict[str, str]:
        return {
            "accept": "application/json",
            "x-key": self.api_key,
        }

    async def _request_json(self, client: httpx.AsyncClient, method: str, url: str, stage: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise UpstreamError(f"BFL {stage} failed: {e}") from e

        if response.status_code >= 400:
            raise UpstreamError(
                f"BFL {stage} failed",
                details={"status_code": response.status_code, "body": response.text[:500] or None}
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"BFL {stage} returned invalid JSON") from e

    async def _generate(self, prompt: str, image: Optional[InputImage]) -> ProviderOutcome:
        """提交任务并轮询结果"""
        body: Dict[str, Any] = {"prompt": prompt}
        if image is not None:
            body["input_image"] = image.base64

        owns_client = self.http_client is None
        client = self.http_client or httpx.AsyncClient(timeout=settings.provider_request_timeout)
        try:
            submitted = await self._request_json(
                client, "POST", settings.flux_endpoint, "submit", json=body
            )
            polling_url = submitted.get("polling_url")
            if not polling_url:
                raise UpstreamError("No polling URL returned")

            logger.info("Flux任务已提交", polling_url=polling_url)

            poll_kwargs = {"sleep": self._sleep} if self._sleep is not None else {}
            final_state = await poll_until(
                lambda: self._request_json(client, "GET", polling_url, "polling"),
                self.poll_policy,
                **poll_kwargs
            )
        finally:
            if owns_client:
                await client.aclose()

        if final_state.get("status") != FluxStatus.READY:
            raise UpstreamError(
                "Generation failed",
                code="GENERATION_FAILED",
                details={"status": final_state.get("status")},
                status_code=500
            )

        sample_url = (final_state.get("result") or {}).get("sample")
        # BFL 返回的 sample 已经是可访问的URL，直接使用
        return self._build_outcome(sample_url, None, None, task_id=submitted.get("id"))
