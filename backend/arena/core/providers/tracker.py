"""
MLflow追踪Mixin
为生成供应商适配器提供MLflow追踪功能
"""

import time
from typing import Any, Awaitable, Callable, Dict

from arena.core.log_utils import get_logger
from arena.core.mlflow_tracker import ensure_mlflow_initialized
from arena.core.providers.models import ProviderOutcome

logger = get_logger(__name__)


class MLflowTracingMixin:
    """MLflow追踪Mixin类

    需要子类提供：
    - mlflow_tracker 属性
    - PROVIDER_ID 与 model_name
    """

    def _initialize_mlflow(self) -> None:
        """初始化MLflow追踪"""
        try:
            if ensure_mlflow_initialized():
                logger.debug(
                    "MLflow追踪已启用",
                    operation="provider_mlflow_init_success",
                    provider=self.__class__.__name__
                )
        except Exception as e:
            logger.error(
                "初始化MLflow追踪时出现错误",
                exception=e,
                operation="provider_mlflow_init_error",
                provider=self.__class__.__name__
            )

    def _prepare_trace_inputs(self, prompt: str, has_image: bool) -> Dict[str, Any]:
        """准备追踪输入数据（不包含密钥等敏感信息）"""
        return {
            "prompt": prompt,
            "provider": self.PROVIDER_ID.value,
            "model": self.model_name,
            "has_input_image": has_image,
        }

    async def _with_mlflow_trace(
        self,
        prompt: str,
        has_image: bool,
        call_func: Callable[[], Awaitable[ProviderOutcome]]
    ) -> ProviderOutcome:
        """
        在MLflow trace上下文中执行一次供应商调用

        Args:
            prompt: 最终使用的提示词
            has_image: 是否携带输入图片
            call_func: 实际的调用协程函数

        Returns:
            ProviderOutcome: 调用结果
        """
        if not self.mlflow_tracker.is_initialized:
            return await call_func()

        import mlflow
        from mlflow.entities import SpanType

        inputs = self._prepare_trace_inputs(prompt, has_image)
        run_name = f"Generation_{self.PROVIDER_ID.value}_{self.model_name}"

        @mlflow.trace(name=run_name, span_type=SpanType.LLM)
        async def traced_generation() -> ProviderOutcome:
            start_time = time.time()
            outcome = await call_func()
            self._set_span_attributes(inputs, outcome, time.time() - start_time)
            return outcome

        with self.mlflow_tracker.start_run(run_name=run_name):
            return await traced_generation()

    def _set_span_attributes(
        self,
        inputs: Dict[str, Any],
        outcome: ProviderOutcome,
        execution_time: float
    ) -> None:
        """设置MLflow span属性"""
        try:
            import mlflow

            current_span = mlflow.get_current_active_span()
            if current_span:
                current_span.set_inputs(inputs)
                current_span.set_outputs({
                    "success": outcome.is_success,
                    "has_image": bool(outcome.image_url),
                    "has_text": bool(outcome.text),
                    "tokens_used": outcome.tokens_used,
                })
                current_span.set_attribute("provider", self.PROVIDER_ID.value)
                current_span.set_attribute("prompt_length", len(inputs.get("prompt") or ""))
                current_span.set_attribute("execution_time_seconds", round(execution_time, 3))
                current_span.set_attribute("success", outcome.is_success)

        except Exception as span_error:
            logger.warning(
                "设置MLflow span属性失败",
                operation="mlflow_span_set_failed",
                error=str(span_error)
            )
