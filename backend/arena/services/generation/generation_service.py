"""
生成业务服务
单供应商生成与多供应商对比：配额检查 -> 调度适配器 -> 归并结果 -> 成功分支落库
"""

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from arena.core.exceptions import ArenaError, ValidationError, status_for_code
from arena.core.log_messages import log_messages
from arena.core.log_utils import get_logger
from arena.core.providers.base import BaseGenerationProvider
from arena.core.providers.enhancer import PromptEnhancer
from arena.core.providers.factory import ProviderFactory
from arena.core.providers.image_input import is_remote_url
from arena.core.providers.models import ProviderId, ProviderOutcome
from arena.core.storage.base_storage import BaseStorage
from arena.repositories.generation_record import GenerationRecordRepository
from arena.schemas.generation import OutcomeSchema
from arena.services.generation.conversation import ConversationTurn
from arena.services.generation.orchestrator import FanOutDispatch, FanOutOrchestrator, GenerationRequest
from arena.services.generation.presentation import validate_selection
from arena.services.generation.quota import QuotaGuard
from arena.services.generation.reducer import merge, open_assistant_turn

logger = get_logger(__name__)


def outcome_error(outcome: ProviderOutcome) -> ArenaError:
    """把失败结果还原为带HTTP状态码的业务异常"""
    return ArenaError(
        outcome.error_message or "Generation failed",
        code=outcome.error_code,
        details=outcome.metadata,
        status_code=status_for_code(outcome.error_code)
    )


def format_sse(event: str, data: Dict[str, Any]) -> str:
    payload = json.dumps({"event": event, "data": data}, ensure_ascii=False)
    return f"data: {payload}\n\n"


@dataclass
class CompareSession:
    """一次已通过校验并已开始调度的对比请求"""
    user_id: str
    request: GenerationRequest
    turn: ConversationTurn
    dispatch: FanOutDispatch


class GenerationService:
    """生成业务服务"""

    def __init__(
        self,
        db: AsyncSession,
        storage: Optional[BaseStorage] = None,
        enhancer: Optional[PromptEnhancer] = None,
        orchestrator: Optional[FanOutOrchestrator] = None,
        quota_limit: Optional[int] = None,
        session_factory: Optional[async_sessionmaker] = None
    ):
        """
        初始化生成服务

        Args:
            db: 数据库会话
            storage: 存储服务，None 时生成结果以数据URL返回
            enhancer: 提示词增强器
            orchestrator: 并发调度器
            quota_limit: 配额上限，不传时读取配置
            session_factory: 对比分支落库使用的会话工厂，不传时复用 db
        """
        self.db = db
        self.repository = GenerationRecordRepository(db)
        self.quota_guard = QuotaGuard(self.repository, quota_limit)
        self.storage = storage
        self.enhancer = enhancer or PromptEnhancer()
        self.orchestrator = orchestrator or FanOutOrchestrator()
        self.session_factory = session_factory
        self._persist_lock = asyncio.Lock()

    def build_adapter(self, provider_id: ProviderId) -> BaseGenerationProvider:
        return ProviderFactory.create_provider(provider_id, storage=self.storage, enhancer=self.enhancer)

    @staticmethod
    def _validate_prompt(prompt: Optional[str]) -> str:
        if not prompt or not prompt.strip():
            raise ValidationError("Prompt is required")
        return prompt.strip()

    async def persist_outcome(
        self,
        user_id: str,
        request: GenerationRequest,
        outcome: ProviderOutcome,
        repository: Optional[GenerationRecordRepository] = None
    ) -> bool:
        """
        成功分支写入生成记录；写入失败只记录日志，不影响已生成的结果

        Args:
            repository: 写入使用的仓储，默认使用服务自身的会话

        Returns:
            bool: 是否写入成功
        """
        if not outcome.is_success:
            return False
        repository = repository or self.repository

        input_image_url = request.image if isinstance(request.image, str) and is_remote_url(request.image) else None
        metadata = {
            "durationMs": outcome.duration_ms,
            "tokens": outcome.tokens_used,
            "usage": outcome.usage.to_dict() if outcome.usage else None,
            "hasText": bool(outcome.text),
            "enhance": request.enhance,
        }
        try:
            await repository.insert(
                user_id=user_id,
                prompt=request.prompt,
                model=outcome.provider_id.value,
                output_image_url=outcome.image_url,
                input_image_url=input_image_url,
                metadata=metadata,
            )
            return True
        except SQLAlchemyError as e:
            logger.error(
                log_messages.DB_UPDATE_FAILED,
                operation_name="persist_outcome",
                provider=outcome.provider_id.value,
                exception=e
            )
            return False

    async def persist_branch(
        self,
        user_id: str,
        request: GenerationRequest,
        outcome: ProviderOutcome
    ) -> bool:
        """
        对比分支落库，在分支任务内执行，不依赖事件流是否仍被读取

        有会话工厂时每条记录使用独立会话，不复用请求级会话；
        分支并发结束时串行写入。
        """
        if not outcome.is_success:
            return False
        async with self._persist_lock:
            if self.session_factory is None:
                return await self.persist_outcome(user_id, request, outcome)
            try:
                async with self.session_factory() as db:
                    return await self.persist_outcome(
                        user_id, request, outcome, repository=GenerationRecordRepository(db)
                    )
            except SQLAlchemyError as e:
                logger.error(
                    log_messages.DB_UPDATE_FAILED,
                    operation_name="persist_branch",
                    provider=outcome.provider_id.value,
                    exception=e
                )
                return False

    async def generate(
        self,
        user_id: str,
        provider_id: ProviderId,
        prompt: Optional[str],
        image: Optional[str] = None,
        enhance: bool = False
    ) -> ProviderOutcome:
        """
        单供应商生成

        Returns:
            ProviderOutcome: 成功结果

        Raises:
            ValidationError: 提示词为空或供应商不支持
            ConfigurationError: 缺少供应商密钥
            QuotaExceededError: 超过配额
            ArenaError: 供应商调用失败（状态码取决于错误码）
        """
        prompt = self._validate_prompt(prompt)
        adapter = self.build_adapter(provider_id)
        adapter.ensure_configured()
        await self.quota_guard.check(user_id)

        request = GenerationRequest(
            prompt=prompt,
            providers=(adapter.PROVIDER_ID,),
            image=image,
            enhance=enhance
        )
        outcome = await adapter.invoke(prompt, image, enhance)
        if not outcome.is_success:
            raise outcome_error(outcome)

        await self.persist_outcome(user_id, request, outcome)
        return outcome

    async def start_compare(
        self,
        user_id: str,
        prompt: Optional[str],
        providers: List[str],
        image: Optional[str] = None,
        enhance: bool = False
    ) -> CompareSession:
        """
        校验并启动多供应商对比；校验与配额失败时不会调度任何供应商

        Raises:
            ValidationError: 未选择供应商、供应商不支持或提示词为空
            QuotaExceededError: 超过配额
        """
        selected = validate_selection([ProviderFactory.resolve_provider_id(p) for p in providers])
        prompt = self._validate_prompt(prompt)
        adapters = ProviderFactory.create_providers(selected, storage=self.storage, enhancer=self.enhancer)

        await self.quota_guard.check(user_id)

        request = GenerationRequest(prompt=prompt, providers=selected, image=image, enhance=enhance)
        turn = open_assistant_turn(selected)

        async def persist(provider_id: ProviderId, outcome: ProviderOutcome) -> None:
            await self.persist_branch(user_id, request, outcome)

        dispatch = self.orchestrator.dispatch(request, adapters, after_settle=persist)
        return CompareSession(user_id=user_id, request=request, turn=turn, dispatch=dispatch)

    async def stream_compare(self, session: CompareSession) -> AsyncIterator[str]:
        """
        按完成顺序输出SSE事件：turn（初始轮次）-> branch（每个分支）-> done

        只读取调度结果；成功分支已在分支任务内落库，客户端断开不影响记录写入
        """
        started = time.time()
        turn = session.turn
        yield format_sse("turn", {"turn": turn.to_dict()})

        succeeded = 0
        async for provider_id, outcome in session.dispatch:
            turn = merge(turn, provider_id, outcome)
            if outcome.is_success:
                succeeded += 1
            yield format_sse("branch", {
                "providerId": provider_id.value,
                "outcome": OutcomeSchema.from_outcome(outcome).model_dump(mode="json", by_alias=True),
                "turn": turn.to_dict(),
            })

        await session.dispatch.wait_all()
        logger.info(
            log_messages.GENERATION_FANOUT_COMPLETE,
            user_id=session.user_id,
            provider_count=len(session.dispatch),
            succeeded=succeeded,
            elapsed=round(time.time() - started, 3)
        )
        yield format_sse("done", {
            "turn": turn.to_dict(),
            "succeeded": succeeded,
            "failed": len(session.dispatch) - succeeded,
        })

    async def list_images(self, user_id: str) -> Dict[str, Any]:
        """用户已完成生成的图片（最新在前）"""
        records = await self.repository.list_completed(user_id)
        urls = [record.output_image_url for record in records if record.output_image_url]
        count = len(urls)
        return {
            "urls": urls,
            "count": count,
            "limitReached": count >= self.quota_guard.limit,
        }
