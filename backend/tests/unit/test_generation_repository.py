"""
生成记录Repository单元测试
"""

import pytest

from arena.models.generation_record import GenerationStatus
from arena.repositories.generation_record import GenerationRecordRepository


@pytest.mark.unit
@pytest.mark.database
class TestGenerationRecordRepository:
    """GenerationRecordRepository 单元测试类"""

    @pytest.mark.asyncio
    async def test_insert_and_read_back(self, db_session):
        """测试插入记录后可按ID读取"""
        repo = GenerationRecordRepository(db_session)

        record = await repo.insert(
            user_id="user-1",
            prompt="a red bicycle",
            model="flux-1",
            output_image_url="https://cdn.test/a.png",
            input_image_url="https://img.test/in.png",
            metadata={"durationMs": 1200, "tokens": None}
        )
        loaded = await repo.get_by_id(record.id)

        assert loaded.user_id == "user-1"
        assert loaded.status == "completed"
        assert loaded.record_metadata == {"durationMs": 1200, "tokens": None}
        assert loaded.to_dict()["outputImageUrl"] == "https://cdn.test/a.png"
        assert loaded.created_at is not None

    @pytest.mark.asyncio
    async def test_count_completed_ignores_failed_and_other_users(self, db_session):
        """测试已完成计数只包含当前用户的完成记录"""
        repo = GenerationRecordRepository(db_session)
        await repo.insert("user-1", "p", "flux-1", output_image_url="https://a")
        await repo.insert("user-1", "p", "flux-1", status=GenerationStatus.FAILED, error="Generation failed")
        await repo.insert("user-2", "p", "flux-1", output_image_url="https://b")

        assert await repo.count_completed("user-1") == 1
        assert await repo.count_completed("user-2") == 1
        assert await repo.count_completed("nobody") == 0

    @pytest.mark.asyncio
    async def test_list_completed_newest_first(self, db_session):
        """测试按创建时间倒序列出"""
        repo = GenerationRecordRepository(db_session)
        for index in range(3):
            await repo.insert("user-1", f"p{index}", "gemini-image-flash", output_image_url=f"https://cdn.test/{index}.png")

        records = await repo.list_completed("user-1")

        assert [r.output_image_url for r in records] == [
            "https://cdn.test/2.png",
            "https://cdn.test/1.png",
            "https://cdn.test/0.png",
        ]

    @pytest.mark.asyncio
    async def test_list_completed_with_limit(self, db_session):
        """测试限制返回数量"""
        repo = GenerationRecordRepository(db_session)
        for index in range(3):
            await repo.insert("user-1", "p", "flux-1", output_image_url=f"https://cdn.test/{index}.png")

        records = await repo.list_completed("user-1", limit=2)

        assert len(records) == 2
