"""
日志消息模板模块
统一管理所有业务日志消息模板，便于维护和国际化
"""

from typing import Dict, Any


class LogMessages:
    """日志消息模板类"""

    # ==================== 通用日志消息 ====================
    START_OPERATION = "开始执行操作: {operation_name}"
    OPERATION_SUCCESS = "操作成功完成: {operation_name}"
    OPERATION_FAILED = "操作执行失败: {operation_name}"

    # ==================== 数据库操作相关 ====================
    DB_QUERY_START = "开始数据库查询"
    DB_QUERY_SUCCESS = "数据库查询成功"
    DB_QUERY_FAILED = "数据库查询失败"
    DB_UPDATE_START = "开始数据库更新"
    DB_UPDATE_SUCCESS = "数据库更新成功"
    DB_UPDATE_FAILED = "数据库更新失败"

    # ==================== 生成调度相关 ====================
    GENERATION_DISPATCH = "开始并发调度 {provider_count} 个供应商"
    GENERATION_BRANCH_SETTLED = "供应商分支完成: {provider_id}"
    GENERATION_FANOUT_COMPLETE = "并发调度全部完成"
    GENERATION_RECORD_SAVED = "生成记录已保存: {provider_id}"

    # ==================== 配额相关 ====================
    QUOTA_REJECTED = "用户生成次数已达上限 {limit}"
    QUOTA_PASSED = "配额检查通过"

    # ==================== 存储相关 ====================
    STORAGE_UPLOAD_SUCCESS = "生成结果上传成功"
    STORAGE_UPLOAD_FALLBACK = "生成结果上传失败，回退为内联数据URL"

    # ==================== 迁移相关 ====================
    MIGRATION_START = "开始迁移用户图片"
    MIGRATION_ITEM_SKIPPED = "图片迁移跳过"
    MIGRATION_COMPLETE = "用户图片迁移完成"

    # ==================== 业务验证相关 ====================
    VALIDATION_PASSED = "验证通过"
    VALIDATION_FAILED = "验证失败"

    @classmethod
    def format_message(cls, message_template: str, **kwargs: Any) -> str:
        """格式化日志消息模板"""
        return message_template.format(**kwargs)

    @classmethod
    def get_structured_data(cls, **kwargs: Any) -> Dict[str, Any]:
        """获取结构化日志数据"""
        return kwargs


# 全局实例
log_messages = LogMessages()
