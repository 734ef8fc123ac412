"""
ID生成工具模块
提供统一的ID和随机文件名生成方法
"""

import uuid
import random
import string


def generate_uuid() -> str:
    """生成标准UUID字符串"""
    return str(uuid.uuid4())


def generate_random_name(length: int = 13) -> str:
    """
    生成随机文件名（小写字母与数字）

    Args:
        length: 名称长度，默认13位

    Returns:
        str: 随机名称
    """
    if length < 4:
        raise ValueError("名称长度不能小于4位")
    return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))


def generate_id_with_prefix(prefix: str) -> str:
    """
    生成带前缀的ID

    Args:
        prefix: ID前缀（如"turn", "req"等）

    Returns:
        str: 带前缀的ID
    """
    return f"{prefix}_{generate_uuid()}"


def generate_turn_id() -> str:
    """生成对话轮次ID"""
    return generate_id_with_prefix("turn")
