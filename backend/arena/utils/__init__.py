"""
通用工具模块包
提供项目通用的工具函数和辅助类
"""

from .config_utils import (
    get_project_root,
    get_workspace_path,
    get_config_path,
    parse_json_config
)

from .id_utils import (
    generate_uuid,
    generate_random_name,
    generate_id_with_prefix,
    generate_turn_id
)

__all__ = [
    # 配置工具
    'get_project_root',
    'get_workspace_path',
    'get_config_path',
    'parse_json_config',

    # ID生成工具
    'generate_uuid',
    'generate_random_name',
    'generate_id_with_prefix',
    'generate_turn_id',
]
