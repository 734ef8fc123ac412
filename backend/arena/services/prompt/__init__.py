"""
提示词服务
"""
