"""
API模块
"""
