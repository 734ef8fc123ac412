"""
数据库模块
"""
