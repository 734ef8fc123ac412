"""
视频生成服务
"""
