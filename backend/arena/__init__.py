"""
Image Arena 后端包
"""
