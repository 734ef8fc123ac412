"""
核心模块：配置、日志、异常、供应商适配器与存储
"""
