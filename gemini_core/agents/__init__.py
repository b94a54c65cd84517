"""会话 driver 与响应合并。"""
