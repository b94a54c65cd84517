"""领域层模型与协议。

包含：
- models: Part / Content / Candidate / ContentResponse 等对话数据模型。
- request: GenerateContentRequest 及生成参数、安全阈值、工具声明。
- codec: 与接口 camelCase JSON 之间的转换。
- conversation: 会话历史与暂存区。
- exceptions: 异常类型定义。
"""
