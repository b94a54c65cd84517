"""工具系统：协作方协议、schema 转换、注册表与调度。"""

from .definitions import AudioItem, ContentItem, ImageItem, ResourceItem, TextItem, ToolCollaborator, ToolSpec
from .executor import LocalToolCollaborator
from .registry import ToolRegistration

__all__ = [
    "AudioItem",
    "ContentItem",
    "ImageItem",
    "LocalToolCollaborator",
    "ResourceItem",
    "TextItem",
    "ToolCollaborator",
    "ToolRegistration",
    "ToolSpec",
]
