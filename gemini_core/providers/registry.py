"""模型能力配置。

不同 Gemini 模型的能力不同：图像生成模型需要 TEXT+IMAGE 输出模态，
且目前不支持 system instruction。driver 根据这里的表做分支，
而不是在代码里散落对具体模型名的判断。
"""

from dataclasses import dataclass
from typing import List, Mapping

from gemini_core.domain.exceptions import ModelNotFoundError
from gemini_core.domain.request import Modality


@dataclass(frozen=True)
class GoogleModel:
    """单个模型的配置。"""

    name: str
    supports_system_instruction: bool = True
    image_generation: bool = False

    def default_modalities(self) -> List[Modality]:
        if self.image_generation:
            return [Modality.TEXT, Modality.IMAGE]
        return [Modality.TEXT]

    def __str__(self) -> str:
        return self.name


GEMINI_2_0_FLASH_EXP_IMAGE_GEN = GoogleModel(
    name="gemini-2.0-flash-exp-image-generation",
    supports_system_instruction=False,
    image_generation=True,
)
GEMINI_2_0_FLASH = GoogleModel(name="gemini-2.0-flash")
GEMINI_2_5_FLASH = GoogleModel(name="gemini-2.5-flash")
GEMINI_2_5_PRO = GoogleModel(name="gemini-2.5-pro")


MODEL_REGISTRY: Mapping[str, GoogleModel] = {
    m.name: m
    for m in (
        GEMINI_2_0_FLASH_EXP_IMAGE_GEN,
        GEMINI_2_0_FLASH,
        GEMINI_2_5_FLASH,
        GEMINI_2_5_PRO,
    )
}


def get_model(name: str) -> GoogleModel:
    """根据名称获取模型配置，名称须完全匹配。"""

    try:
        return MODEL_REGISTRY[name]
    except KeyError:
        raise ModelNotFoundError(code="MODEL_NOT_FOUND", message=f"No such model: {name}") from None
