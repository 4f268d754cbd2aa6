"""Generation stages."""

from sitegen.stages.base import BaseStage, StageContext, extract_json
from sitegen.stages.copywriter import CopywriterStage
from sitegen.stages.design_strategy import DesignStrategyStage
from sitegen.stages.image_generator import ImageGeneratorStage
from sitegen.stages.image_planner import ImagePlannerStage
from sitegen.stages.layout_generator import LayoutGeneratorStage
from sitegen.stages.section_planner import SectionPlannerStage
from sitegen.stages.seo_generator import SEOGeneratorStage
from sitegen.stages.style_designer import StyleDesignerStage

__all__ = [
    "BaseStage",
    "StageContext",
    "extract_json",
    "CopywriterStage",
    "DesignStrategyStage",
    "ImageGeneratorStage",
    "ImagePlannerStage",
    "LayoutGeneratorStage",
    "SectionPlannerStage",
    "SEOGeneratorStage",
    "StyleDesignerStage",
]
