from typing import Dict, List, Optional

from pydantic import Field, constr

from site_builder.schemas.common import ApiKeys, WireModel


class ProjectGenerationRequest(WireModel):
    """
    Schema for generating a brand new project from the creation wizard.
    """

    title: constr(min_length=1) = Field(..., description="Project title.")
    description: constr(min_length=1) = Field(..., description="What the site should do.")
    output_format: Optional[str] = Field(default=None, alias="outputFormat")
    color_theme: Optional[str] = Field(
        default=None,
        alias="colorTheme",
        description="Theme name (blue, purple, ...) or a JSON object string of custom colours.",
    )
    template: Optional[str] = None
    animations: List[str] = Field(default_factory=list)
    special_requests: Optional[str] = Field(default=None, alias="specialRequests")
    api_keys: ApiKeys = Field(default_factory=ApiKeys, alias="apiKeys")


class ProjectGenerationResponse(WireModel):
    files: Dict[str, str]
    structure: str = ""
    features: List[str] = Field(default_factory=list)
    instructions: str = ""
    framework: str
    dependencies: List[str] = Field(default_factory=list)
    provider: str
    model: str


class PreviewRequest(WireModel):
    project_content: Dict[str, str] = Field(default_factory=dict, alias="projectContent")
