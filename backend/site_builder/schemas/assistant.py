from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, conint, constr

from site_builder.schemas.common import ApiKeys, CodeChange, HistoryEntry, WireModel

TaskStatus = Literal["pending", "approved", "in-progress", "completed", "failed"]
Severity = Literal["low", "medium", "high"]


class ChatRequest(WireModel):
    """One code-assistant turn."""

    message: constr(min_length=1) = Field(..., description="The user's instruction.")
    project_content: Dict[str, str] = Field(
        default_factory=dict,
        alias="projectContent",
        description="Current project files keyed by path.",
    )
    project_id: Optional[str] = Field(
        default=None,
        alias="projectId",
        description="Opaque project identifier, used for logging only.",
    )
    conversation_history: List[HistoryEntry] = Field(
        default_factory=list,
        alias="conversationHistory",
        description="Prior turns, most recent last.",
    )
    api_keys: ApiKeys = Field(default_factory=ApiKeys, alias="apiKeys")
    retries: Optional[conint(ge=0, le=1)] = Field(
        default=None,
        description="Retry count for this call (0 or 1). Defaults to the service setting.",
    )


class ChatResponse(WireModel):
    response: str
    files: Dict[str, str] = Field(default_factory=dict)
    code_changes: List[CodeChange] = Field(default_factory=list, alias="codeChanges")
    provider: str
    model: str


class CodeChangePlan(WireModel):
    file: str
    action: str = "modify"
    description: str = ""
    preview: Optional[str] = None


class AiAnalysis(WireModel):
    complexity: Optional[Any] = None
    risk_level: Optional[str] = Field(default=None, alias="riskLevel")
    recommendations: List[str] = Field(default_factory=list)


class PlanTask(WireModel):
    id: str
    title: str = ""
    description: str = ""
    priority: str = "medium"
    estimated_time: Optional[str] = Field(default=None, alias="estimatedTime")
    affected_files: List[str] = Field(default_factory=list, alias="affectedFiles")
    dependencies: List[str] = Field(default_factory=list)
    code_changes: List[CodeChangePlan] = Field(default_factory=list, alias="codeChanges")
    ai_analysis: Optional[AiAnalysis] = Field(default=None, alias="aiAnalysis")
    status: TaskStatus = "pending"


class PlanRequest(WireModel):
    message: constr(min_length=1)
    project_content: Dict[str, str] = Field(default_factory=dict, alias="projectContent")
    project_id: Optional[str] = Field(default=None, alias="projectId")
    api_keys: ApiKeys = Field(default_factory=ApiKeys, alias="apiKeys")


class PlanResponse(WireModel):
    id: str
    project_id: Optional[str] = Field(default=None, alias="projectId")
    title: str
    description: str
    total_estimated_time: str = Field(alias="totalEstimatedTime")
    tasks: List[PlanTask]
    provider: str
    model: str


class TaskExecutionRequest(WireModel):
    task: PlanTask
    project_content: Dict[str, str] = Field(default_factory=dict, alias="projectContent")
    project_id: Optional[str] = Field(default=None, alias="projectId")
    api_keys: ApiKeys = Field(default_factory=ApiKeys, alias="apiKeys")


class TaskExecutionResponse(WireModel):
    task_id: str = Field(alias="taskId")
    status: TaskStatus
    files: Dict[str, str]
    analysis: Optional[str] = None
    summary: Optional[str] = None
    verification: Optional[str] = None
    provider: str
    model: str


class Suggestion(WireModel):
    issue: constr(min_length=1)
    severity: Severity = "medium"
    fix: str = ""
    affected_files: List[str] = Field(default_factory=list, alias="affectedFiles")


class AnalysisRequest(WireModel):
    project_content: Dict[str, str] = Field(default_factory=dict, alias="projectContent")
    project_id: Optional[str] = Field(default=None, alias="projectId")
    metrics: Dict[str, Any] = Field(
        default_factory=dict,
        description="Optional preview metrics: loadTime, jsErrors, cssErrors.",
    )
    api_keys: ApiKeys = Field(default_factory=ApiKeys, alias="apiKeys")


class AnalysisResponse(WireModel):
    suggestions: List[Suggestion]
    provider: str
    model: str


class AutoFixRequest(WireModel):
    issues: List[Suggestion] = Field(..., min_length=1)
    project_content: Dict[str, str] = Field(default_factory=dict, alias="projectContent")
    project_id: Optional[str] = Field(default=None, alias="projectId")
    api_keys: ApiKeys = Field(default_factory=ApiKeys, alias="apiKeys")


class AutoFixResult(WireModel):
    issue: str
    status: Literal["fixed", "no_changes", "failed"]
    files: Dict[str, str] = Field(default_factory=dict)
    error: Optional[str] = None


class AutoFixResponse(WireModel):
    results: List[AutoFixResult]
    files: Dict[str, str] = Field(
        default_factory=dict,
        description="All fixed files merged; later issues win on conflicts.",
    )
