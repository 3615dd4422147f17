from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List, Literal

AIModelName = Literal["gpt-4o-mini", "gpt-4-turbo", "gpt-4o"]


class ContentSelection(BaseModel):
    structure: bool = True
    tools: bool = True
    materials: bool = True
    instructions_3_level: bool = True
    outputs: bool = True
    process_variables: bool = True
    time_estimation: bool = True
    decision_trees: bool = True
    alternate_tools: bool = True
    risks: bool = True


class ExistingStep(BaseModel):
    step_title: str


class ExistingOperation(BaseModel):
    name: str
    steps: List[ExistingStep] = []


class ExistingPhase(BaseModel):
    name: str
    operations: List[ExistingOperation] = []


class ExistingRisk(BaseModel):
    risk: str
    mitigation: str = ""


class ExistingContent(BaseModel):
    phases: List[ExistingPhase] = []
    risks: List[ExistingRisk] = []


class GenerationRequest(BaseModel):
    project_name: str = Field(..., min_length=1)
    project_description: Optional[str] = None
    category: List[str] = []
    ai_model: Optional[AIModelName] = None
    include_web_scraping: bool = True
    web_sources: List[str] = []
    content_selection: ContentSelection = ContentSelection()
    ai_instructions: Optional[str] = None
    existing_project_id: Optional[str] = None
    existing_content: Optional[ExistingContent] = None


class CostEstimateRequest(BaseModel):
    project_name: str
    estimated_steps: int = Field(50, ge=1)
    ai_model: Optional[AIModelName] = None
    include_web_scraping: bool = True


class GenerationMetadata(BaseModel):
    estimated_cost: Dict[str, float]
    sources_used: List[str]
    tokens_used: Dict[str, int]
    generation_time: int  # milliseconds
    model: str


class GenerationResponse(BaseModel):
    project: Dict[str, Any]
    metadata: GenerationMetadata


class ImportRequest(BaseModel):
    project_name: str = Field(..., min_length=1)
    project_description: str = ""
    category: List[str] = []
    structure: Dict[str, Any]


class ImportStats(BaseModel):
    phases_created: int = 0
    operations_created: int = 0
    steps_created: int = 0
    instructions_created: int = 0
    tools_matched: int = 0
    materials_matched: int = 0
    process_variables_created: int = 0
    outputs_created: int = 0


class ImportResult(BaseModel):
    success: bool = False
    project_id: Optional[str] = None
    errors: List[str] = []
    warnings: List[str] = []
    stats: ImportStats = ImportStats()
