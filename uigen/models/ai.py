# uigen/models/ai.py
"""
AI provider types: messages, responses, provider configuration and status,
and the tool-calling contract shared by providers and tools.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from uigen.models.common import CamelModel, utcnow


class AIProviderType(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"
    MOCK = "mock"


AI_PROVIDERS = {
    "ANTHROPIC": AIProviderType.ANTHROPIC.value,
    "OPENAI": AIProviderType.OPENAI.value,
    "GOOGLE": AIProviderType.GOOGLE.value,
    "MOCK": AIProviderType.MOCK.value,
}

AI_MODELS = {
    # Anthropic Claude
    "CLAUDE_3_5_SONNET": "claude-3-5-sonnet-20241022",
    "CLAUDE_3_5_HAIKU": "claude-3-5-haiku-20241022",
    "CLAUDE_3_OPUS": "claude-3-opus-20240229",
    # OpenAI GPT
    "GPT_4O": "gpt-4o",
    "GPT_4O_MINI": "gpt-4o-mini",
    "GPT_4_TURBO": "gpt-4-turbo",
    # Google Gemini
    "GEMINI_2_0_FLASH": "gemini-2.0-flash-001",
    "GEMINI_1_5_PRO": "gemini-1.5-pro",
    "GEMINI_1_5_FLASH": "gemini-1.5-flash",
}


class AIToolName(str, Enum):
    STR_REPLACE_EDITOR = "str_replace_editor"
    FILE_MANAGER = "file_manager"


Role = Literal["user", "assistant", "system"]


class AIMessage(CamelModel):
    role: Role
    content: str
    timestamp: Optional[datetime] = None


class TokenUsage(CamelModel):
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def of(cls, input_tokens: int, output_tokens: int) -> "TokenUsage":
        return cls(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
        )


class AITool(CamelModel):
    name: str
    description: str
    parameters: Dict[str, Any]


class AIToolCall(CamelModel):
    id: str
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class AIToolResult(CamelModel):
    tool_call_id: str
    result: Any = None
    error: Optional[str] = None


class AIResponse(CamelModel):
    content: str
    usage: Optional[TokenUsage] = None
    model: Optional[str] = None
    finish_reason: Optional[str] = None
    tool_calls: List[AIToolCall] = Field(default_factory=list)


class AIStreamChunk(CamelModel):
    content: str
    is_complete: bool
    usage: Optional[TokenUsage] = None


class AIGenerateOptions(CamelModel):
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    stream: bool = False
    system_prompt: Optional[str] = None
    tools: Optional[List[AITool]] = None


class AIProviderConfig(CamelModel):
    id: str
    name: str
    api_key: str = ""
    base_url: Optional[str] = None
    model: str
    is_active: bool = True
    priority: int = 0
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    rate_limit_per_minute: Optional[int] = None
    rate_limit_per_hour: Optional[int] = None
    cost_per_input_token: Optional[float] = None
    cost_per_output_token: Optional[float] = None

    def masked(self) -> Dict[str, Any]:
        """Wire form with the API key hidden."""
        data = self.to_json_dict()
        key = self.api_key
        data["apiKey"] = f"{key[:4]}…{key[-4:]}" if len(key) > 12 else ("***" if key else "")
        return data


class ProviderUsage(CamelModel):
    requests_today: int = 0
    tokens_today: int = 0
    cost_today: float = 0.0
    requests_this_month: int = 0
    tokens_this_month: int = 0
    cost_this_month: float = 0.0
    day: str = ""
    month: str = ""


class AIProviderStatus(CamelModel):
    id: str
    is_healthy: bool = True
    last_checked: datetime = Field(default_factory=utcnow)
    response_time: Optional[float] = None
    error_message: Optional[str] = None
    usage: ProviderUsage = Field(default_factory=ProviderUsage)
