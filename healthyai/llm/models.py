"""Wire models for the Ollama HTTP API and the tagged result of a send.

Backend bodies are validated here, at the boundary; nothing past the
client sees raw JSON.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

FailureKind = Literal["backend_unreachable", "malformed_response"]


class ModelTag(BaseModel):
    name: str


class TagsResponse(BaseModel):
    """Body of the model-listing endpoint."""

    models: list[ModelTag]


class GenerateOptions(BaseModel):
    temperature: float
    num_predict: int


class GenerateRequest(BaseModel):
    model: str
    prompt: str
    stream: bool = False
    options: GenerateOptions


class GenerateResponse(BaseModel):
    """Body of a non-streaming completion. An empty ``response`` is not a reply."""

    response: str = Field(min_length=1)


class GenerateReply(BaseModel):
    """The model answered."""

    kind: Literal["reply"] = "reply"
    text: str
    model: str

    @property
    def success(self) -> bool:
        return True


class GenerateFailure(BaseModel):
    """The send failed and was classified.

    Attributes:
        kind: ``"backend_unreachable"`` or ``"malformed_response"``.
        message: Short diagnostic description.
        status_code: HTTP status when the service answered with an error.
        raw_body: The uninterpretable body, kept for diagnostics only.
    """

    kind: FailureKind
    message: str
    model: str
    status_code: int | None = None
    raw_body: str | None = None

    @property
    def success(self) -> bool:
        return False

    def user_message(self) -> str:
        """Assistant-authored text shown in the transcript instead of a reply."""
        if self.kind == "malformed_response":
            return "Received an unexpected response format from the AI service."
        return (
            "I'm having trouble connecting to the AI service. Please make sure Ollama is "
            f"running on your machine. Error details: {self.message}"
        )


GenerateResult = Annotated[GenerateReply | GenerateFailure, Field(discriminator="kind")]
