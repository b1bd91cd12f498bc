from dataclasses import dataclass, field


@dataclass(frozen=True)
class InlinePart:
    """Binary payload sent alongside the prompt (image, PDF)."""

    mime_type: str
    data: bytes


@dataclass(frozen=True)
class ModelRequest:
    """Provider-neutral content for a single generation call."""

    prompt: str
    parts: tuple[InlinePart, ...] = ()
    temperature: float = 0.2


@dataclass(frozen=True)
class ModelResponse:
    """Raw model output plus any safety feedback reported by the provider."""

    text: str
    block_reason: str | None = None
    safety_details: list[str] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return self.block_reason is not None

    def describe_block(self) -> str:
        """Human-readable block reason including any safety ratings."""
        if self.block_reason is None:
            return ""
        if not self.safety_details:
            return self.block_reason
        return f"{self.block_reason}. Details: [{', '.join(self.safety_details)}]"
