from collections.abc import Sequence
from pathlib import Path

from app.analysis.models import Chunk
from app.analysis.prompt_loader import load_prompt_template, load_response_format


class PromptBuilder:
    """Renders the prompts used by the analysis pipeline."""

    def __init__(self, prompt_dir: Path | None = None) -> None:
        self._result_format = load_response_format("result_format.json", prompt_dir)
        self._chunk_format = load_response_format("chunk_format.json", prompt_dir)
        self._document = load_prompt_template("document_prompt.txt", prompt_dir)
        self._attachment = load_prompt_template("attachment_prompt.txt", prompt_dir)
        self._chunk = load_prompt_template("chunk_prompt.txt", prompt_dir)
        self._synthesis = load_prompt_template("synthesis_prompt.txt", prompt_dir)

    def document(self, text: str) -> str:
        return self._document.format(result_format=self._result_format, document_text=text)

    def attachment(self, subject: str) -> str:
        return self._attachment.format(subject=subject, result_format=self._result_format)

    def chunk(self, chunk: Chunk, chunk_count: int) -> str:
        return self._chunk.format(
            chunk_number=chunk.position,
            chunk_count=chunk_count,
            chunk_format=self._chunk_format,
            chunk_text=chunk.text,
        )

    def synthesis(self, summaries: Sequence[str], omitted: int) -> str:
        count = len(summaries)
        sections = "\n\n".join(
            f"=== SECTION {number} OF {count} ===\n{summary}\n=== END OF SECTION {number} ==="
            for number, summary in enumerate(summaries, start=1)
        )
        omitted_note = ""
        if omitted:
            omitted_note = (
                f" {omitted} further section(s) could not be analyzed and are not included."
            )
        return self._synthesis.format(
            section_count=count,
            omitted_note=omitted_note,
            result_format=self._result_format,
            sections=sections,
        )
