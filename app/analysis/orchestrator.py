"""Document analysis pipeline.

Pipeline: gate on size -> download and hash -> route by content type ->
direct analysis or chunked analysis + synthesis -> persist.
"""

from dataclasses import dataclass, field
from posixpath import basename

from app.analysis.activity import ActivityRecorder
from app.analysis.batch_scheduler import BatchScheduler
from app.analysis.chunk_analyzer import ChunkAnalyzer
from app.analysis.chunk_splitter import needs_chunking, split_text
from app.analysis.config import AnalysisConfig
from app.analysis.content_router import route_content
from app.analysis.document_analyzer import DocumentAnalyzer
from app.analysis.exceptions import EmptyDocumentError, IllegalStateTransitionError
from app.analysis.hashing import compute_content_hash
from app.analysis.models import (
    AnalysisJob,
    AnalysisOutcome,
    AnalysisRequest,
    AnalysisStrategy,
    ChunkSuccess,
    ContentHash,
    DocumentUpdate,
    OutcomeStatus,
    PipelineState,
    StructuredResult,
)
from app.analysis.prompt_builder import PromptBuilder
from app.analysis.retry import RetryingModelInvoker
from app.analysis.size_gate import evaluate_size
from app.analysis.synthesizer import Synthesizer
from app.database.repositories.activity_repository import ActivityRepository
from app.database.repositories.case_files_repository import CaseFilesRepository
from app.database.repositories.case_repository import ERROR_STATUS, CaseRepository
from app.logging.logger import Log
from app.pdf.base import BasePdfExtractor
from app.providers.base import BaseModelClient
from app.providers.factory import ModelClientFactory
from app.providers.models import InlinePart, ModelRequest
from app.storage.base import BaseBlobStore
from app.storage.exceptions import StorageError
from app.storage.models import StoredBlob

_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.GATING: frozenset({PipelineState.ROUTING, PipelineState.PERSISTING}),
    PipelineState.ROUTING: frozenset(
        {
            PipelineState.DIRECT_ANALYSIS,
            PipelineState.CHUNKED_ANALYSIS,
            PipelineState.PERSISTING,
        }
    ),
    PipelineState.DIRECT_ANALYSIS: frozenset({PipelineState.PERSISTING}),
    PipelineState.CHUNKED_ANALYSIS: frozenset({PipelineState.SYNTHESIZING}),
    PipelineState.SYNTHESIZING: frozenset({PipelineState.PERSISTING}),
    PipelineState.PERSISTING: frozenset({PipelineState.DONE}),
    PipelineState.DONE: frozenset(),
    PipelineState.FAILED: frozenset(),
}

_TERMINAL_STATES = frozenset({PipelineState.DONE, PipelineState.FAILED})

_PHASE_LABELS: dict[PipelineState, str] = {
    PipelineState.ROUTING: "Content Routing",
    PipelineState.DIRECT_ANALYSIS: "Direct Analysis",
    PipelineState.CHUNKED_ANALYSIS: "Chunked Analysis",
    PipelineState.SYNTHESIZING: "Synthesis",
    PipelineState.PERSISTING: "Saving Results",
}

SIZE_UNKNOWN_NOTE = "(Note: the file size could not be verified before analysis.)"


@dataclass
class _JobRun:
    job: AnalysisJob
    activity: ActivityRecorder
    state: PipelineState = PipelineState.GATING
    content_hash: ContentHash | None = None
    size_unknown: bool = False
    notes: list[str] = field(default_factory=list)

    @property
    def fallback_name(self) -> str:
        return basename(self.job.storage_path) or f"document-{self.job.document_id}"


class PipelineOrchestrator:
    """Runs one document through the analysis pipeline.

    `run` never raises: every failure is recorded (activity event, metadata,
    case status) and reported through the returned AnalysisOutcome.
    """

    def __init__(
        self,
        *,
        blob_store: BaseBlobStore,
        metadata_store: CaseFilesRepository,
        activity_sink: ActivityRepository,
        case_store: CaseRepository,
        client_factory: ModelClientFactory,
        pdf_extractor: BasePdfExtractor,
        prompts: PromptBuilder,
        config: AnalysisConfig,
    ) -> None:
        self._blob_store = blob_store
        self._metadata_store = metadata_store
        self._activity_sink = activity_sink
        self._case_store = case_store
        self._client_factory = client_factory
        self._pdf_extractor = pdf_extractor
        self._prompts = prompts
        self._config = config

    def run(self, request: AnalysisRequest, job_id: int) -> AnalysisOutcome:
        job = AnalysisJob(
            job_id=job_id,
            case_id=request.case_id,
            document_id=request.document_id,
            storage_path=request.storage_path,
        )
        run = _JobRun(
            job=job,
            activity=ActivityRecorder(self._activity_sink, job_id=job_id, case_id=request.case_id),
        )
        try:
            return self._execute(run)
        except Exception as exc:
            return self._fail(run, exc)

    def _execute(self, run: _JobRun) -> AnalysisOutcome:
        job = run.job
        run.activity.processing(
            "Analysis Started", f"Starting analysis for file: {job.storage_path}"
        )

        # Gating
        job.size_bytes = self._resolve_size(job.storage_path)
        decision = evaluate_size(job.size_bytes, self._config.max_file_size_bytes)
        if not decision.eligible:
            return self._finish_skipped(run, decision.reason or "exceeds size limit")
        run.size_unknown = decision.size_unknown

        blob = self._blob_store.download(job.storage_path)
        job.content_type = blob.content_type
        run.content_hash = compute_content_hash(blob.data)
        Log.info(f"Downloaded {len(blob.data)} bytes ({blob.content_type}) for job {job.job_id}")

        # Routing
        strategy = route_content(blob.content_type)
        self._transition(
            run,
            PipelineState.ROUTING,
            f"Content type {blob.content_type} routed to {strategy.value} analysis.",
        )
        if strategy is AnalysisStrategy.UNSUPPORTED:
            return self._finish_unsupported(run)

        client = self._client_factory.create(self._case_store.get_ai_provider(job.case_id))
        Log.info(f"Job {job.job_id} uses model provider '{client.name}'")
        try:
            result = self._analyze(run, strategy, blob, client)
        finally:
            client.close()

        # Persisting
        self._transition(run, PipelineState.PERSISTING, "Saving analysis results.")
        if run.size_unknown:
            run.notes.append(SIZE_UNKNOWN_NOTE)
        description = "\n\n".join([result.description, *run.notes])
        self._metadata_store.update_record(
            job.document_id,
            DocumentUpdate(
                description=description,
                suggested_name=result.suggested_name,
                tags=result.tags,
                category=result.category,
                content_hash=run.content_hash,
            ),
        )

        self._transition(run, PipelineState.DONE)
        run.activity.completed(
            "Analysis Complete",
            f"Successfully analyzed and hashed file: {job.storage_path}. "
            f"New name: {result.suggested_name}",
        )
        return AnalysisOutcome(
            status=OutcomeStatus.COMPLETED,
            result=StructuredResult(
                suggested_name=result.suggested_name,
                description=description,
                tags=result.tags,
                category=result.category,
            ),
            content_hash=run.content_hash,
        )

    def _analyze(
        self,
        run: _JobRun,
        strategy: AnalysisStrategy,
        blob: StoredBlob,
        client: BaseModelClient,
    ) -> StructuredResult:
        invoker = RetryingModelInvoker(
            max_retries=self._config.max_retries,
            initial_delay_seconds=self._config.retry_initial_delay_seconds,
        )
        analyzer = DocumentAnalyzer(client=client, invoker=invoker, activity=run.activity)

        if strategy is AnalysisStrategy.IMAGE:
            return self._analyze_attachment(run, analyzer, blob, subject="image")

        if strategy is AnalysisStrategy.DOCUMENT:
            pdf = self._pdf_extractor.read(blob.data)
            if not pdf.has_text_layer:
                Log.info(
                    f"Job {run.job.job_id}: none of {len(pdf.pages)} PDF pages has a text layer, "
                    "sending the file inline"
                )
                return self._analyze_attachment(run, analyzer, blob, subject="document")
            Log.info(
                f"Job {run.job.job_id}: text layer found on {pdf.pages_with_text} "
                f"of {len(pdf.pages)} PDF pages"
            )
            text = pdf.text
        else:
            text = decode_text(blob.data)

        if not text.strip():
            raise EmptyDocumentError(f"File {run.job.storage_path} contains no readable text.")

        if not needs_chunking(text, self._config.chunk_size):
            self._transition(
                run,
                PipelineState.DIRECT_ANALYSIS,
                f"Analyzing {len(text)} characters in a single request.",
            )
            request = ModelRequest(
                prompt=self._prompts.document(text), temperature=self._config.temperature
            )
            return analyzer.analyze(
                request,
                description="Document analysis",
                fallback_name=run.fallback_name,
            )
        return self._analyze_chunked(run, text, client, invoker, analyzer)

    def _analyze_attachment(
        self,
        run: _JobRun,
        analyzer: DocumentAnalyzer,
        blob: StoredBlob,
        *,
        subject: str,
    ) -> StructuredResult:
        self._transition(
            run,
            PipelineState.DIRECT_ANALYSIS,
            f"Analyzing {subject} content ({blob.content_type}) in a single request.",
        )
        request = ModelRequest(
            prompt=self._prompts.attachment(subject),
            parts=(InlinePart(mime_type=blob.content_type, data=blob.data),),
            temperature=self._config.temperature,
        )
        return analyzer.analyze(
            request,
            description=f"{subject.capitalize()} analysis",
            fallback_name=run.fallback_name,
        )

    def _analyze_chunked(
        self,
        run: _JobRun,
        text: str,
        client: BaseModelClient,
        invoker: RetryingModelInvoker,
        analyzer: DocumentAnalyzer,
    ) -> StructuredResult:
        chunks = split_text(text, self._config.chunk_size)
        self._transition(
            run,
            PipelineState.CHUNKED_ANALYSIS,
            f"Document has {len(text)} characters; processing {len(chunks)} chunks "
            f"in batches of {self._config.batch_size}.",
        )
        chunk_analyzer = ChunkAnalyzer(
            client=client,
            invoker=invoker,
            prompts=self._prompts,
            activity=run.activity,
            chunk_count=len(chunks),
            temperature=self._config.temperature,
        )
        scheduler = BatchScheduler(
            batch_size=self._config.batch_size,
            batch_delay_seconds=self._config.batch_delay_seconds,
        )
        outcomes = scheduler.run(chunks, chunk_analyzer, run.activity)

        succeeded = sum(1 for outcome in outcomes if isinstance(outcome, ChunkSuccess))
        if succeeded:
            self._transition(
                run,
                PipelineState.SYNTHESIZING,
                f"{succeeded} of {len(chunks)} chunks summarized; synthesizing the final result.",
            )
        synthesizer = Synthesizer(
            analyzer=analyzer,
            prompts=self._prompts,
            temperature=self._config.temperature,
        )
        synthesis = synthesizer.synthesize(outcomes, run.fallback_name)
        if synthesis.omitted_chunks:
            run.notes.append(
                f"(Note: {synthesis.omitted_chunks} of {len(chunks)} sections could not be "
                "analyzed and are not reflected in this summary.)"
            )
        return synthesis.result

    def _finish_skipped(self, run: _JobRun, reason: str) -> AnalysisOutcome:
        job = run.job
        self._transition(run, PipelineState.PERSISTING)
        self._metadata_store.update_record(
            job.document_id,
            DocumentUpdate(
                description=f"Skipped: exceeds size limit. {reason}; the file was not analyzed."
            ),
        )
        self._transition(run, PipelineState.DONE)
        run.activity.completed(
            "Analysis Skipped", f"Skipped analysis of {job.storage_path}: {reason}."
        )
        return AnalysisOutcome(status=OutcomeStatus.SKIPPED)

    def _finish_unsupported(self, run: _JobRun) -> AnalysisOutcome:
        job = run.job
        self._transition(run, PipelineState.PERSISTING)
        self._metadata_store.update_record(
            job.document_id,
            DocumentUpdate(
                description=f"File type ({job.content_type}) not supported for summarization.",
                content_hash=run.content_hash,
            ),
        )
        self._transition(run, PipelineState.DONE)
        run.activity.completed(
            "File Hashing Complete",
            "File type not supported for summarization, "
            f"but hash was calculated for: {job.storage_path}.",
        )
        return AnalysisOutcome(status=OutcomeStatus.UNSUPPORTED, content_hash=run.content_hash)

    def _fail(self, run: _JobRun, exc: Exception) -> AnalysisOutcome:
        """Record a failure everywhere the user can see it; persistence here is best effort."""
        job = run.job
        message = str(exc) or exc.__class__.__name__
        Log.exception(f"Job {job.job_id} failed during {run.state.value}: {message}")
        run.state = PipelineState.FAILED
        run.activity.error(
            "Analysis Failed", f"Error processing file {job.storage_path}: {message}"
        )

        try:
            self._metadata_store.update_record(
                job.document_id,
                DocumentUpdate(
                    description=f"Analysis failed: {message}",
                    content_hash=run.content_hash,
                ),
            )
        except Exception as persist_exc:
            Log.warning(
                f"Job {job.job_id}: could not record failure on document "
                f"{job.document_id}: {persist_exc}"
            )
        try:
            self._case_store.update_status(job.case_id, ERROR_STATUS, message)
        except Exception as status_exc:
            Log.warning(
                f"Job {job.job_id}: could not update status of case {job.case_id}: {status_exc}"
            )

        return AnalysisOutcome(
            status=OutcomeStatus.FAILED, error=message, content_hash=run.content_hash
        )

    def _transition(self, run: _JobRun, target: PipelineState, message: str | None = None) -> None:
        if target not in _TRANSITIONS[run.state]:
            raise IllegalStateTransitionError(
                f"Illegal pipeline transition {run.state.value} -> {target.value}"
            )
        Log.debug(f"Job {run.job.job_id}: {run.state.value} -> {target.value}")
        run.state = target
        if message is not None and target not in _TERMINAL_STATES:
            run.activity.processing(_PHASE_LABELS[target], message)

    def _resolve_size(self, storage_path: str) -> int | None:
        """Look the file up in its directory listing; None when size is unavailable."""
        directory, _, name = storage_path.rpartition("/")
        try:
            entries = self._blob_store.list(directory, name)
        except StorageError as exc:
            Log.warning(f"Could not list {directory!r} to check size of {name!r}: {exc}")
            return None
        for entry in entries:
            if entry.name == name:
                return entry.size
        Log.warning(f"{storage_path} not found in storage listing; size unknown")
        return None


def decode_text(data: bytes) -> str:
    """Decode text-like content, tolerating a BOM and invalid bytes."""
    return data.decode("utf-8-sig", errors="replace")
