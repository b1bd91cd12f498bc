from pathlib import Path

from app.analysis.config import AnalysisConfig
from app.analysis.orchestrator import PipelineOrchestrator
from app.analysis.prompt_builder import PromptBuilder
from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.database.repositories.activity_repository import ActivityRepository
from app.database.repositories.case_files_repository import CaseFilesRepository
from app.database.repositories.case_repository import CaseRepository
from app.database.repositories.job_repository import JobRepository
from app.logging.logger import Log
from app.pdf.factory import PdfExtractorFactory
from app.providers.factory import ModelClientFactory
from app.storage.local_store import LocalBlobStore
from app.worker.job_runner import JobRunner
from app.worker.worker import Worker


def build_orchestrator(settings: Settings) -> PipelineOrchestrator:
    """Wire the analysis pipeline with its storage, database and model collaborators."""
    return PipelineOrchestrator(
        blob_store=LocalBlobStore(files_root=Path(settings.files_root)),
        metadata_store=CaseFilesRepository(),
        activity_sink=ActivityRepository(),
        case_store=CaseRepository(),
        client_factory=ModelClientFactory(settings),
        pdf_extractor=PdfExtractorFactory.create(settings),
        prompts=PromptBuilder(),
        config=AnalysisConfig.from_settings(settings),
    )


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        job_repo = JobRepository()
        job_runner = JobRunner(build_orchestrator(settings), job_repo)
        worker = Worker(job_repo, job_runner, settings)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
