"""Analysis pipeline: host the image, ask the vision model, interpret."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from foodlens_backend.models import NO_FOOD, AnalysisResult, ImageBlob
from foodlens_backend.services.errors import PipelineError
from foodlens_backend.services.hosting import ImageHostClient
from foodlens_backend.services.interpretation import interpret
from foodlens_backend.services.llm import VisionModelClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProgressMilestone:
    """Stage boundary reported to progress observers.

    Milestones arrive at irregular intervals; ``percent`` marks position in
    the sequence, not elapsed time.
    """

    step: int
    percent: int
    label: str


UPLOADING = ProgressMilestone(step=1, percent=33, label="uploading")
ANALYZING = ProgressMilestone(step=2, percent=66, label="analyzing")
COMPLETE = ProgressMilestone(step=3, percent=100, label="complete")

ProgressObserver = Callable[[ProgressMilestone], None]


@dataclass(frozen=True, slots=True)
class AnalysisOutcome:
    """What the caller displays plus the failure behind it, if any.

    ``result`` is ``NoFood`` whenever ``error`` is set.
    """

    result: AnalysisResult
    error: Optional[PipelineError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class AnalysisPipeline:
    """Run one image through hosting, classification and interpretation."""

    def __init__(
        self,
        *,
        host_client: ImageHostClient,
        vision_client: VisionModelClient,
        progress: ProgressObserver | None = None,
    ) -> None:
        self._host_client = host_client
        self._vision_client = vision_client
        self._progress = progress

    def _report(self, milestone: ProgressMilestone) -> None:
        logger.debug(
            "analysis progress",
            extra={"step": milestone.step, "percent": milestone.percent},
        )
        if self._progress is None:
            return
        try:
            self._progress(milestone)
        except Exception:  # noqa: BLE001 - observers must not break analysis
            logger.exception("progress observer failed at step %s", milestone.step)

    def run(self, blob: ImageBlob) -> AnalysisResult:
        """Analyze ``blob``, raising ``PipelineError`` on failure."""

        self._vision_client.ensure_configured()

        self._report(UPLOADING)
        image_ref = self._host_client.host_image(blob)

        self._report(ANALYZING)
        llm_result = self._vision_client.classify_food(image_ref)
        result = interpret(llm_result.raw_text)

        self._report(COMPLETE)
        return result

    def analyze(self, blob: ImageBlob) -> AnalysisOutcome:
        """Analyze ``blob``; failures resolve to ``NoFood`` with the error kept."""

        try:
            return AnalysisOutcome(result=self.run(blob))
        except PipelineError as exc:
            logger.warning(
                "analysis failed; reporting no food: %s",
                exc,
                extra={
                    "error_type": type(exc).__name__,
                    "cause": exc.cause_message,
                },
            )
            return AnalysisOutcome(result=NO_FOOD, error=exc)
        except Exception as exc:  # noqa: BLE001 - never surface raw failures
            logger.exception("unexpected analysis failure")
            return AnalysisOutcome(
                result=NO_FOOD,
                error=PipelineError(
                    "unexpected analysis failure", cause_message=repr(exc)
                ),
            )
