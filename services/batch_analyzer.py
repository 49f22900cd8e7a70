"""Sequential batch analysis of uploaded skin images.

Each image is sent to the remote analyzer in order, one call at a time. For
patients every finished case is upserted before the next image starts, so a
failure part-way through leaves the earlier cases in the history. The first
failure aborts the rest of the batch; nothing is rolled back.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

from dal.case_dal import CaseDAL
from models.account_models import User
from models.batch_models import BatchImage, BatchState
from models.case_models import CasePrediction, CaseRecord
from models.errors import RemoteAnalysisError, ValidationError
from models.message_models import utc_now_iso

LOGGER = logging.getLogger(__name__)


class RemoteAnalyzer(Protocol):
    async def analyze(
        self,
        image_bytes: bytes,
        *,
        mime_type: str,
        role: str,
        patient_name: str,
        notes: str = "",
    ) -> CasePrediction: ...


def image_label(name: str, index: int, total: int) -> str:
    """Patient label for the `index`-th (1-based) of `total` images."""
    return f"{name} (Image {index}/{total})"


class BatchAnalyzer:
    """Run one batch at a time: Idle -> Running -> Completed | Failed.

    Attributes:
        state: Current `BatchState`.
        results: Cases produced by the last (or running) batch.
        error: The failure of the last batch, if it failed.
    """

    def __init__(self, analyzer: RemoteAnalyzer, cases: CaseDAL) -> None:
        self.analyzer = analyzer
        self.cases = cases
        self.state = BatchState.IDLE
        self.results: List[CaseRecord] = []
        self.error: Optional[RemoteAnalysisError] = None

    def reset(self) -> None:
        """Drop the last batch's results and return to Idle."""
        self.state = BatchState.IDLE
        self.results = []
        self.error = None

    async def run(self, images: Sequence[BatchImage], user: User, notes: str = "") -> List[CaseRecord]:
        """Analyze `images` in order on behalf of `user`.

        Returns:
            The produced cases, in input order.

        Raises:
            ValidationError: `images` is empty or a batch is already running.
            RemoteAnalysisError: Analysis of image k failed; its `image_index` is k.
        """
        if not images:
            raise ValidationError("Please upload at least one image before analyzing.")
        if self.state is BatchState.RUNNING:
            raise ValidationError("An analysis is already in progress.")

        self.reset()
        self.state = BatchState.RUNNING
        total = len(images)
        try:
            for index, image in enumerate(images, start=1):
                case = await self._analyze_one(image, index, total, user, notes)
                if user.role == "patient":
                    await self.cases.upsert(case)
                self.results.append(case)
        except RemoteAnalysisError as exc:
            self.state = BatchState.FAILED
            self.error = exc
            LOGGER.error("Batch aborted at image %s/%s: %s", exc.image_index, total, exc)
            raise
        self.state = BatchState.COMPLETED
        return list(self.results)

    async def _analyze_one(self, image: BatchImage, index: int, total: int, user: User, notes: str) -> CaseRecord:
        try:
            prediction = await self.analyzer.analyze(
                image.image_bytes,
                mime_type=image.mime_type,
                role=user.role,
                patient_name=image_label(user.name, index, total),
                notes=notes,
            )
        except Exception as exc:
            name = f" ({image.filename})" if image.filename else ""
            raise RemoteAnalysisError(
                f"Analysis failed on image {index} of {total}{name}: {exc}", image_index=index
            ) from exc

        return CaseRecord(
            **prediction.model_dump(),
            timestamp=utc_now_iso(),
            imagePreviewUrl=image.preview_url,
            userEmail=user.email,
        )
