"""Session holding the current model and its reveals.

The session runs the four user actions (load a model file, train, classify,
evaluate) against a :class:`ClassifierService` and owns at most one
construction reveal and one path reveal at a time.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncGenerator, Set

from decision_reveal.core._config import Settings, settings as default_settings
from decision_reveal.core._exceptions import DataError, MalformedModel
from decision_reveal.path import ClassificationResult, DecisionPath, PathAlignment
from decision_reveal.path import align_path
from decision_reveal.reveal import BuildProgress, ConstructionReveal, PathReveal
from decision_reveal.reveal import Sleep, replay_reconstruction
from decision_reveal.tree import DecodedModel, TreeNode, decode_structured
from decision_reveal.tree import decode_text
from ._metrics import MetricsReport
from ._service import ClassifierService


logger = logging.getLogger(__name__)

LOAD_FAILED_MESSAGE = "Failed to load model"


class Session:
    """The current model of one observer, with its reveal animations.

    Args:
        service: The classifier service.
        settings: Timing and matching settings. Defaults to the global settings.
        sleep: Coroutine function used by every timer of the session.
    """

    def __init__(
        self,
        service: ClassifierService,
        *,
        settings: Settings | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.service = service
        self.settings = settings or default_settings
        self.ready = False
        self.progress: BuildProgress | None = None
        self.metrics: MetricsReport | None = None
        self.construction: ConstructionReveal | None = None
        self.path_reveal: PathReveal | None = None

        self._sleep = sleep
        self._model: DecodedModel | None = None
        self._classify_seq = 0
        self._timers: Set[asyncio.Task[None]] = set()

    async def __aenter__(self) -> Session:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def model(self) -> DecodedModel | None:
        return self._model

    @property
    def tree(self) -> TreeNode | None:
        """The current tree, ``None`` if no model is loaded."""
        return self._model.tree if self._model is not None else None

    def get_current_tree(self) -> TreeNode | None:
        return self.tree

    @property
    def visible_path(self) -> DecisionPath:
        return self.path_reveal.visible_path if self.path_reveal is not None else ()

    @property
    def label(self) -> str | None:
        """The predicted label, once the path reveal has surfaced it."""
        return self.path_reveal.label if self.path_reveal is not None else None

    @property
    def highlighting(self) -> bool:
        return self.path_reveal is not None and self.path_reveal.highlighting

    @property
    def building(self) -> bool:
        return self.construction is not None and self.construction.active

    def is_revealed(self, rank: int) -> bool:
        """Whether the node at ``rank`` is visible in the construction reveal.

        Ranks outside the current tree are never visible.
        """
        if self._model is None or not 0 <= rank < self._model.node_count:
            return False
        if self.construction is None:
            return True
        return self.construction.is_revealed(rank)

    def highlights(self) -> PathAlignment:
        """Alignment of the current tree with the visible part of the path."""
        return align_path(
            self.tree, self.visible_path, tolerance=self.settings.THRESHOLD_TOLERANCE
        )

    def _emit(self, progress: BuildProgress) -> BuildProgress:
        self.progress = progress
        return progress

    def _later(self, delay: float, reason: str) -> None:
        async def clear() -> None:
            await self._sleep(delay)
            logger.debug(f"Clearing progress after {reason}")
            self.progress = None

        self._cancel_timers()
        task = asyncio.get_running_loop().create_task(clear(), name=f"clear-{reason}")
        self._timers.add(task)
        task.add_done_callback(self._timers.discard)

    def _cancel_timers(self) -> None:
        for timer in list(self._timers):
            timer.cancel()

    def clear_path(self) -> None:
        """Cancel the path reveal and forget the previous classification."""
        if self.path_reveal is not None:
            self.path_reveal.cancel()
        self.path_reveal = None

    def _install(self, model: DecodedModel | None, animate: bool) -> None:
        if self.construction is not None:
            self.construction.cancel()
        self.construction = None
        self.clear_path()
        self._model = model
        # Classifications still awaiting the service belong to the old model.
        self._classify_seq += 1

        if model is None or not animate:
            return
        self.construction = ConstructionReveal(
            model,
            pacing=self.settings.PACING_INDEX,
            tick_interval=self.settings.BUILD_TICK_SECONDS,
            grace=self.settings.BUILD_GRACE_SECONDS,
            sleep=self._sleep,
        )
        self.construction.start()

    async def refresh_ready(self) -> bool:
        """Ask the service whether it can classify. Failures count as not ready."""
        try:
            self.ready = bool(await self.service.is_ready())
        except Exception as e:
            logger.warning(f"Readiness check failed: {e}")
            self.ready = False
        return self.ready

    async def load_model(self, text: str | bytes) -> AsyncGenerator[BuildProgress, None]:
        """Load a model file, yielding progress while it is reconstructed.

        The file is decoded locally first. A malformed file yields an ``error``
        event and raises, leaving the current model and its reveals untouched.
        Otherwise each node is replayed as a progress event, the file is sent
        to the service and the new tree's construction reveal starts.

        Raises:
            MalformedModel: If the file cannot be decoded.
        """
        self._cancel_timers()
        yield self._emit(BuildProgress(phase="start", message="Reading model file..."))
        try:
            decoded = decode_text(text)
        except MalformedModel as e:
            logger.warning(f"Rejected model file: {e}")
            yield self._emit(BuildProgress.failed(LOAD_FAILED_MESSAGE))
            raise e

        async for progress in replay_reconstruction(
            decoded, tick=self.settings.RECONSTRUCT_TICK_SECONDS, sleep=self._sleep
        ):
            yield self._emit(progress)

        raw = text if isinstance(text, str) else bytes(text).decode("utf-8-sig")
        try:
            await self.service.load_model(raw)
        except Exception as e:
            logger.warning(f"Classifier rejected the model: {e}")
            yield self._emit(BuildProgress.failed(LOAD_FAILED_MESSAGE))
            raise e

        await self.refresh_ready()
        self._install(decoded, animate=True)
        self._later(self.settings.RECONSTRUCT_CLEAR_SECONDS, "load")
        yield self._emit(
            BuildProgress.done(decoded.node_count, "Model loaded successfully!")
        )

    async def train(
        self, data: bytes, label_column: str = "label"
    ) -> AsyncGenerator[BuildProgress, None]:
        """Train a model on the service and reveal the resulting tree.

        Yields a ``start`` event, then ``done`` or ``error``.

        Raises:
            DataError: If the service reports no tree after training.
            MalformedModel: If the returned tree breaks the tree invariants.
        """
        self._cancel_timers()
        yield self._emit(BuildProgress(phase="start", message="Uploading file..."))
        try:
            await self.service.train(data, label_column or "label")
            payload = await self.service.get_tree()
            if payload is None:
                raise DataError("Classifier returned no tree after training")
            decoded = decode_structured(payload)
        except Exception as e:
            logger.warning(f"Training failed: {e}")
            yield self._emit(BuildProgress.failed(f"Training failed: {e}"))
            raise e

        await self.refresh_ready()
        self._install(decoded, animate=True)
        self._later(self.settings.TRAIN_CLEAR_SECONDS, "train")
        yield self._emit(
            BuildProgress.done(
                decoded.node_count, "Training complete! Model ready to use."
            )
        )

    async def reload_tree(self, animate: bool = True) -> TreeNode | None:
        """Fetch the service's current tree, optionally replaying its construction.

        On failure no tree is kept and the error propagates.
        """
        self.clear_path()
        try:
            payload = await self.service.get_tree()
            model = decode_structured(payload) if payload is not None else None
        except Exception:
            self._install(None, animate=False)
            raise
        self._install(model, animate=animate)
        logger.info(f"Tree loaded: {model.node_count if model else 0} nodes")
        return self.tree

    async def classify(self, text: str) -> PathReveal:
        """Classify ``text`` and start revealing its decision path.

        Any path reveal in flight is cancelled first and the previous path,
        label and highlight are cleared. If another classification starts or
        the model changes while the service is answering, this one is dropped
        and its reveal is returned unstarted.
        """
        self._classify_seq += 1
        seq = self._classify_seq
        self.clear_path()

        response = await self.service.classify(text)
        result = (
            response
            if isinstance(response, ClassificationResult)
            else ClassificationResult.model_validate(response)
        )
        reveal = PathReveal(
            result,
            tick_interval=self.settings.PATH_TICK_SECONDS,
            label_delay=self.settings.LABEL_DELAY_SECONDS,
            sleep=self._sleep,
        )
        if seq != self._classify_seq:
            logger.info("Dropping a classification made stale by a newer request or model")
            return reveal

        self.clear_path()
        self.path_reveal = reveal
        reveal.start()
        return reveal

    async def evaluate(self, data: bytes, label_column: str = "label") -> MetricsReport:
        """Evaluate the current model on a labelled test set."""
        response = await self.service.evaluate(data, label_column or "label")
        report = (
            response
            if isinstance(response, MetricsReport)
            else MetricsReport.model_validate(response)
        )
        self.metrics = report
        logger.info(f"Overall accuracy: {report.overall:.4f}")
        return report

    async def aclose(self) -> None:
        """Cancel every reveal and timer of the session."""
        pending = [r for r in (self.construction, self.path_reveal) if r is not None]
        for reveal in pending:
            reveal.cancel()
        self._cancel_timers()
        for reveal in pending:
            await reveal.wait()
        if self._timers:
            await asyncio.wait(set(self._timers))
