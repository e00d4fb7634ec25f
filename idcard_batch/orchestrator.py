"""Batch loop: enumerate inputs, process them one at a time, report.

One run walks ``IDLE -> ENUMERATING -> PROCESSING_ITEMS -> REPORTING -> DONE``.
A missing input folder stops the run before anything is written. Everything
that goes wrong with a single item is recorded against that item and the
loop moves on.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from .errors import AssetNotFound, BatchError, MissingInputDirectory, NoTemplatesFound
from .geometry import FLATTENED_PLACEMENT, LAYERED_PLACEMENT, PlacementSpec, compute_translation
from .host import EditingHost, ExportFormat, ResampleMethod, SaveOptions
from .models import ASSET_NOT_FOUND, DUPLICATE_IDENTIFIER, BatchResult, WorkItem
from .naming import (
    DEFAULT_ASSET_EXTENSIONS,
    DEFAULT_RESIZE_EXTENSIONS,
    DEFAULT_TEMPLATE_EXTENSIONS,
    extract_identifier,
    find_asset,
    list_files,
)
from .report import log_summary
from .resizer import ResizeMode, ResizeSpec, compute_resize

log = logging.getLogger(__name__)


class RunState(enum.Enum):
    IDLE = "idle"
    ENUMERATING = "enumerating"
    PROCESSING_ITEMS = "processing_items"
    REPORTING = "reporting"
    DONE = "done"


@dataclass(frozen=True)
class CompositeJob:
    """Place each matching photo into its template and export."""

    templates_dir: Path
    assets_dir: Path
    output_dir: Path
    export: ExportFormat = ExportFormat.PSD
    placement: Optional[PlacementSpec] = None
    photo_size: Optional[ResizeSpec] = None
    resample: ResampleMethod = ResampleMethod.BICUBIC_SHARPER
    template_extensions: Sequence[str] = DEFAULT_TEMPLATE_EXTENSIONS
    asset_extensions: Sequence[str] = DEFAULT_ASSET_EXTENSIONS
    save_options: SaveOptions = SaveOptions()

    @property
    def effective_placement(self) -> PlacementSpec:
        if self.placement is not None:
            return self.placement
        return LAYERED_PLACEMENT if self.export.layered else FLATTENED_PLACEMENT


@dataclass(frozen=True)
class ResizeJob:
    """Normalise every image in ``input_dir`` to one size, saved as JPEG."""

    input_dir: Path
    output_dir: Path
    spec: ResizeSpec
    resample: ResampleMethod = ResampleMethod.BICUBIC_SHARPER
    extensions: Sequence[str] = DEFAULT_RESIZE_EXTENSIONS
    save_options: SaveOptions = SaveOptions()


Job = Union[CompositeJob, ResizeJob]


def _require_dir(role, path):
    path = Path(path)
    if not path.is_dir():
        raise MissingInputDirectory(role, path)
    return path


class BatchOrchestrator:
    def __init__(self, host: EditingHost, job: Job):
        self.host = host
        self.job = job
        self.state = RunState.IDLE
        self.result = BatchResult()

    def run(self) -> BatchResult:
        if self.state is not RunState.IDLE:
            raise RuntimeError(f"orchestrator already ran (state: {self.state.value})")

        inputs = self._enumerate()
        if not inputs:
            self.result.no_inputs = True
        else:
            self.state = RunState.PROCESSING_ITEMS
            log.info("Found %d files. Starting batch...", len(inputs))
            for path in inputs:
                self._process(path)

        self.state = RunState.REPORTING
        self.result.finalize()
        log_summary(self.result, self.job.output_dir)
        self.state = RunState.DONE
        return self.result

    def _enumerate(self):
        self.state = RunState.ENUMERATING
        job = self.job
        if isinstance(job, CompositeJob):
            role, source = "Template", _require_dir("Template", job.templates_dir)
            _require_dir("Photo", job.assets_dir)
            extensions = job.template_extensions
        else:
            role, source = "Input", _require_dir("Input", job.input_dir)
            extensions = job.extensions

        log.info("Scanning directory: %s", source)
        try:
            inputs = list_files(source, extensions)
        except OSError as exc:
            raise MissingInputDirectory(role, source) from exc
        if not inputs:
            log.info("ℹ️ %s", NoTemplatesFound(source, extensions))
        Path(job.output_dir).mkdir(parents=True, exist_ok=True)
        return inputs

    def _process(self, path: Path) -> None:
        if isinstance(self.job, CompositeJob):
            item = self._match(path)
            if item is not None:
                self._attempt(item.identifier, self._composite, item)
            return

        identifier = extract_identifier(path.name)
        if self.result.seen(identifier):
            self._skip_duplicate(path.name)
            return
        self._attempt(identifier, self._resize, path, identifier)

    def _attempt(self, identifier, work, *args) -> None:
        try:
            output = work(*args)
        except (BatchError, OSError) as exc:
            log.warning("❌ Failed %s: %s", identifier, exc)
            self.result.record_skip(identifier, str(exc) or exc.__class__.__name__)
            return
        self.result.record_success(identifier, output)
        log.info("✅ Processed: %s", identifier)

    def _skip_duplicate(self, file_name):
        log.info("⚠️ Skipping '%s': %s", file_name, DUPLICATE_IDENTIFIER)
        self.result.record_duplicate(file_name)

    # --- composite ---

    def _match(self, template: Path) -> Optional[WorkItem]:
        job = self.job
        identifier = extract_identifier(template.name, _matching_extension(template, job.template_extensions))
        if self.result.seen(identifier):
            self._skip_duplicate(template.name)
            return None

        asset = find_asset(identifier, job.assets_dir, job.asset_extensions)
        return WorkItem(identifier=identifier, template_path=template, matched_asset_path=asset)

    def _composite(self, item: WorkItem) -> Path:
        job = self.job
        host = self.host
        if item.matched_asset_path is None:
            raise AssetNotFound(ASSET_NOT_FOUND)
        output = Path(job.output_dir) / f"{item.identifier}{job.export.suffix}"

        doc = host.open_document(item.template_path)
        try:
            layer = host.place_image(doc, item.matched_asset_path)
            if job.photo_size is not None:
                bounds = host.measure_bounds(layer)
                plan = compute_resize(int(bounds.width), int(bounds.height), job.photo_size)
                host.resize_layer(layer, *plan.scaled_size, job.resample)

            dx, dy = compute_translation(host.measure_bounds(layer), job.effective_placement)
            host.translate(layer, dx, dy)

            if not job.export.layered:
                host.flatten(doc)
            host.save_as(doc, output, job.export, job.save_options)
        finally:
            host.close(doc, discard_changes=True)
        return output

    # --- resize ---

    def _resize(self, path: Path, identifier: str) -> Path:
        job = self.job
        host = self.host
        output = Path(job.output_dir) / f"{identifier}{ExportFormat.JPEG.suffix}"

        doc = host.open_document(path)
        try:
            width, height = host.document_size(doc)
            plan = compute_resize(width, height, job.spec)
            host.resize_image(doc, *plan.scaled_size, job.resample)
            if job.spec.mode is ResizeMode.FIT_WITH_PADDING and plan.needs_canvas:
                host.resize_canvas(doc, *plan.canvas_size, plan.offset)
            host.flatten(doc)
            host.save_as(doc, output, ExportFormat.JPEG, job.save_options)
        finally:
            host.close(doc, discard_changes=True)
        return output


def _matching_extension(path: Path, extensions):
    suffix = path.suffix.lower()
    for ext in extensions:
        if ext.lower() == suffix:
            return ext
    return None
