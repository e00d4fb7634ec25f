"""Work items and the per-run result accumulator."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

ASSET_NOT_FOUND = "asset not found"
DUPLICATE_IDENTIFIER = "duplicate identifier"


@dataclass(frozen=True)
class WorkItem:
    identifier: str
    template_path: Path
    matched_asset_path: Optional[Path] = None


@dataclass
class BatchResult:
    """Outcome of one run. Append-only until :meth:`finalize`.

    Duplicate files are listed in ``failures`` under their file name but do
    not claim an identifier, so a later file whose identifier happens to
    equal that name is still processed.
    """

    processed: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)
    outputs: Dict[str, Path] = field(default_factory=dict)
    no_inputs: bool = False
    finalized: bool = False
    _claimed: Set[str] = field(default_factory=set, init=False, repr=False)

    @property
    def processed_count(self) -> int:
        return len(self.processed)

    @property
    def skipped_count(self) -> int:
        return len(self.failures)

    def seen(self, identifier: str) -> bool:
        return identifier in self._claimed

    def record_success(self, identifier: str, output_path: Path) -> None:
        self._claim(identifier)
        self.processed.append(identifier)
        self.outputs[identifier] = output_path

    def record_skip(self, identifier: str, reason: str) -> None:
        self._claim(identifier)
        self.failures.append((identifier, reason))

    def record_duplicate(self, file_name: str) -> None:
        self._check_open()
        self.failures.append((file_name, DUPLICATE_IDENTIFIER))

    def finalize(self) -> "BatchResult":
        self.finalized = True
        return self

    def as_dict(self) -> dict:
        return {
            "processed_count": self.processed_count,
            "skipped_count": self.skipped_count,
            "processed": list(self.processed),
            "failures": [{"identifier": i, "reason": r} for i, r in self.failures],
            "outputs": {k: str(v) for k, v in self.outputs.items()},
            "no_inputs": self.no_inputs,
        }

    def _claim(self, identifier: str) -> None:
        self._check_open()
        if identifier in self._claimed:
            raise ValueError(f"identifier already has an outcome: {identifier}")
        self._claimed.add(identifier)

    def _check_open(self) -> None:
        if self.finalized:
            raise RuntimeError("result is finalized")
